# tests/property/test_token_properties.py
"""Property-based tests for token substitution.

Pass-through Properties:
- Text without a brace is returned unchanged by both passes, in every format
- Unknown tokens come back exactly as written, never encoded

Encoding Properties:
- URL formats produce only unreserved characters and decode back to the value
- The template grammar never loses text
"""

from __future__ import annotations

import string
from datetime import UTC, datetime
from urllib.parse import unquote, unquote_plus

from hypothesis import given
from hypothesis import strategies as st

from formflow.contracts.enums import TokenFormat
from formflow.contracts.request import RequestContext
from formflow.core.clock import MockClock
from formflow.core.config import FormflowSettings
from formflow.core.form import Form
from formflow.tokens.engine import TokenEngine
from formflow.tokens.parser import parse, render
from tests.helpers.forms import build_form, contact_form, make_submission
from tests.property.settings import QUICK_SETTINGS, STANDARD_SETTINGS

# =============================================================================
# Strategies
# =============================================================================

# Lone surrogates cannot be UTF-8 encoded and never reach a real request
printable_text = st.text(alphabet=st.characters(blacklist_categories=("Cs",)), max_size=80)

brace_free_text = printable_text.filter(lambda s: "{" not in s)

# Names that no resolver claims
unknown_names = st.text(alphabet=string.ascii_lowercase + "_", min_size=1, max_size=12).map(lambda s: "zz_" + s)

param_text = st.text(alphabet=string.ascii_letters + string.digits + ".:-_ ", max_size=15)

formats = st.sampled_from(list(TokenFormat))

UNRESERVED = set(string.ascii_letters + string.digits + "-._~%")

ENGINE = TokenEngine(FormflowSettings(), clock=MockClock(datetime(2024, 3, 15, tzinfo=UTC)))
REQUEST = RequestContext(client_ip="192.0.2.1")


def contact_with(message: str) -> Form:
    form = build_form(contact_form())
    form.bind(make_submission({"2": "Ada", "4": message}))
    form.calculate_element_visibility()
    return form


@st.composite
def unknown_tokens(draw: st.DrawFn) -> str:
    name = draw(unknown_names)
    params = draw(st.lists(param_text, max_size=3))
    return "{" + "|".join([name, *params]) + "}"


@st.composite
def templates_with_unknown_tokens(draw: st.DrawFn) -> str:
    pieces = draw(st.lists(st.one_of(brace_free_text.filter(lambda s: "}" not in s), unknown_tokens()), max_size=6))
    return "".join(pieces)


# =============================================================================
# Pass-through
# =============================================================================


class TestPassThroughProperties:
    @given(text=brace_free_text, fmt=formats)
    @STANDARD_SETTINGS
    def test_text_without_tokens_is_identity(self, text: str, fmt: TokenFormat) -> None:
        form = build_form(contact_form())
        assert ENGINE.replace_variables(text, fmt, form, REQUEST) == text
        assert ENGINE.replace_variables_pre_process(text, fmt, form, REQUEST) == text

    @given(template=templates_with_unknown_tokens(), fmt=formats)
    @STANDARD_SETTINGS
    def test_unknown_tokens_are_preserved_byte_for_byte(self, template: str, fmt: TokenFormat) -> None:
        form = contact_with("hello")
        assert ENGINE.replace_variables(template, fmt, form, REQUEST) == template
        assert ENGINE.replace_variables_pre_process(template, fmt, form, REQUEST) == template


# =============================================================================
# Encoding
# =============================================================================


class TestEncodingProperties:
    @given(message=printable_text)
    @QUICK_SETTINGS
    def test_url_format_round_trips_through_decoding(self, message: str) -> None:
        encoded = ENGINE.replace_variables("{element|id:4}", TokenFormat.URL, contact_with(message), REQUEST)
        assert set(encoded) <= UNRESERVED | {"+"}
        assert unquote_plus(encoded) == message

    @given(message=printable_text)
    @QUICK_SETTINGS
    def test_rawurl_format_never_uses_plus(self, message: str) -> None:
        encoded = ENGINE.replace_variables("{element|id:4}", TokenFormat.RAWURL, contact_with(message), REQUEST)
        assert set(encoded) <= UNRESERVED
        assert unquote(encoded) == message


class TestGrammarProperties:
    @given(text=printable_text)
    @STANDARD_SETTINGS
    def test_render_of_parse_is_identity(self, text: str) -> None:
        assert render(parse(text)) == text
