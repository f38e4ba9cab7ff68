# tests/engine/test_validation.py
"""Tests for whole-form validation."""

from hypothesis import given
from hypothesis import strategies as st

from formflow.core.form import Form
from formflow.engine.validation import Validator
from tests.helpers.forms import build_form, field, multipage_form, page, show_when
from tests.property.settings import SLOW_SETTINGS


def bound(values: dict[str, str]) -> Form:
    form = build_form(multipage_form())
    form.set_values(values)
    form.calculate_element_visibility()
    return form


class TestValidator:
    def test_valid_form(self) -> None:
        outcome = Validator().validate(bound({"10": "no", "30": "a@b.co"}))
        assert outcome.valid
        assert outcome.first_error_page is None

    def test_hidden_page_is_never_first_error(self) -> None:
        """Page 2 has an empty required field but is hidden; page 3 is reported."""
        form = bound({"10": "no"})
        outcome = Validator().validate(form)
        assert not outcome.valid
        assert outcome.first_error_page is form.get_page_by_id(3)

    def test_every_page_is_validated(self) -> None:
        form = bound({"10": "yes"})
        outcome = Validator().validate(form)
        assert outcome.first_error_page is form.get_page_by_id(2)
        assert set(form.errors()) == {20, 30}

    def test_validate_page(self) -> None:
        form = bound({"10": "yes", "20": "details"})
        validator = Validator()
        assert validator.validate_page(form.get_page_by_id(2))
        assert not validator.validate_page(form.get_page_by_id(3))

    def test_hidden_page_validates(self) -> None:
        form = bound({"10": "no"})
        assert Validator().validate_page(form.get_page_by_id(2))


@given(
    layout=st.lists(st.tuples(st.booleans(), st.booleans()), min_size=1, max_size=6),
)
@SLOW_SETTINGS
def test_first_error_page_is_lowest_visible_invalid_page(layout: list[tuple[bool, bool]]) -> None:
    """Each page holds one required field; ``layout`` says (hidden, filled) per page."""
    pages = [page(1, [field(1000, "Driver")])]
    values = {"1000": "x"}
    for index, (hidden, filled) in enumerate(layout, start=2):
        logic = show_when(1000, "never-matches") if hidden else {}
        pages.append(page(index, [field(index * 10, required=True)], logic=logic))
        if filled:
            values[str(index * 10)] = "value"
    form = build_form({"id": 1, "pages": pages})
    form.set_values(values)
    form.calculate_element_visibility()

    outcome = Validator().validate(form)

    expected = next(
        (index for index, (hidden, filled) in enumerate(layout, start=2) if not hidden and not filled),
        None,
    )
    if expected is None:
        assert outcome.valid
    else:
        assert not outcome.valid
        assert outcome.first_error_page is not None
        assert outcome.first_error_page.id == expected
        assert not outcome.first_error_page.is_hidden()
