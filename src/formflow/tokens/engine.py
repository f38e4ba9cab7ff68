# src/formflow/tokens/engine.py
"""Token substitution engine.

Renders templates (notification subjects and bodies, confirmation messages,
custom storage values) by replacing ``{tokens}`` with values.

Two passes:

1. Pre-process pass (``replace_variables_pre_process``): tokens that do not
   need submitted values - site identity, request headers, the viewing user,
   content lookups, dates and unique ids. Unknown tokens are left exactly
   as written.

2. Full pass (``replace_variables``): tokens that need the bound form -
   element values, the entry id, the all-form-data rendering and so on.
   Any token the full pass does not resolve falls through to the
   pre-process pass, so full-pass templates can use every pre-process token.

Both passes parse the template once with formflow.tokens.parser, resolve
each token independently and splice the results between the untouched
literal spans. Resolved values are percent-encoded when the requested
format is ``url`` (space as ``+``) or ``rawurl`` (space as ``%20``).

Resolution never raises for unknown names or malformed parameters.
"""

from __future__ import annotations

import random
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, quote_plus
from zoneinfo import ZoneInfo

from jinja2 import Environment
from markupsafe import Markup, escape

from formflow.contracts.enums import TokenFormat
from formflow.contracts.protocols import ContentLookup
from formflow.contracts.request import RequestContext
from formflow.core.clock import DEFAULT_CLOCK, Clock
from formflow.core.config import FormflowSettings
from formflow.core.elements import Field, Group, Html, Page
from formflow.core.form import Form
from formflow.plugins.manager import HookBus
from formflow.tokens.locales import get_locale
from formflow.tokens.parser import Literal, TokenRef, has_tokens, parse

# Newline for email content
NEWLINE = "\r\n"

_SCALARS = (str, int, float, bool)

_TABLE_STYLES: dict[str, str] = {
    "table": (
        "table-layout: fixed; background: #ffffff; border-spacing: 0; border-collapse: separate; "
        "border-bottom: 1px solid #d4d4d4; box-shadow: 0 2px 7px 0 rgba(0, 0, 0, 0.07);"
    ),
    "html": (
        "padding: 10px; font-family: Helvetica, Arial, sans-serif; font-size: 16px; color: #282828; "
        "line-height: 130%; border: 1px solid #d4d4d4; border-bottom: 0; word-wrap: break-word;"
    ),
    "page": (
        "padding: 10px; font-family: Helvetica, Arial, sans-serif; font-size: 22px; font-weight: bold; "
        "background-color: #c73412; color: #ffffff; border-bottom: 1px solid #e14e2c; word-wrap: break-word;"
    ),
    "group": (
        "padding: 10px; font-family: Helvetica, Arial, sans-serif; font-size: 17px; "
        "background-color: #c73412; color: #ffffff; word-wrap: break-word;"
    ),
    "label": (
        "padding: 10px; font-family: Helvetica, Arial, sans-serif; font-size: 15px; font-weight: bold; "
        "color: #282828; border: 1px solid #d4d4d4; border-bottom: 0; word-wrap: break-word;"
    ),
    "value": (
        "padding: 10px; font-family: Helvetica, Arial, sans-serif; font-size: 14px; color: #282828; "
        "line-height: 130%; border: 1px solid #d4d4d4; border-bottom-color: #fff; word-wrap: break-word;"
    ),
}

_ALL_FORM_DATA_HTML = (
    '<table width="100%" cellpadding="10" cellspacing="0" border="0" style="{{ styles.table }}">{{ nl }}'
    "{% for row in rows %}"
    "{% if row.kind == 'field' %}"
    '<tr bgcolor="#efefef"><td valign="top" style="{{ styles.label }}">{{ row.label }}</td></tr>{{ nl }}'
    '<tr bgcolor="#fcfcfc"><td valign="top" style="{{ styles.value }}">{{ row.content }}</td></tr>{{ nl }}'
    "{% else %}"
    '<tr><td valign="top" style="{{ styles[row.kind] }}">{{ row.content }}</td></tr>{{ nl }}'
    "{% endif %}"
    "{% endfor %}"
    "</table>{{ nl }}"
)

_jinja = Environment(autoescape=True)
_all_form_data_template = _jinja.from_string(_ALL_FORM_DATA_HTML)


@dataclass(frozen=True)
class _DataRow:
    kind: str
    content: str | Markup
    label: str = ""


def encode_for_format(value: str, fmt: TokenFormat) -> str:
    """Percent-encode a resolved value for URL formats; other formats pass through."""
    if fmt == TokenFormat.URL:
        return quote_plus(value, safe="")
    if fmt == TokenFormat.RAWURL:
        return quote(value, safe="")
    return value


def _stringify(value: Any) -> str:
    return "" if value is None else str(value)


class TokenEngine:
    """Resolves template tokens against a form and request.

    Usage:
        engine = TokenEngine(settings, hooks=bus, content=lookup)
        subject = engine.replace_variables("New entry #{entry_id}", TokenFormat.TEXT, form, request)
    """

    def __init__(
        self,
        settings: FormflowSettings,
        *,
        hooks: HookBus | None = None,
        content: ContentLookup | None = None,
        clock: Clock = DEFAULT_CLOCK,
    ) -> None:
        self._settings = settings
        self._hooks = hooks if hooks is not None else HookBus()
        self._content = content
        self._clock = clock
        self._timezone = ZoneInfo(settings.site.timezone)

    # -------------------------------------------------------------------------
    # Public passes
    # -------------------------------------------------------------------------

    def replace_variables_pre_process(
        self,
        text: str | None,
        fmt: TokenFormat | str,
        form: Form,
        request: RequestContext,
    ) -> str:
        """Replace tokens that do not depend on submitted values."""
        token_format = TokenFormat(fmt)
        return self._substitute(text, lambda token: self._replace_pre_process(token, token_format, form, request))

    def replace_variables(
        self,
        text: str | None,
        fmt: TokenFormat | str,
        form: Form,
        request: RequestContext,
    ) -> str:
        """Replace every token, falling back to the pre-process pass."""
        token_format = TokenFormat(fmt)
        return self._substitute(text, lambda token: self._replace(token, token_format, form, request))

    @staticmethod
    def _substitute(text: str | None, resolve: Callable[[TokenRef], str]) -> str:
        if not isinstance(text, str) or text == "":
            return ""
        if not has_tokens(text):
            return text
        return "".join(segment.text if isinstance(segment, Literal) else resolve(segment) for segment in parse(text))

    # -------------------------------------------------------------------------
    # Pre-process pass
    # -------------------------------------------------------------------------

    def _replace_pre_process(self, token: TokenRef, fmt: TokenFormat, form: Form, request: RequestContext) -> str:
        resolved = self._resolve_pre_process(token, form, request)
        # Unknown tokens reach the hook as their raw text so extensions can claim them
        replaced = self._hooks.run(
            "formflow_replace_variables_pre_process",
            token.raw if resolved is None else resolved,
            token=token,
            fmt=str(fmt),
        )
        if resolved is None and replaced == token.raw:
            # Unclaimed tokens stay exactly as written, unencoded
            return token.raw
        return encode_for_format(_stringify(replaced), fmt)

    def _resolve_pre_process(self, token: TokenRef, form: Form, request: RequestContext) -> str | None:
        site = self._settings.site
        user = request.user
        match token.name:
            case "site_title":
                return site.title
            case "site_tagline":
                return site.tagline
            case "ip":
                return request.client_ip
            case "post":
                return self._post_property(request.post_id, token.first_param_name or "ID")
            case "custom_field":
                return self._post_meta(request.post_id, token.first_param_name or "")
            case "url":
                return request.current_url
            case "user":
                return _stringify(user.property(token.first_param_name or "display_name")) if user else ""
            case "user_meta":
                return _stringify(user.meta.get(token.first_param_name or "", "")) if user else ""
            case "referring_url":
                return request.referrer
            case "user_agent":
                return request.user_agent
            case "date":
                locale = get_locale(form.settings.locale)
                return self._now(token, form.settings.date_format or locale.date_format)
            case "time":
                locale = get_locale(form.settings.locale)
                return self._now(token, form.settings.time_format or locale.time_format)
            case "datetime":
                locale = get_locale(form.settings.locale)
                return self._now(token, form.settings.datetime_format or locale.datetime_format)
            case "uniqid":
                return self._uniqid(token.param("prefix", "") or "", more_entropy=token.flag("moreEntropy"))
            case _:
                return None

    def _now(self, token: TokenRef, default_format: str) -> str:
        explicit = token.param("format")
        date_format = explicit if explicit is not None else default_format
        return self._clock.now().astimezone(self._timezone).strftime(date_format)

    def _uniqid(self, prefix: str, *, more_entropy: bool) -> str:
        """Time-based id: 8 hex digits of seconds, 5 of microseconds."""
        now = self._clock.now()
        seconds = int(now.timestamp())
        unique = f"{prefix}{seconds:08x}{now.microsecond:05x}"
        if more_entropy:
            unique += f"{random.random() * 10:.8f}"
        return unique

    def _post_property(self, post_id: int | None, name: str) -> str:
        if self._content is None:
            return ""
        return _stringify(self._content.post_property(post_id, name))

    def _post_meta(self, post_id: int | None, key: str) -> str:
        if self._content is None:
            return ""
        return _stringify(self._content.post_meta(post_id, key))

    # -------------------------------------------------------------------------
    # Full pass
    # -------------------------------------------------------------------------

    def _replace(self, token: TokenRef, fmt: TokenFormat, form: Form, request: RequestContext) -> str:
        replaced = self._resolve(token, fmt, form)
        if replaced is None or replaced == token.raw:
            return self._replace_pre_process(token, fmt, form, request)
        replaced = self._hooks.run("formflow_replace_variables", replaced, token=token, fmt=str(fmt), form=form)
        return encode_for_format(_stringify(replaced), fmt)

    def _resolve(self, token: TokenRef, fmt: TokenFormat, form: Form) -> str | None:
        email = self._settings.email
        submission = form.submission
        post_id = submission.numeric_post_id if submission is not None else None
        match token.name:
            case "post":
                return self._post_property(post_id, token.first_param_name or "ID")
            case "custom_field":
                return self._post_meta(post_id, token.first_param_name or "")
            case "referring_url":
                return submission.referring_url if submission is not None else ""
            case "default_email_address":
                return email.default_email_address
            case "default_email_name":
                return email.default_email_name
            case "default_from_email_address":
                return email.default_from_email_address
            case "default_from_email_name":
                return email.default_from_email_name
            case "admin_email":
                return self._settings.site.admin_email
            case "element":
                return self._replace_element(token, fmt, form)
            case "form_name":
                return form.name
            case "entry_id":
                return _stringify(form.entry_id)
            case "all_form_data":
                return self._replace_all_form_data(token, fmt, form)
            case _:
                return None

    def _replace_element(self, token: TokenRef, fmt: TokenFormat, form: Form) -> str:
        """Value of one field: ``{element|id:7}`` or one part ``{element|id:7.city}``."""
        reference = token.param("id")
        if reference is None:
            return ""
        element_id, _, part = reference.partition(".")
        element = form.get_element_by_id(element_id)
        if not isinstance(element, Field) or element.is_hidden():
            return ""

        value_format = token.param("format") or str(fmt)
        separator = token.param("separator", ", ") or ""
        html = value_format == TokenFormat.HTML

        value = ""
        if part:
            part_value = self._element_part(element.value, part)
            if isinstance(part_value, _SCALARS):
                value = str(escape(part_value)) if html else str(part_value)
        else:
            value = element.value_html() if html else element.value_text(separator)

        return self._hooks.run(
            "formflow_element_token_value",
            value,
            element=element,
            fmt=value_format,
            separator=separator,
            token=token,
        )

    @staticmethod
    def _element_part(value: Any, part: str) -> Any:
        if isinstance(value, Mapping):
            return value.get(part, "")
        if isinstance(value, list) and part.isdigit() and int(part) < len(value):
            return value[int(part)]
        return ""

    # -------------------------------------------------------------------------
    # All form data
    # -------------------------------------------------------------------------

    def _replace_all_form_data(self, token: TokenRef, fmt: TokenFormat, form: Form) -> str:
        show_empty_fields = token.flag("showEmptyFields")
        if fmt == TokenFormat.HTML:
            return self.render_all_form_data_html(form, show_empty_fields=show_empty_fields)
        return self.render_all_form_data_text(form, show_empty_fields=show_empty_fields)

    def _collect_rows(self, form: Form, *, show_empty_fields: bool, html: bool) -> list[_DataRow]:
        """Visible elements worth showing, in pre-order."""
        rows: list[_DataRow] = []
        for element in form.iter_elements():
            if element.is_hidden():
                continue
            if element.is_empty() and not show_empty_fields:
                continue

            match element:
                case Html():
                    if element.show_in_email:
                        fmt = TokenFormat.HTML if html else TokenFormat.TEXT
                        rows.append(_DataRow("html", Markup(element.render_content(fmt))))
                case Page() | Group():
                    if element.show_label_in_email and element.label:
                        kind = "page" if isinstance(element, Page) else "group"
                        rows.append(_DataRow(kind, element.label))
                case Field():
                    if element.show_in_email:
                        content = Markup(element.value_html()) if html else element.value_text(NEWLINE)
                        rows.append(_DataRow("field", content, label=element.get_admin_label()))
        return rows

    def render_all_form_data_text(self, form: Form, *, show_empty_fields: bool = False) -> str:
        content = ""
        for row in self._collect_rows(form, show_empty_fields=show_empty_fields, html=False):
            if row.kind == "field":
                content += row.label + NEWLINE
                content += "-" * 25 + NEWLINE
                content += str(row.content)
            elif row.kind == "html":
                content += str(row.content)
            else:
                content += "=" * 25 + NEWLINE
                content += row.content + NEWLINE
                content += "=" * 25
            content += NEWLINE + NEWLINE

        return self._hooks.run("formflow_all_form_data_text", content, form=form, show_empty_fields=show_empty_fields)

    def render_all_form_data_html(self, form: Form, *, show_empty_fields: bool = False) -> str:
        rows = self._collect_rows(form, show_empty_fields=show_empty_fields, html=True)
        content = _all_form_data_template.render(rows=rows, styles=_TABLE_STYLES, nl=NEWLINE)
        return self._hooks.run("formflow_all_form_data_html", content, form=form, show_empty_fields=show_empty_fields)
