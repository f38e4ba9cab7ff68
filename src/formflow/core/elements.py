# src/formflow/core/elements.py
"""Runtime element tree.

An Element is one of four variants sharing a base record:

- Page: top-level container, one per navigable step
- Group: nested container used for sections
- Field: holds a submitted value, a validity state and email/storage flags
- Html: static content block

Code that branches on the variant uses ``match`` with class patterns over
the closed ``Element`` union.

Elements are created from FormSettings by formflow.core.form.Form and live
for one request. The ``conditionally_hidden`` flag is recomputed by
Form.calculate_element_visibility() after values are bound.
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from markupsafe import Markup, escape

from formflow.contracts.enums import FieldKind, TokenFormat
from formflow.core.config import LogicSettings

if TYPE_CHECKING:
    from formflow.core.validators import FieldValidator

_SCALARS = (str, int, float, bool)

VALUE_LIST_STYLE = "margin:0;padding:0;list-style:disc inside;"


@dataclass(eq=False)
class ElementBase:
    """Fields shared by every element variant."""

    id: int
    label: str = ""
    logic: LogicSettings = field(default_factory=LogicSettings)
    parent: Container | None = field(default=None, repr=False)
    conditionally_hidden: bool = False

    def is_hidden(self) -> bool:
        return self.conditionally_hidden


@dataclass(eq=False)
class Field(ElementBase):
    """An input element.

    The value shape depends on ``kind``: a string for TEXT, a list of
    strings for MULTI, a mapping of part name to string for COMPOUND.
    Submitted values that do not fit the shape are replaced by the empty
    value rather than rejected.
    """

    kind: FieldKind = FieldKind.TEXT
    admin_label: str = ""
    required: bool = False
    required_message: str = "This field is required"
    default: Any = None
    show_in_email: bool = True
    save_to_database: bool = True
    validators: tuple[FieldValidator, ...] = ()
    value: Any = None
    error: str | None = None

    def __post_init__(self) -> None:
        self.value = self.coerce(self.default)

    def empty_value(self) -> Any:
        match self.kind:
            case FieldKind.MULTI:
                return []
            case FieldKind.COMPOUND:
                return {}
            case _:
                return ""

    def coerce(self, raw: Any) -> Any:
        """Convert a raw submitted value to this field's value shape."""
        if raw is None:
            return self.empty_value()
        match self.kind:
            case FieldKind.MULTI:
                if isinstance(raw, list | tuple) and all(isinstance(item, _SCALARS) for item in raw):
                    return [str(item) for item in raw]
            case FieldKind.COMPOUND:
                if isinstance(raw, Mapping) and all(isinstance(part, _SCALARS) for part in raw.values()):
                    return {str(key): str(part) for key, part in raw.items()}
            case _:
                if isinstance(raw, _SCALARS):
                    return str(raw)
        return self.empty_value()

    def set_value(self, raw: Any) -> None:
        self.value = self.coerce(raw)
        self.error = None

    def is_empty(self) -> bool:
        match self.kind:
            case FieldKind.MULTI:
                return len(self.value) == 0
            case FieldKind.COMPOUND:
                return all(part == "" for part in self.value.values())
            case _:
                return self.value == ""

    def has_value(self, candidate: str) -> bool:
        """Whether a multi-valued field contains ``candidate``."""
        if self.kind == FieldKind.MULTI:
            return candidate in self.value
        return self.value_text() == candidate

    def get_admin_label(self) -> str:
        return self.admin_label or self.label

    def value_text(self, separator: str = ", ") -> str:
        """The value as plain text. Never escaped."""
        match self.kind:
            case FieldKind.MULTI:
                return separator.join(self.value)
            case FieldKind.COMPOUND:
                return separator.join(part for part in self.value.values() if part != "")
            case _:
                return self.value

    def value_html(self) -> str:
        """The value as safe HTML."""
        if self.is_empty():
            return ""
        match self.kind:
            case FieldKind.MULTI:
                items = "".join(f'<li class="formflow-value-list-item">{escape(option)}</li>' for option in self.value)
                return f'<ul class="formflow-value-list" style="{VALUE_LIST_STYLE}">{items}</ul>'
            case FieldKind.COMPOUND:
                return "<br />".join(str(escape(part)) for part in self.value.values() if part != "")
            case _:
                lines = self.value.replace("\r\n", "\n").split("\n")
                return "<br />\n".join(str(escape(line)) for line in lines)

    def value_for_storage(self) -> str:
        if self.kind == FieldKind.TEXT:
            return self.value
        return json.dumps(self.value, ensure_ascii=False)

    def validate(self) -> bool:
        """Run the required check and the validators, recording the first error.

        Conditionally hidden fields are always valid.
        """
        self.error = None
        if self.is_hidden():
            return True
        if self.is_empty():
            if self.required:
                self.error = self.required_message
                return False
            # Optional and empty: nothing for validators to check
            return True
        for validator in self.validators:
            message = validator(self.value, self)
            if message:
                self.error = message
                return False
        return True


@dataclass(eq=False)
class Html(ElementBase):
    """Static content. Shown in emails only when ``show_in_email`` is set."""

    content: str = ""
    show_in_email: bool = False

    def is_empty(self) -> bool:
        return self.content.strip() == ""

    def render_content(self, fmt: TokenFormat = TokenFormat.HTML) -> str:
        if fmt == TokenFormat.HTML:
            return self.content
        return Markup(self.content).striptags()


@dataclass(eq=False)
class Container(ElementBase):
    """Base for elements that own children."""

    show_label_in_email: bool = False
    children: list[Element] = field(default_factory=list, repr=False)

    def iter_descendants(self) -> Iterator[Element]:
        """All descendants in pre-order, excluding self."""
        for child in self.children:
            yield child
            if isinstance(child, Container):
                yield from child.iter_descendants()

    def iter_fields(self) -> Iterator[Field]:
        for element in self.iter_descendants():
            if isinstance(element, Field):
                yield element

    def is_empty(self) -> bool:
        """A container is empty when none of its visible fields has a value."""
        return all(f.is_empty() for f in self.iter_fields() if not f.is_hidden())

    def validate(self) -> bool:
        """Validate every field, hidden ones passing trivially; do not stop at the first failure."""
        results = [f.validate() for f in self.iter_fields()]
        return all(results)

    def errors(self) -> dict[int, str]:
        return {f.id: f.error for f in self.iter_fields() if f.error is not None and not f.is_hidden()}


@dataclass(eq=False)
class Group(Container):
    pass


@dataclass(eq=False)
class Page(Container):
    pass


Element = Page | Group | Field | Html
