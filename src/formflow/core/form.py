# src/formflow/core/form.py
"""Form: the element tree plus per-request state.

A Form is built from a validated FormSettings at the start of a request and
discarded at the end. It exclusively owns:

- the element tree (pages -> groups -> fields/html)
- the current page pointer
- the bound Submission snapshot
- the entry id assigned once the entry is persisted

Collaborators (gates, validator, navigator, token engine) borrow the Form
for the duration of a call and never keep a reference to it.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from formflow.contracts.errors import FormConfigurationError
from formflow.contracts.request import Submission
from formflow.contracts.results import GlobalError
from formflow.core.config import (
    FieldSettings,
    FormSettings,
    GroupSettings,
    HtmlSettings,
    PageSettings,
)
from formflow.core.elements import Container, Element, Field, Group, Html, Page
from formflow.core.logic import check_logic_action
from formflow.core.validators import ValidatorRegistry


class Form:
    """Runtime form.

    Usage:
        form = Form(load_form_settings(Path("contact.yaml")))
        form.bind(submission)
        form.calculate_element_visibility()
        form.set_current_page_by_id(submission.current_page_id)
    """

    def __init__(self, settings: FormSettings, *, validators: ValidatorRegistry | None = None) -> None:
        self.settings = settings
        self._validators = validators if validators is not None else ValidatorRegistry()
        self._elements: dict[int, Element] = {}
        self.pages: list[Page] = [self._build_page(page) for page in settings.pages]
        self.current_page: Page = self.pages[0]
        self.submission: Submission | None = None
        self.entry_id: int | None = None

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    def _register(self, element: Element) -> None:
        if element.id in self._elements:
            raise FormConfigurationError(f"Duplicate element id {element.id} in form {self.settings.id}")
        self._elements[element.id] = element

    def _build_page(self, settings: PageSettings) -> Page:
        page = Page(
            id=settings.id,
            label=settings.label,
            logic=settings.logic,
            show_label_in_email=settings.show_label_in_email,
        )
        self._register(page)
        page.children = [self._build_element(child, page) for child in settings.elements]
        return page

    def _build_element(self, settings: FieldSettings | HtmlSettings | GroupSettings, parent: Container) -> Element:
        element: Element
        match settings:
            case FieldSettings():
                element = Field(
                    id=settings.id,
                    label=settings.label,
                    logic=settings.logic,
                    parent=parent,
                    kind=settings.kind,
                    admin_label=settings.admin_label,
                    required=settings.required,
                    required_message=settings.required_message,
                    default=settings.default,
                    show_in_email=settings.show_in_email,
                    save_to_database=settings.save_to_database,
                    validators=tuple(self._validators.build(v) for v in settings.validators),
                )
                self._register(element)
            case HtmlSettings():
                element = Html(
                    id=settings.id,
                    logic=settings.logic,
                    parent=parent,
                    content=settings.content,
                    show_in_email=settings.show_in_email,
                )
                self._register(element)
            case GroupSettings():
                group = Group(
                    id=settings.id,
                    label=settings.label,
                    logic=settings.logic,
                    parent=parent,
                    show_label_in_email=settings.show_label_in_email,
                )
                self._register(group)
                group.children = [self._build_element(child, group) for child in settings.elements]
                element = group
        return element

    # -------------------------------------------------------------------------
    # Identity and configuration
    # -------------------------------------------------------------------------

    @property
    def id(self) -> int:
        return self.settings.id

    @property
    def name(self) -> str:
        return self.settings.name

    @property
    def session_key(self) -> str:
        """Key under which per-form state (staged uploads) lives in the session."""
        return f"formflow_{self.id}"

    @property
    def has_pages(self) -> bool:
        """Whether page navigation applies (more than one page)."""
        return len(self.pages) > 1

    @property
    def save_entry(self) -> bool:
        return self.settings.save_entry

    def translation(self, key: str, default: str) -> str:
        """User-facing message override, falling back to ``default``."""
        return self.settings.translations.get(key) or default

    def global_error(self) -> GlobalError:
        error = self.settings.error
        return GlobalError(
            enabled=error.enabled,
            title=error.title,
            content=self.translation("errorContent", error.content),
        )

    # -------------------------------------------------------------------------
    # Tree access
    # -------------------------------------------------------------------------

    def iter_elements(self) -> Iterator[Element]:
        """Every element in pre-order, pages included."""
        for page in self.pages:
            yield page
            yield from page.iter_descendants()

    def iter_fields(self) -> Iterator[Field]:
        for page in self.pages:
            yield from page.iter_fields()

    def get_element_by_id(self, element_id: int | str) -> Element | None:
        try:
            return self._elements.get(int(element_id))
        except (TypeError, ValueError):
            return None

    def get_page_by_id(self, page_id: int | None) -> Page | None:
        for page in self.pages:
            if page.id == page_id:
                return page
        return None

    def page_index(self, page: Page) -> int:
        return self.pages.index(page)

    # -------------------------------------------------------------------------
    # Per-request state
    # -------------------------------------------------------------------------

    def set_values(self, values: Mapping[str, Any]) -> None:
        """Bind submitted values; fields with no submitted value become empty."""
        for field in self.iter_fields():
            field.set_value(values.get(str(field.id)))

    def bind(self, submission: Submission) -> None:
        """Attach the submission snapshot and bind its values."""
        self.submission = submission
        self.set_values(submission.values)

    def calculate_element_visibility(self) -> None:
        """Recompute conditionally hidden flags for the whole tree.

        An element is hidden when its parent is hidden or its active logic
        does not pass. Rules may point at elements anywhere in the tree, so
        pre-order passes repeat until no flag changes. A cycle of rules that
        never settles keeps the flags from the last pass.
        """
        elements = list(self.iter_elements())
        for element in elements:
            element.conditionally_hidden = False

        for _ in range(len(elements)):
            changed = False
            for element in elements:
                hidden = element.parent is not None and element.parent.is_hidden()
                if not hidden and element.logic.is_active:
                    hidden = not check_logic_action(element.logic, self)
                if hidden != element.conditionally_hidden:
                    element.conditionally_hidden = hidden
                    changed = True
            if not changed:
                break

    def set_current_page_by_id(self, page_id: int | None) -> None:
        """Point at the submitted page; unknown ids fall back to the first page."""
        self.current_page = self.get_page_by_id(page_id) or self.pages[0]

    def errors(self) -> dict[int, str]:
        """Field errors from the last validation, visible fields only."""
        found: dict[int, str] = {}
        for page in self.pages:
            found.update(page.errors())
        return found
