# src/formflow/engine/validation.py
"""Whole-form and single-page validation."""

from __future__ import annotations

from dataclasses import dataclass

from formflow.core.elements import Page
from formflow.core.form import Form
from formflow.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of validating a whole form.

    Attributes:
        valid: True when every visible field on every visible page is valid
        first_error_page: Lowest-index visible page holding an invalid field
    """

    valid: bool
    first_error_page: Page | None = None


class Validator:
    """Validates pages in navigational order.

    Every visible page is validated, not just up to the first failure, so
    every field error is populated for the response.
    """

    def validate_page(self, page: Page) -> bool:
        """Validate one page. Hidden pages are always valid."""
        if page.is_hidden():
            return True
        return page.validate()

    def validate(self, form: Form) -> ValidationOutcome:
        first_error_page: Page | None = None
        for page in form.pages:
            if page.is_hidden():
                continue
            if not self.validate_page(page) and first_error_page is None:
                first_error_page = page

        if first_error_page is not None:
            logger.debug("Form failed validation", form_id=form.id, page_id=first_error_page.id)
            return ValidationOutcome(valid=False, first_error_page=first_error_page)
        return ValidationOutcome(valid=True)
