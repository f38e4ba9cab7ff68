"""Submission outcomes.

These types answer: "What did one call to SubmissionPipeline.process() produce?"

Exactly one of SuccessResult, PageTransitionResult or ErrorResult is
returned per call. Terminal gate failures, validation failures and hook
vetoes are all expressed as values, never raised.

Each result serialises to the JSON response body the front end consumes:
    {"type": "success", "confirmation": {...}}
    {"type": "page", "page": 3}
    {"type": "error", "error": {...}, "errors": {...}, "page": 1}
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, ClassVar

from formflow.contracts.enums import ConfirmationType, ResultType


@dataclass(frozen=True)
class GlobalError:
    """Form-level error banner shown above the fields."""

    enabled: bool
    title: str
    content: str

    def to_dict(self) -> dict[str, Any]:
        return {"enabled": self.enabled, "title": self.title, "content": self.content}


@dataclass(frozen=True)
class ConfirmationData:
    """Rendered confirmation chosen for a successful submission.

    ``message`` is already rendered as HTML and ``redirect_url`` already
    has its token values URL-encoded.
    """

    type: ConfirmationType
    message: str = ""
    redirect_url: str = ""
    redirect_delay: int = 3
    hide_form: bool = False
    reset_form: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": str(self.type),
            "message": self.message,
            "redirectUrl": self.redirect_url,
            "redirectDelay": self.redirect_delay,
            "hideForm": self.hide_form,
            "resetForm": self.reset_form,
        }


@dataclass(frozen=True)
class SuccessResult:
    """The submission was accepted, persisted and notified."""

    type: ClassVar[ResultType] = ResultType.SUCCESS

    confirmation: ConfirmationData

    def to_dict(self) -> dict[str, Any]:
        return {"type": str(self.type), "confirmation": self.confirmation.to_dict()}


@dataclass(frozen=True)
class PageTransitionResult:
    """Move the submitter to another page without finalising."""

    type: ClassVar[ResultType] = ResultType.PAGE

    page_id: int

    def to_dict(self) -> dict[str, Any]:
        return {"type": str(self.type), "page": self.page_id}


@dataclass(frozen=True)
class ErrorResult:
    """Terminal error.

    Gate failures carry only ``error``. Validation failures also carry the
    per-field messages and the id of the page the submitter is sent back to.
    """

    type: ClassVar[ResultType] = ResultType.ERROR

    error: GlobalError
    errors: Mapping[int, str] = field(default_factory=dict)
    page_id: int | None = None

    def __post_init__(self) -> None:
        # Freeze the mapping so a result cannot be edited after it is returned
        object.__setattr__(self, "errors", MappingProxyType(dict(self.errors)))

    @classmethod
    def message(cls, content: str, *, title: str = "") -> ErrorResult:
        """Create a gate-style error with only a global message."""
        return cls(error=GlobalError(enabled=True, title=title, content=content))

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "type": str(self.type),
            "error": self.error.to_dict(),
        }
        if self.errors:
            body["errors"] = {str(element_id): message for element_id, message in self.errors.items()}
        if self.page_id is not None:
            body["page"] = self.page_id
        return body


SubmissionResult = SuccessResult | PageTransitionResult | ErrorResult
