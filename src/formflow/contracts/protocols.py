"""Protocols for the collaborators the pipeline drives but does not implement.

These protocols define what methods collaborators must implement.
They're used for type checking, not runtime enforcement.

Collaborators:
- Repository: Entry persistence and custom table inserts
- SessionStore: CSRF token and per-form staged state
- UploadCoordinator: Staged upload merging and finalisation
- Transport: Delivery of rendered notifications
- CapabilityCheck: Whether the current user may bypass restrictions
- ContentLookup: Properties and custom fields of content items
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from formflow.contracts.request import Entry
    from formflow.core.config import NotificationSettings
    from formflow.core.form import Form


@runtime_checkable
class Repository(Protocol):
    """Entry storage.

    Example:
        class MemoryRepository:
            def count_entries(self, form_id: int) -> int:
                return sum(1 for entry in self.entries if entry.form_id == form_id)
    """

    def entry_exists(
        self,
        form_id: int,
        *,
        created_by: int | None = None,
        ip: str | None = None,
    ) -> bool:
        """Whether the form has an entry created by the given user or IP.

        Exactly one of ``created_by`` and ``ip`` is passed.
        """
        ...

    def count_entries(self, form_id: int) -> int:
        """Number of persisted entries for the form."""
        ...

    def create_entry(self, fields: Mapping[str, Any]) -> Entry:
        """Persist a new entry and return it with its id assigned."""
        ...

    def save_entry_field_values(self, entry_id: int, values: Mapping[int, str]) -> None:
        """Persist stored field values keyed by element id."""
        ...

    def insert_custom_row(self, table: str, row: Mapping[str, str]) -> None:
        """Insert one row into a user-configured table."""
        ...


@runtime_checkable
class SessionStore(Protocol):
    def get_csrf_token(self) -> str:
        """The CSRF token issued to this session."""
        ...

    def has_staged(self, key: str) -> bool:
        """Whether state is staged under ``key`` (uploads from earlier pages)."""
        ...

    def clear_staged(self, key: str) -> None:
        ...


@runtime_checkable
class UploadCoordinator(Protocol):
    def merge_staged(self, form: Form, values: Mapping[str, Any]) -> Mapping[str, Any]:
        """Return ``values`` with uploads staged on earlier pages merged in.

        ``values`` is read-only; implementations return a new mapping.
        """
        ...

    def finalize(self, form: Form) -> None:
        """Move staged uploads to permanent storage after the entry exists."""
        ...


@runtime_checkable
class Transport(Protocol):
    def send(self, notification: NotificationSettings, subject: str, body: str) -> None:
        """Deliver a rendered notification. Raises on failure."""
        ...


@runtime_checkable
class CapabilityCheck(Protocol):
    def has_bypass_capability(self) -> bool:
        """Whether the current user may bypass entry limits and schedules."""
        ...


@runtime_checkable
class ContentLookup(Protocol):
    """Read access to the content items (posts, pages) that host forms."""

    def post_property(self, post_id: int | None, name: str) -> Any:
        """Property of a content item, "" when the item or property is unknown."""
        ...

    def post_meta(self, post_id: int | None, key: str) -> Any:
        """Custom field of a content item, "" when unknown."""
        ...
