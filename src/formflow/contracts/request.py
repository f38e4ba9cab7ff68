"""Per-request data: the submitted snapshot, who sent it, and what was stored.

Submission is created once at the edge (HTTP layer, CLI, tests) and handed
to the pipeline. It is never mutated: the values mapping is read-only.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any

from formflow.contracts.enums import SubmitDirection


def _freeze(values: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(values))


@dataclass(frozen=True)
class Submission:
    """Immutable snapshot of one submitted request.

    Fields:
        values: Submitted element values keyed by element id (as a string)
        current_page_id: Page the submitter was on when they pressed submit
        direction: NEXT for submit/next, BACK for the back button
        csrf_token: Token echoed back by the browser, None if absent
        form_url: URL of the page hosting the form
        referring_url: URL the submitter came from before the form page
        post_id: Raw id of the content item hosting the form
    """

    values: Mapping[str, Any] = field(default_factory=dict)
    current_page_id: int | None = None
    direction: SubmitDirection = SubmitDirection.NEXT
    csrf_token: str | None = None
    form_url: str = ""
    referring_url: str = ""
    post_id: str | int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", _freeze(self.values))

    @property
    def is_back(self) -> bool:
        return self.direction == SubmitDirection.BACK

    @property
    def numeric_post_id(self) -> int | None:
        """The post id when it is a positive integer, else None."""
        try:
            post_id = int(str(self.post_id))
        except ValueError:
            return None
        return post_id if post_id > 0 else None


@dataclass(frozen=True)
class UserInfo:
    """An authenticated user."""

    id: int
    login: str = ""
    email: str = ""
    display_name: str = ""
    meta: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "meta", _freeze(self.meta))

    def property(self, name: str) -> Any:
        """Look up a user property by the names templates use."""
        properties = {
            "ID": self.id,
            "id": self.id,
            "user_login": self.login,
            "login": self.login,
            "user_email": self.email,
            "email": self.email,
            "display_name": self.display_name,
        }
        return properties.get(name, "")


@dataclass(frozen=True)
class RequestContext:
    """Ambient facts about the HTTP request being processed.

    ``user`` is None for anonymous visitors. ``post_id`` is the content item
    being viewed, used by pre-process tokens before anything is submitted.
    """

    client_ip: str = ""
    current_url: str = ""
    user_agent: str = ""
    referrer: str = ""
    user: UserInfo | None = None
    post_id: int | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


@dataclass(frozen=True)
class Entry:
    """A persisted record of one successful submission."""

    id: int
    form_id: int
    ip: str
    form_url: str
    referring_url: str
    post_id: int | None
    created_by: int | None
    created_at: datetime
    updated_at: datetime
