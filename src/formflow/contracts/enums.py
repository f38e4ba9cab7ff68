"""All status codes, modes, and kinds used across subsystem boundaries.

Values are the strings that appear in form definition files and in the
JSON response bodies, so they MUST stay stable.
"""

from enum import StrEnum


class TokenFormat(StrEnum):
    """Output format requested when rendering a template.

    TEXT and HTML affect how element values are rendered.
    URL and RAWURL percent-encode every substituted value.
    """

    TEXT = "text"
    HTML = "html"
    URL = "url"
    RAWURL = "rawurl"


class FieldKind(StrEnum):
    """Shape of the value a field holds.

    Values:
        TEXT: A single string (text inputs, textareas, selects, radios)
        MULTI: A list of strings (checkboxes, multi-selects)
        COMPOUND: A mapping of part name to string (name, address)
    """

    TEXT = "text"
    MULTI = "multi"
    COMPOUND = "compound"


class OneEntryPer(StrEnum):
    """How the one-entry-per-user restriction identifies a submitter."""

    LOGGED_IN_USER = "logged-in-user"
    IP_ADDRESS = "ip-address"


class LogicAction(StrEnum):
    SHOW = "show"
    HIDE = "hide"


class LogicMatch(StrEnum):
    ALL = "all"
    ANY = "any"


class LogicOperator(StrEnum):
    """Comparison operators available to conditional logic rules."""

    EQ = "eq"
    NEQ = "neq"
    EMPTY = "empty"
    NOT_EMPTY = "not_empty"
    GT = "gt"
    LT = "lt"
    CONTAINS = "contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"


class SubmitDirection(StrEnum):
    """Which button the submitter pressed on a multi-page form."""

    NEXT = "next"
    BACK = "back"


class ConfirmationType(StrEnum):
    MESSAGE = "message"
    MESSAGE_REDIRECT = "message-redirect"
    REDIRECT_URL = "redirect-url"


class ResultType(StrEnum):
    """Discriminator written to the ``type`` key of a response body."""

    SUCCESS = "success"
    PAGE = "page"
    ERROR = "error"


class DispatchStatus(StrEnum):
    """Outcome of one notification during dispatch."""

    SENT = "sent"
    DISABLED = "disabled"
    LOGIC_FAILED = "logic_failed"
    FAILED = "failed"
