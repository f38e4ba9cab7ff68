"""Shared contracts for cross-boundary data types.

This package is a LEAF MODULE with no outbound dependencies to core/engine
at runtime. Settings classes are NOT re-exported here - import them from
formflow.core.config.

Import patterns:
    # Contracts (lightweight, no heavy dependencies)
    from formflow.contracts import ErrorResult, Submission, TokenFormat

    # Settings classes (from core, pulls in pydantic models)
    from formflow.core.config import FormSettings, FormflowSettings
"""

from formflow.contracts.enums import (
    ConfirmationType,
    DispatchStatus,
    FieldKind,
    LogicAction,
    LogicMatch,
    LogicOperator,
    OneEntryPer,
    ResultType,
    SubmitDirection,
    TokenFormat,
)
from formflow.contracts.errors import (
    FormConfigurationError,
    FormflowError,
    HookError,
    UnknownValidatorError,
)
from formflow.contracts.protocols import (
    CapabilityCheck,
    ContentLookup,
    Repository,
    SessionStore,
    Transport,
    UploadCoordinator,
)
from formflow.contracts.request import Entry, RequestContext, Submission, UserInfo
from formflow.contracts.results import (
    ConfirmationData,
    ErrorResult,
    GlobalError,
    PageTransitionResult,
    SubmissionResult,
    SuccessResult,
)

__all__ = [
    "CapabilityCheck",
    "ConfirmationData",
    "ConfirmationType",
    "ContentLookup",
    "DispatchStatus",
    "Entry",
    "ErrorResult",
    "FieldKind",
    "FormConfigurationError",
    "FormflowError",
    "GlobalError",
    "HookError",
    "LogicAction",
    "LogicMatch",
    "LogicOperator",
    "OneEntryPer",
    "PageTransitionResult",
    "Repository",
    "RequestContext",
    "ResultType",
    "SessionStore",
    "Submission",
    "SubmissionResult",
    "SubmitDirection",
    "SuccessResult",
    "TokenFormat",
    "Transport",
    "UnknownValidatorError",
    "UploadCoordinator",
    "UserInfo",
]
