"""Exceptions raised across subsystem boundaries.

Submission failures (CSRF, entry limits, schedule, validation, hook
vetoes) are NOT exceptions: they are ErrorResult values returned by the
pipeline. The exceptions here signal programming or configuration errors
that should crash loudly.
"""


class FormflowError(Exception):
    """Base class for formflow exceptions."""


class FormConfigurationError(FormflowError):
    """Raised when a form definition cannot be turned into a Form.

    Pydantic catches most structural problems; this covers the ones that
    only show up when the element tree is assembled (duplicate ids, logic
    rules pointing at elements that do not exist).
    """


class HookError(FormflowError):
    """Raised when code asks the hook bus for a hook that has no spec."""

    def __init__(self, hook_name: str) -> None:
        self.hook_name = hook_name
        super().__init__(f"Unknown hook '{hook_name}'. Hooks must be declared in formflow.plugins.hookspecs")


class UnknownValidatorError(FormflowError):
    """Raised when a field references a validator type that is not registered."""
