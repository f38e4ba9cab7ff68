# src/formflow/plugins/hookspecs.py
"""pluggy hook specifications for formflow extensions.

Every hook is a filter: implementations receive the current ``value`` and
return the value to pass on. HookBus threads the value through the
implementations in registration order.

Pipeline hooks start from ``None``. Returning a SubmissionResult from one
of them vetoes the submission: the pipeline stops and returns it.

Usage (implementing an extension):
    from formflow.plugins.hookspecs import hookimpl

    class BlockWeekends:
        @hookimpl  # NOT @hookspec - that's for defining specs
        def formflow_pre_process(self, value, form):
            if date.today().weekday() >= 5:
                return ErrorResult.message("Closed at weekends")
            return value

Implementations may declare any subset of a hook's arguments.
"""

from typing import TYPE_CHECKING, Any

import pluggy

if TYPE_CHECKING:
    from formflow.contracts.results import ErrorResult, SubmissionResult
    from formflow.core.elements import Field
    from formflow.core.form import Form
    from formflow.tokens.parser import TokenRef

# Project name for pluggy
PROJECT_NAME = "formflow"

# Hook specification marker
hookspec = pluggy.HookspecMarker(PROJECT_NAME)

# Hook implementation marker (for extensions to use)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class FormflowPipelineSpec:
    """Stage hooks run by SubmissionPipeline. A returned SubmissionResult vetoes."""

    @hookspec
    def formflow_pre_process(self, value: "SubmissionResult | None", form: "Form") -> "SubmissionResult | None":
        """Before any gate runs."""

    @hookspec
    def formflow_post_set_form_values(self, value: "SubmissionResult | None", form: "Form") -> "SubmissionResult | None":
        """After submitted values are bound, before visibility is computed."""

    @hookspec
    def formflow_pre_validate(self, value: "SubmissionResult | None", form: "Form") -> "SubmissionResult | None":
        """After visibility and the current page are set, before navigation."""

    @hookspec
    def formflow_post_validate(self, value: "SubmissionResult | None", form: "Form") -> "SubmissionResult | None":
        """After the whole form validated, before anything is persisted."""

    @hookspec
    def formflow_post_set_entry_id(self, value: "SubmissionResult | None", form: "Form") -> "SubmissionResult | None":
        """After the entry is created (``form.entry_id`` is set)."""

    @hookspec
    def formflow_post_save_entry_data(self, value: "SubmissionResult | None", form: "Form") -> "SubmissionResult | None":
        """After field values are persisted, before notifications."""

    @hookspec
    def formflow_post_process(self, value: "SubmissionResult | None", form: "Form") -> "SubmissionResult | None":
        """After everything, just before the success result is returned."""

    @hookspec
    def formflow_csrf_failure_response(self, value: "ErrorResult", form: "Form") -> "ErrorResult":
        """Override the result returned when the CSRF token does not match."""


class FormflowGateSpec:
    """Filters consulted by EntryGate."""

    @hookspec
    def formflow_bypass_entry_limits(self, value: bool, form: "Form") -> bool:
        """Whether to skip the entry limit checks (default: bypass capability)."""

    @hookspec
    def formflow_bypass_form_schedule(self, value: bool, form: "Form") -> bool:
        """Whether to skip the schedule check (default: bypass capability)."""

    @hookspec
    def formflow_one_entry_per_user_entry_exists(self, value: bool, form: "Form") -> bool:
        """Override whether the submitter already has an entry."""

    @hookspec
    def formflow_entry_count(self, value: int, form: "Form") -> int:
        """Override the entry count compared against the entry limit."""

    @hookspec
    def formflow_one_entry_per_user_error(self, value: "ErrorResult", form: "Form") -> "ErrorResult":
        """Override the result for a second submission by the same user."""

    @hookspec
    def formflow_entry_limit_reached_error(self, value: "ErrorResult", form: "Form") -> "ErrorResult":
        """Override the result once the entry limit is reached."""

    @hookspec
    def formflow_schedule_start_error(self, value: "ErrorResult", form: "Form") -> "ErrorResult":
        """Override the result for submissions before the schedule opens."""

    @hookspec
    def formflow_schedule_end_error(self, value: "ErrorResult", form: "Form") -> "ErrorResult":
        """Override the result for submissions after the schedule closes."""


class FormflowTokenSpec:
    """Filters applied by TokenEngine to resolved token values."""

    @hookspec
    def formflow_replace_variables_pre_process(self, value: str, token: "TokenRef", fmt: str) -> str:
        """A value resolved by the pre-process pass, before URL encoding.

        Tokens no built-in resolver knows arrive with ``value`` set to the raw
        token text; returning something else defines a custom token.
        """

    @hookspec
    def formflow_replace_variables(self, value: str, token: "TokenRef", fmt: str, form: "Form") -> str:
        """A value resolved by the full pass, before URL encoding."""

    @hookspec
    def formflow_element_token_value(
        self,
        value: str,
        element: "Field",
        fmt: str,
        separator: str,
        token: "TokenRef",
    ) -> str:
        """The rendered value of an {element} token."""

    @hookspec
    def formflow_all_form_data_text(self, value: str, form: "Form", show_empty_fields: bool) -> str:
        """The plain text rendering of {all_form_data}."""

    @hookspec
    def formflow_all_form_data_html(self, value: str, form: "Form", show_empty_fields: bool) -> str:
        """The HTML table rendering of {all_form_data}."""


HOOK_SPECS: tuple[type[Any], ...] = (FormflowPipelineSpec, FormflowGateSpec, FormflowTokenSpec)
