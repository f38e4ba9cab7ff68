# src/formflow/engine/gates.py
"""Entry gates: entry limits and the submission schedule.

Each check returns None to let the submission proceed, or the ErrorResult
that ends it. Both run before any persistent side effect.

The count or existence check and the later entry creation are separate
repository calls. Two concurrent submissions can both pass the gate and
both be stored. Deployments that must enforce a hard limit need to
serialize submissions per form outside this module.
"""

from __future__ import annotations

from datetime import UTC, datetime

from formflow.contracts.enums import OneEntryPer
from formflow.contracts.protocols import CapabilityCheck, Repository
from formflow.contracts.request import RequestContext
from formflow.contracts.results import ErrorResult
from formflow.core.clock import DEFAULT_CLOCK, Clock
from formflow.core.config import FormflowSettings
from formflow.core.form import Form
from formflow.core.logging import get_logger
from formflow.plugins.manager import HookBus

logger = get_logger(__name__)

SCHEDULE_FORMAT = "%Y-%m-%d %H:%M:%S"

ONLY_ONE_SUBMISSION = "Only one submission is allowed."
FORM_CLOSED = "This form is currently closed for submissions."
NOT_YET_OPEN = "This form is not yet open for submissions."
NO_LONGER_OPEN = "This form is no longer open for submissions."


def parse_schedule_bound(value: str) -> datetime | None:
    """Parse a ``YYYY-MM-DD HH:MM:SS`` UTC bound; None when unset or malformed."""
    if not value:
        return None
    try:
        return datetime.strptime(value, SCHEDULE_FORMAT).replace(tzinfo=UTC)
    except ValueError:
        logger.warning("Ignoring unparseable schedule bound", value=value)
        return None


class EntryGate:
    """Entry limit and schedule checks for one installation.

    Usage:
        gate = EntryGate(settings, repository, capabilities, hooks=bus)
        if (error := gate.check(form, request)) is not None:
            return error
    """

    def __init__(
        self,
        settings: FormflowSettings,
        repository: Repository,
        capabilities: CapabilityCheck,
        *,
        hooks: HookBus | None = None,
        clock: Clock = DEFAULT_CLOCK,
    ) -> None:
        self._settings = settings
        self._repository = repository
        self._capabilities = capabilities
        self._hooks = hooks if hooks is not None else HookBus()
        self._clock = clock

    def check(self, form: Form, request: RequestContext) -> ErrorResult | None:
        """Entry limits first, then the schedule."""
        return self.check_entry_limits(form, request) or self.check_schedule(form)

    def check_entry_limits(self, form: Form, request: RequestContext) -> ErrorResult | None:
        if not (self._settings.save_entries and form.save_entry):
            return None

        bypass = self._hooks.run(
            "formflow_bypass_entry_limits",
            self._capabilities.has_bypass_capability(),
            form=form,
        )
        if bypass:
            return None

        settings = form.settings
        if settings.one_entry_per_user and self._entry_exists(form, request):
            logger.info("Blocked repeat submission", form_id=form.id, policy=str(settings.one_entry_per))
            error = ErrorResult.message(form.translation("onlyOneSubmissionAllowed", ONLY_ONE_SUBMISSION))
            return self._hooks.run("formflow_one_entry_per_user_error", error, form=form)

        if settings.entry_limit is not None and settings.entry_limit > 0:
            count = self._hooks.run("formflow_entry_count", self._repository.count_entries(form.id), form=form)
            if count >= settings.entry_limit:
                logger.info("Entry limit reached", form_id=form.id, count=count, limit=settings.entry_limit)
                error = ErrorResult.message(form.translation("thisFormIsCurrentlyClosed", FORM_CLOSED))
                return self._hooks.run("formflow_entry_limit_reached_error", error, form=form)

        return None

    def _entry_exists(self, form: Form, request: RequestContext) -> bool:
        exists = False
        match form.settings.one_entry_per:
            case OneEntryPer.LOGGED_IN_USER:
                # Anonymous submitters are never blocked under this policy
                if request.user is not None:
                    exists = self._repository.entry_exists(form.id, created_by=request.user.id)
            case OneEntryPer.IP_ADDRESS:
                exists = self._repository.entry_exists(form.id, ip=request.client_ip)
        return bool(self._hooks.run("formflow_one_entry_per_user_entry_exists", exists, form=form))

    def check_schedule(self, form: Form) -> ErrorResult | None:
        settings = form.settings
        if not settings.enable_schedule:
            return None
        if not settings.schedule_start and not settings.schedule_end:
            return None

        bypass = self._hooks.run(
            "formflow_bypass_form_schedule",
            self._capabilities.has_bypass_capability(),
            form=form,
        )
        if bypass:
            return None

        now = self._clock.now()

        start = parse_schedule_bound(settings.schedule_start)
        if start is not None and now < start:
            logger.info("Form not yet open", form_id=form.id, start=settings.schedule_start)
            error = ErrorResult.message(form.translation("formIsNotYetOpenForSubmissions", NOT_YET_OPEN))
            return self._hooks.run("formflow_schedule_start_error", error, form=form)

        end = parse_schedule_bound(settings.schedule_end)
        if end is not None and now > end:
            logger.info("Form closed", form_id=form.id, end=settings.schedule_end)
            error = ErrorResult.message(form.translation("formIsNoLongerOpenForSubmissions", NO_LONGER_OPEN))
            return self._hooks.run("formflow_schedule_end_error", error, form=form)

        return None
