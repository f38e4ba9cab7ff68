# src/formflow/engine/pipeline.py
"""SubmissionPipeline: turns one submitted request into one SubmissionResult.

Stage order is fixed:

    1.  CSRF token check (when enabled)
    2.  formflow_pre_process hook
    3.  Entry gates (limits, then schedule)
    4.  Merge staged uploads into the submitted values
    5.  Bind values onto the element tree
    6.  formflow_post_set_form_values hook
    7.  Recompute conditional visibility
    8.  Set the current page from the submitted page id
    9.  formflow_pre_validate hook
    10. Multi-page navigation (back, or validate the current page and move on)
    11. Whole-form validation on the last page
    12. Persist, notify, confirm:
        formflow_post_validate -> create entry -> formflow_post_set_entry_id
        -> finalize uploads -> save field values -> formflow_post_save_entry_data
        -> notifications -> confirmation -> custom storage
        -> clear staged session state -> formflow_post_process -> success

Any stage can end the run by returning a result. Nothing after that stage
runs, so a gate or validation failure has no persistent side effects.
"""

from __future__ import annotations

import hmac
from dataclasses import replace
from typing import Any

from formflow.contracts.enums import TokenFormat
from formflow.contracts.protocols import (
    CapabilityCheck,
    ContentLookup,
    Repository,
    SessionStore,
    Transport,
    UploadCoordinator,
)
from formflow.contracts.request import RequestContext, Submission
from formflow.contracts.results import (
    ErrorResult,
    PageTransitionResult,
    SubmissionResult,
    SuccessResult,
)
from formflow.core.clock import DEFAULT_CLOCK, Clock
from formflow.core.config import FormflowSettings
from formflow.core.elements import Page
from formflow.core.form import Form
from formflow.core.logging import get_logger
from formflow.engine.confirmation import ConfirmationRenderer
from formflow.engine.gates import EntryGate
from formflow.engine.navigation import PageNavigator
from formflow.engine.notifications import NotificationDispatcher
from formflow.engine.validation import Validator
from formflow.plugins.manager import HookBus
from formflow.tokens.engine import TokenEngine

logger = get_logger(__name__)

CSRF_ERROR_TITLE = "An error occurred"
CSRF_ERROR_CONTENT = "Refresh the page and try again."

MAX_IP_LENGTH = 45
MAX_URL_LENGTH = 512


class SubmissionPipeline:
    """Processes submissions for one installation.

    Collaborators are injected once; ``process`` is called per request with
    a freshly built Form.

    Usage:
        pipeline = SubmissionPipeline(
            settings,
            repository=SqlRepository.from_url("sqlite:///entries.db"),
            session=session,
            uploads=uploads,
            transport=mailer,
            capabilities=capabilities,
        )
        result = pipeline.process(Form(form_settings), submission, request)
        return result.to_dict()
    """

    def __init__(
        self,
        settings: FormflowSettings,
        *,
        repository: Repository,
        session: SessionStore,
        uploads: UploadCoordinator,
        transport: Transport,
        capabilities: CapabilityCheck,
        hooks: HookBus | None = None,
        content: ContentLookup | None = None,
        clock: Clock = DEFAULT_CLOCK,
    ) -> None:
        self._settings = settings
        self._repository = repository
        self._session = session
        self._uploads = uploads
        self._clock = clock
        self._hooks = hooks if hooks is not None else HookBus()
        self._tokens = TokenEngine(settings, hooks=self._hooks, content=content, clock=clock)
        self._gate = EntryGate(settings, repository, capabilities, hooks=self._hooks, clock=clock)
        self._validator = Validator()
        self._notifications = NotificationDispatcher(self._tokens, transport)
        self._confirmation = ConfirmationRenderer(self._tokens)

    @property
    def tokens(self) -> TokenEngine:
        return self._tokens

    @property
    def hooks(self) -> HookBus:
        return self._hooks

    def process(self, form: Form, submission: Submission, request: RequestContext) -> SubmissionResult:
        """Run every stage in order and return the first terminal result."""
        log = logger.bind(form_id=form.id)

        if self._settings.csrf_protection and not self._csrf_matches(submission):
            log.warning("CSRF token mismatch")
            error = ErrorResult.message(CSRF_ERROR_CONTENT, title=CSRF_ERROR_TITLE)
            return self._hooks.run("formflow_csrf_failure_response", error, form=form)

        if (veto := self._hooks.run_veto("formflow_pre_process", form=form)) is not None:
            return veto

        if (gate_error := self._gate.check(form, request)) is not None:
            log.info("Submission stopped at gate")
            return gate_error

        merged = self._uploads.merge_staged(form, submission.values)
        submission = replace(submission, values=merged)
        form.bind(submission)
        log.debug("Values bound", field_count=len(submission.values))

        if (veto := self._hooks.run_veto("formflow_post_set_form_values", form=form)) is not None:
            return veto

        form.calculate_element_visibility()
        form.set_current_page_by_id(submission.current_page_id)

        if (veto := self._hooks.run_veto("formflow_pre_validate", form=form)) is not None:
            return veto

        if form.has_pages:
            transition = self._navigate(form, submission)
            if transition is not None:
                log.debug("Page transition", result_type=str(transition.type))
                return transition

        outcome = self._validator.validate(form)
        if not outcome.valid:
            log.info("Submission failed validation", error_count=len(form.errors()))
            return self._validation_error(form, outcome.first_error_page)

        return self._complete(form, submission, request)

    # -------------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------------

    def _csrf_matches(self, submission: Submission) -> bool:
        expected = self._session.get_csrf_token()
        submitted = submission.csrf_token
        if not expected or not submitted:
            return False
        return hmac.compare_digest(submitted.encode(), expected.encode())

    def _navigate(self, form: Form, submission: Submission) -> SubmissionResult | None:
        """Back/next handling. None means the current page is the last one."""
        navigator = PageNavigator(form)

        if submission.is_back:
            previous_page_id = navigator.previous_page_id()
            if previous_page_id is None:
                previous_page_id = form.current_page.id
            return PageTransitionResult(page_id=previous_page_id)

        next_page_id = navigator.next_page_id()
        if next_page_id is None:
            return None
        if self._validator.validate_page(form.current_page):
            return PageTransitionResult(page_id=next_page_id)
        return self._validation_error(form, form.current_page, page_only=True)

    def _validation_error(self, form: Form, page: Page | None, *, page_only: bool = False) -> ErrorResult:
        errors = page.errors() if page_only and page is not None else form.errors()
        return ErrorResult(
            error=form.global_error(),
            errors=errors,
            page_id=page.id if page is not None else None,
        )

    def _complete(self, form: Form, submission: Submission, request: RequestContext) -> SubmissionResult:
        log = logger.bind(form_id=form.id)

        if (veto := self._hooks.run_veto("formflow_post_validate", form=form)) is not None:
            return veto

        saving = self._settings.save_entries and form.save_entry
        if saving:
            entry = self._repository.create_entry(self._entry_fields(form, submission, request))
            form.entry_id = entry.id
            log = log.bind(entry_id=entry.id)
            log.info("Entry created")

        if (veto := self._hooks.run_veto("formflow_post_set_entry_id", form=form)) is not None:
            return veto

        self._uploads.finalize(form)

        if saving and form.entry_id is not None and form.entry_id > 0:
            values = self._entry_values(form)
            self._repository.save_entry_field_values(form.entry_id, values)
            log.debug("Entry data saved", value_count=len(values))

        if (veto := self._hooks.run_veto("formflow_post_save_entry_data", form=form)) is not None:
            return veto

        reports = self._notifications.dispatch(form, request)
        log.debug("Notifications processed", statuses=[str(report.status) for report in reports])

        confirmation = self._confirmation.render(form, request)

        self._save_custom_storage(form, request)

        if self._session.has_staged(form.session_key):
            self._session.clear_staged(form.session_key)

        if (veto := self._hooks.run_veto("formflow_post_process", form=form)) is not None:
            return veto

        log.info("Submission processed", confirmation_type=str(confirmation.type))
        return SuccessResult(confirmation=confirmation)

    # -------------------------------------------------------------------------
    # Persistence helpers
    # -------------------------------------------------------------------------

    def _entry_fields(self, form: Form, submission: Submission, request: RequestContext) -> dict[str, Any]:
        now = self._clock.now()
        return {
            "form_id": form.id,
            "ip": request.client_ip[:MAX_IP_LENGTH] if self._settings.save_ip_addresses else "",
            "form_url": submission.form_url[:MAX_URL_LENGTH],
            "referring_url": submission.referring_url[:MAX_URL_LENGTH],
            "post_id": submission.numeric_post_id,
            "created_by": request.user.id if request.user is not None else None,
            "created_at": now,
            "updated_at": now,
        }

    @staticmethod
    def _entry_values(form: Form) -> dict[int, str]:
        """Stored values for visible, non-empty fields flagged for saving."""
        return {
            field.id: field.value_for_storage()
            for field in form.iter_fields()
            if field.save_to_database and not field.is_hidden() and not field.is_empty()
        }

    def _save_custom_storage(self, form: Form, request: RequestContext) -> None:
        storage = form.settings.storage
        if not storage.is_active:
            return
        row = {
            column.name: self._tokens.replace_variables(column.value, TokenFormat.TEXT, form, request)
            for column in storage.columns
            if column.name
        }
        if not row:
            return
        self._repository.insert_custom_row(storage.table, row)
        logger.debug("Custom storage row written", form_id=form.id, table=storage.table)
