"""Submission engine: gates, validation, navigation, notifications, pipeline.

Example:
    from formflow.core import Form, load_form_settings
    from formflow.engine import SubmissionPipeline

    pipeline = SubmissionPipeline(settings, repository=repo, session=session,
                                  uploads=uploads, transport=mailer, capabilities=caps)
    result = pipeline.process(Form(load_form_settings(path)), submission, request)
"""

from formflow.engine.confirmation import ConfirmationRenderer, select_confirmation
from formflow.engine.gates import EntryGate
from formflow.engine.navigation import PageNavigator
from formflow.engine.notifications import DispatchReport, NotificationDispatcher
from formflow.engine.pipeline import SubmissionPipeline
from formflow.engine.validation import ValidationOutcome, Validator

__all__ = [
    "ConfirmationRenderer",
    "DispatchReport",
    "EntryGate",
    "NotificationDispatcher",
    "PageNavigator",
    "SubmissionPipeline",
    "ValidationOutcome",
    "Validator",
    "select_confirmation",
]
