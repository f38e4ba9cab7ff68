# src/formflow/engine/notifications.py
"""Notification dispatch after a successful submission.

Notifications are rendered with the full token pass and handed to the
Transport one at a time, in declaration order. A failing transport call is
logged and reported; it never stops the notifications after it or the
rest of the pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass

from formflow.contracts.enums import DispatchStatus, TokenFormat
from formflow.contracts.protocols import Transport
from formflow.contracts.request import RequestContext
from formflow.core.config import NotificationSettings
from formflow.core.form import Form
from formflow.core.logging import get_logger
from formflow.core.logic import check_logic_action
from formflow.tokens.engine import TokenEngine

logger = get_logger(__name__)


@dataclass(frozen=True)
class DispatchReport:
    """What happened to one notification.

    Attributes:
        name: Notification name from the form definition
        status: SENT, DISABLED, LOGIC_FAILED or FAILED
        error: Exception text when status is FAILED
    """

    name: str
    status: DispatchStatus
    error: str | None = None


class NotificationDispatcher:
    """Renders and sends a form's notifications.

    Usage:
        dispatcher = NotificationDispatcher(tokens, transport)
        reports = dispatcher.dispatch(form, request)
    """

    def __init__(self, tokens: TokenEngine, transport: Transport) -> None:
        self._tokens = tokens
        self._transport = transport

    def should_send(self, notification: NotificationSettings, form: Form) -> bool:
        if notification.logic.is_active:
            return check_logic_action(notification.logic, form)
        return True

    def render(
        self,
        notification: NotificationSettings,
        form: Form,
        request: RequestContext,
    ) -> tuple[NotificationSettings, str, str]:
        """Render subject, body and recipients.

        Returns:
            (notification with rendered recipients, subject, body)
        """
        subject = self._tokens.replace_variables(notification.subject, TokenFormat.TEXT, form, request)
        body = self._tokens.replace_variables(notification.body, notification.format, form, request)
        recipients = tuple(
            self._tokens.replace_variables(recipient, TokenFormat.TEXT, form, request)
            for recipient in notification.recipients
        )
        return notification.model_copy(update={"recipients": recipients}), subject, body

    def dispatch(self, form: Form, request: RequestContext) -> list[DispatchReport]:
        reports: list[DispatchReport] = []
        for notification in form.settings.notifications:
            if not notification.enabled:
                reports.append(DispatchReport(notification.name, DispatchStatus.DISABLED))
                continue

            if not self.should_send(notification, form):
                logger.debug("Notification logic not satisfied", form_id=form.id, notification=notification.name)
                reports.append(DispatchReport(notification.name, DispatchStatus.LOGIC_FAILED))
                continue

            try:
                rendered, subject, body = self.render(notification, form, request)
                self._transport.send(rendered, subject, body)
            except Exception as e:
                logger.warning(
                    "Notification failed",
                    form_id=form.id,
                    notification=notification.name,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                reports.append(DispatchReport(notification.name, DispatchStatus.FAILED, error=str(e)))
                continue

            logger.info("Notification sent", form_id=form.id, notification=notification.name)
            reports.append(DispatchReport(notification.name, DispatchStatus.SENT))
        return reports
