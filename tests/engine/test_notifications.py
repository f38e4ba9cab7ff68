# tests/engine/test_notifications.py
"""Tests for notification dispatch."""

from typing import Any

from formflow.contracts.enums import DispatchStatus
from formflow.contracts.request import RequestContext
from formflow.core.form import Form
from formflow.engine.notifications import NotificationDispatcher
from formflow.tokens.engine import TokenEngine
from tests.helpers.collaborators import RecordingTransport
from tests.helpers.forms import build_form, contact_form, make_submission, show_when


def bound_form(notifications: list[dict[str, Any]]) -> Form:
    form = build_form(contact_form(notifications=notifications))
    form.bind(make_submission({"2": "Ada <3", "3": "ada@example.com", "4": "Sales"}))
    form.calculate_element_visibility()
    form.entry_id = 8
    return form


class TestDispatch:
    def test_renders_subject_body_and_recipients(
        self, token_engine: TokenEngine, request_context: RequestContext
    ) -> None:
        transport = RecordingTransport()
        form = bound_form(
            [
                {
                    "name": "Admin",
                    "subject": "Entry #{entry_id} from {element|id:2}",
                    "body": "<p>{element|id:2}</p>",
                    "recipients": ["{admin_email}", "{element|id:3}"],
                }
            ]
        )

        reports = NotificationDispatcher(token_engine, transport).dispatch(form, request_context)

        assert [r.status for r in reports] == [DispatchStatus.SENT]
        message = transport.sent[0]
        # Subject is text, body is html
        assert message.subject == "Entry #8 from Ada <3"
        assert message.body == "<p>Ada &lt;3</p>"
        assert message.notification.recipients == ("admin@example.com", "ada@example.com")

    def test_text_body(self, token_engine: TokenEngine, request_context: RequestContext) -> None:
        transport = RecordingTransport()
        form = bound_form([{"name": "Plain", "body": "{element|id:2}", "format": "text"}])
        NotificationDispatcher(token_engine, transport).dispatch(form, request_context)
        assert transport.sent[0].body == "Ada <3"

    def test_disabled_and_logic(self, token_engine: TokenEngine, request_context: RequestContext) -> None:
        transport = RecordingTransport()
        form = bound_form(
            [
                {"name": "Off", "enabled": False},
                {"name": "Support", "logic": show_when(4, "Support")},
                {"name": "Sales", "logic": show_when(4, "Sales")},
                {"name": "Not support", "logic": show_when(4, "Support", action="hide")},
            ]
        )

        reports = NotificationDispatcher(token_engine, transport).dispatch(form, request_context)

        assert [(r.name, r.status) for r in reports] == [
            ("Off", DispatchStatus.DISABLED),
            ("Support", DispatchStatus.LOGIC_FAILED),
            ("Sales", DispatchStatus.SENT),
            ("Not support", DispatchStatus.SENT),
        ]
        assert [m.notification.name for m in transport.sent] == ["Sales", "Not support"]

    def test_enabled_logic_without_rules_always_sends(
        self, token_engine: TokenEngine, request_context: RequestContext
    ) -> None:
        transport = RecordingTransport()
        form = bound_form([{"name": "Always", "logic": {"enabled": True, "rules": []}}])
        NotificationDispatcher(token_engine, transport).dispatch(form, request_context)
        assert len(transport.sent) == 1

    def test_failure_does_not_stop_later_notifications(
        self,
        token_engine: TokenEngine,
        request_context: RequestContext,
    ) -> None:
        transport = RecordingTransport(fail_on={"First"})
        form = bound_form([{"name": "First"}, {"name": "Second"}])

        reports = NotificationDispatcher(token_engine, transport).dispatch(form, request_context)

        assert reports[0].status == DispatchStatus.FAILED
        assert reports[0].error == "SMTP refused First"
        assert reports[1].status == DispatchStatus.SENT
        assert [m.notification.name for m in transport.sent] == ["Second"]
