# src/formflow/engine/confirmation.py
"""Confirmation selection and rendering.

The first configured confirmation is the default. Each later one takes
over, in order, the first time its logic is active and passes. A form
with no confirmations gets the default thank-you message.
"""

from __future__ import annotations

from formflow.contracts.enums import TokenFormat
from formflow.contracts.request import RequestContext
from formflow.contracts.results import ConfirmationData
from formflow.core.config import ConfirmationSettings
from formflow.core.form import Form
from formflow.core.logic import check_logic_action
from formflow.tokens.engine import TokenEngine

DEFAULT_CONFIRMATION = ConfirmationSettings(name="Default confirmation")


def select_confirmation(form: Form) -> ConfirmationSettings:
    confirmations = form.settings.confirmations
    if not confirmations:
        return DEFAULT_CONFIRMATION
    for candidate in confirmations[1:]:
        if candidate.logic.is_active and check_logic_action(candidate.logic, form):
            return candidate
    return confirmations[0]


class ConfirmationRenderer:
    """Turns the selected confirmation into the payload sent to the client."""

    def __init__(self, tokens: TokenEngine) -> None:
        self._tokens = tokens

    def render(self, form: Form, request: RequestContext) -> ConfirmationData:
        confirmation = select_confirmation(form)
        return ConfirmationData(
            type=confirmation.type,
            message=self._tokens.replace_variables(confirmation.message, TokenFormat.HTML, form, request),
            redirect_url=self._tokens.replace_variables(confirmation.redirect_url, TokenFormat.URL, form, request),
            redirect_delay=confirmation.redirect_delay,
            hide_form=confirmation.hide_form,
            reset_form=confirmation.reset_form,
        )
