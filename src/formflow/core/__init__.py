"""Core infrastructure: configuration, element tree, logic, validators, logging, clock."""

from formflow.core.clock import DEFAULT_CLOCK, Clock, MockClock, SystemClock
from formflow.core.config import (
    FormflowSettings,
    FormSettings,
    load_form_settings,
    load_settings,
)
from formflow.core.elements import Element, Field, Group, Html, Page
from formflow.core.form import Form
from formflow.core.logging import configure_logging, get_logger
from formflow.core.logic import check_logic_action
from formflow.core.validators import ValidatorRegistry

__all__ = [
    "DEFAULT_CLOCK",
    "Clock",
    "Element",
    "Field",
    "Form",
    "FormSettings",
    "FormflowSettings",
    "Group",
    "Html",
    "MockClock",
    "Page",
    "SystemClock",
    "ValidatorRegistry",
    "check_logic_action",
    "configure_logging",
    "get_logger",
    "load_form_settings",
    "load_settings",
]
