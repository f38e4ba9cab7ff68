# src/formflow/core/config.py
"""
Configuration schema and loading for formflow.

Two kinds of configuration:
- FormflowSettings: installation-wide options (CSRF, entry saving, site
  identity, email defaults, logging). Loaded with Dynaconf so values can
  be overridden from FORMFLOW_* environment variables.
- FormSettings: one form definition (element tree, gating, notifications,
  confirmations, custom storage). Loaded from a YAML file.

Uses Pydantic for validation. Settings are frozen (immutable) after construction.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Annotated, Any, Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from formflow.contracts.enums import (
    ConfirmationType,
    FieldKind,
    LogicAction,
    LogicMatch,
    LogicOperator,
    OneEntryPer,
    TokenFormat,
)

# =============================================================================
# Installation-wide settings
# =============================================================================


class SiteSettings(BaseModel):
    """Identity of the site hosting the forms ({site_title}, {admin_email})."""

    model_config = {"frozen": True}

    title: str = ""
    tagline: str = ""
    admin_email: str = ""
    timezone: str = Field(
        default="UTC",
        description="IANA timezone used when rendering {date}, {time} and {datetime}",
    )

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v


class EmailDefaults(BaseModel):
    """Default addresses exposed to templates as {default_email_address} etc."""

    model_config = {"frozen": True}

    default_email_address: str = ""
    default_email_name: str = ""
    default_from_email_address: str = ""
    default_from_email_name: str = ""


class LoggingSettings(BaseModel):
    model_config = {"frozen": True}

    json_output: bool = False
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


class FormflowSettings(BaseModel):
    """Top-level installation configuration.

    All settings are validated and frozen after construction.
    """

    model_config = {"frozen": True}

    csrf_protection: bool = Field(
        default=True,
        description="Compare the submitted CSRF token with the session token",
    )
    save_entries: bool = Field(
        default=True,
        description="Master switch for entry persistence; also disables entry limits when off",
    )
    save_ip_addresses: bool = Field(
        default=True,
        description="Store the submitter IP on new entries",
    )
    site: SiteSettings = Field(default_factory=SiteSettings)
    email: EmailDefaults = Field(default_factory=EmailDefaults)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    database_url: str | None = Field(
        default=None,
        description="SQLAlchemy URL for the reference entry repository",
    )


# =============================================================================
# Form definition
# =============================================================================


class LogicRuleSettings(BaseModel):
    """One conditional logic rule: compare an element's value against ``value``."""

    model_config = {"frozen": True}

    element_id: int
    operator: LogicOperator = LogicOperator.EQ
    value: str = ""


class LogicSettings(BaseModel):
    """Conditional logic attached to an element, notification or confirmation.

    Example YAML:
        logic:
          enabled: true
          action: show
          match: all
          rules:
            - {element_id: 3, operator: eq, value: "Yes"}
    """

    model_config = {"frozen": True}

    enabled: bool = False
    action: LogicAction = LogicAction.SHOW
    match: LogicMatch = LogicMatch.ALL
    rules: tuple[LogicRuleSettings, ...] = ()

    @property
    def is_active(self) -> bool:
        """Logic only applies when enabled and at least one rule exists."""
        return self.enabled and len(self.rules) > 0


class ValidatorSettings(BaseModel):
    """A named field validator with its options.

    Example YAML:
        validators:
          - type: length
            options: {min: 2, max: 40}
    """

    model_config = {"frozen": True}

    type: str
    options: dict[str, Any] = Field(default_factory=dict)
    message: str | None = None


class FieldSettings(BaseModel):
    model_config = {"frozen": True}

    type: Literal["field"] = "field"
    id: int
    kind: FieldKind = FieldKind.TEXT
    label: str = ""
    admin_label: str = ""
    required: bool = False
    required_message: str = "This field is required"
    default: Any = None
    show_in_email: bool = True
    save_to_database: bool = True
    validators: tuple[ValidatorSettings, ...] = ()
    logic: LogicSettings = Field(default_factory=LogicSettings)


class HtmlSettings(BaseModel):
    model_config = {"frozen": True}

    type: Literal["html"] = "html"
    id: int
    content: str = ""
    show_in_email: bool = False
    logic: LogicSettings = Field(default_factory=LogicSettings)


class GroupSettings(BaseModel):
    model_config = {"frozen": True}

    type: Literal["group"] = "group"
    id: int
    label: str = ""
    show_label_in_email: bool = False
    logic: LogicSettings = Field(default_factory=LogicSettings)
    elements: tuple[ElementSettings, ...] = ()


ElementSettings = Annotated[
    FieldSettings | HtmlSettings | GroupSettings,
    Field(discriminator="type"),
]


class PageSettings(BaseModel):
    model_config = {"frozen": True}

    type: Literal["page"] = "page"
    id: int
    label: str = ""
    show_label_in_email: bool = False
    logic: LogicSettings = Field(default_factory=LogicSettings)
    elements: tuple[ElementSettings, ...] = ()


class NotificationSettings(BaseModel):
    """An email sent after a successful submission.

    Subject and recipients are rendered as text; the body is rendered in
    ``format``.
    """

    model_config = {"frozen": True}

    name: str = ""
    enabled: bool = True
    subject: str = ""
    body: str = ""
    format: TokenFormat = TokenFormat.HTML
    recipients: tuple[str, ...] = ()
    logic: LogicSettings = Field(default_factory=LogicSettings)

    @field_validator("format")
    @classmethod
    def validate_body_format(cls, v: TokenFormat) -> TokenFormat:
        if v not in (TokenFormat.HTML, TokenFormat.TEXT):
            raise ValueError(f"Notification body format must be html or text, got '{v}'")
        return v


class ConfirmationSettings(BaseModel):
    model_config = {"frozen": True}

    name: str = ""
    type: ConfirmationType = ConfirmationType.MESSAGE
    message: str = "Your message has been sent. Thanks!"
    redirect_url: str = ""
    redirect_delay: int = Field(default=3, ge=0)
    hide_form: bool = False
    reset_form: bool = True
    logic: LogicSettings = Field(default_factory=LogicSettings)


class StorageColumnSettings(BaseModel):
    model_config = {"frozen": True}

    name: str = ""
    value: str = ""


class CustomStorageSettings(BaseModel):
    """Copy each successful submission into a user-owned table.

    Column values are templates rendered with the full token pass.
    """

    model_config = {"frozen": True}

    enabled: bool = False
    table: str = ""
    columns: tuple[StorageColumnSettings, ...] = ()

    @property
    def is_active(self) -> bool:
        return self.enabled and bool(self.table) and len(self.columns) > 0


class GlobalErrorSettings(BaseModel):
    model_config = {"frozen": True}

    enabled: bool = True
    title: str = ""
    content: str = "There was a problem"


class FormSettings(BaseModel):
    """One form definition.

    Validated at construction: at least one page, unique element ids across
    the whole tree, and logic rules that only reference existing elements.
    """

    model_config = {"frozen": True}

    id: int = Field(gt=0)
    name: str = ""

    # Entry persistence and limits
    save_entry: bool = True
    one_entry_per_user: bool = False
    one_entry_per: OneEntryPer = OneEntryPer.LOGGED_IN_USER
    entry_limit: int | None = Field(
        default=None,
        description="Block submissions once this many entries exist; None or <= 0 disables",
    )

    # Schedule, bounds in "YYYY-MM-DD HH:MM:SS" UTC
    enable_schedule: bool = False
    schedule_start: str = ""
    schedule_end: str = ""

    # Locale and date formats (strftime syntax); empty falls back to locale
    locale: str = "en"
    date_format: str = ""
    time_format: str = ""
    datetime_format: str = ""

    error: GlobalErrorSettings = Field(default_factory=GlobalErrorSettings)
    translations: dict[str, str] = Field(default_factory=dict)

    pages: tuple[PageSettings, ...]
    notifications: tuple[NotificationSettings, ...] = ()
    confirmations: tuple[ConfirmationSettings, ...] = ()
    storage: CustomStorageSettings = Field(default_factory=CustomStorageSettings)

    @field_validator("pages")
    @classmethod
    def validate_pages_not_empty(cls, v: tuple[PageSettings, ...]) -> tuple[PageSettings, ...]:
        if not v:
            raise ValueError("A form needs at least one page")
        return v

    @model_validator(mode="after")
    def validate_unique_element_ids(self) -> FormSettings:
        ids = [element.id for element in self.walk_elements()]
        duplicates = sorted({element_id for element_id in ids if ids.count(element_id) > 1})
        if duplicates:
            raise ValueError(f"Duplicate element id(s): {duplicates}")
        return self

    @model_validator(mode="after")
    def validate_logic_references(self) -> FormSettings:
        known = {element.id for element in self.walk_elements()}
        owners: list[tuple[str, LogicSettings]] = [(f"element {e.id}", e.logic) for e in self.walk_elements()]
        owners += [(f"notification '{n.name}'", n.logic) for n in self.notifications]
        owners += [(f"confirmation '{c.name}'", c.logic) for c in self.confirmations]
        for owner, logic in owners:
            for rule in logic.rules:
                if rule.element_id not in known:
                    raise ValueError(f"Logic rule on {owner} references unknown element {rule.element_id}")
        return self

    def walk_elements(self) -> list[PageSettings | FieldSettings | HtmlSettings | GroupSettings]:
        """All element definitions in pre-order, pages included."""
        found: list[PageSettings | FieldSettings | HtmlSettings | GroupSettings] = []

        def walk(element: PageSettings | FieldSettings | HtmlSettings | GroupSettings) -> None:
            found.append(element)
            if isinstance(element, PageSettings | GroupSettings):
                for child in element.elements:
                    walk(child)

        for page in self.pages:
            walk(page)
        return found


GroupSettings.model_rebuild()
PageSettings.model_rebuild()
FormSettings.model_rebuild()


# =============================================================================
# Loading
# =============================================================================

# Regex pattern for ${VAR} or ${VAR:-default} syntax
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values.

    Args:
        config: Configuration dict (may contain nested structures)

    Returns:
        New dict with environment variables expanded
    """

    def _expand_string(value: str) -> str:
        def replacer(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default = match.group(2)
            env_value = os.environ.get(var_name)
            if env_value is not None:
                return env_value
            if default is not None:
                return default
            # No env var and no default - keep original
            return match.group(0)

        return _ENV_VAR_PATTERN.sub(replacer, value)

    def _expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _expand_string(value)
        elif isinstance(value, dict):
            return {k: _expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [_expand_value(item) for item in value]
        else:
            return value

    return {k: _expand_value(v) for k, v in config.items()}


def _lower_keys(value: Any) -> Any:
    """Dynaconf upper-cases top-level keys; Pydantic fields are lowercase."""
    if isinstance(value, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_lower_keys(item) for item in value]
    return value


def load_settings(config_path: Path) -> FormflowSettings:
    """Load installation settings from YAML with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (FORMFLOW_*) - highest priority
    2. Config file
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: FORMFLOW_SITE__TITLE for nested keys.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated FormflowSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="FORMFLOW",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k: v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}
    raw_config = _lower_keys(raw_config)
    raw_config = _expand_env_vars(raw_config)

    return FormflowSettings(**raw_config)


def load_form_settings(form_path: Path) -> FormSettings:
    """Load one form definition from a YAML file.

    Raises:
        ValidationError: If the definition fails Pydantic validation
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file does not contain a mapping
    """
    if not form_path.exists():
        raise FileNotFoundError(f"Form definition not found: {form_path}")

    raw = yaml.safe_load(form_path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError(f"Form definition must be a mapping, got {type(raw).__name__}: {form_path}")
    return FormSettings(**_expand_env_vars(raw))
