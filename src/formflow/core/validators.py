"""Pluggable per-field validators.

A validator is any callable taking the field's value and the field and
returning an error message, or None when the value is acceptable. The
required check lives on the field itself; validators only run on
non-empty values.

Form definitions reference validators by name:

    validators:
      - type: email
      - type: length
        options: {min: 2, max: 40}
        message: "Between 2 and 40 characters please"

Additional validator types can be registered with
``ValidatorRegistry.register(name, factory)``. Each registry is independent;
pass one to ``Form(settings, validators=registry)`` to use the extra types.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, Protocol

from email_validator import EmailNotValidError, validate_email

from formflow.contracts.errors import FormConfigurationError, UnknownValidatorError

if TYPE_CHECKING:
    from formflow.core.config import ValidatorSettings
    from formflow.core.elements import Field

class FieldValidator(Protocol):
    def __call__(self, value: Any, field: Field) -> str | None: ...


ValidatorFactory = Callable[[Mapping[str, Any], str | None], FieldValidator]


def _text_of(value: Any) -> str:
    if isinstance(value, list):
        return "".join(value)
    if isinstance(value, Mapping):
        return "".join(str(part) for part in value.values())
    return str(value)


def email_validator(options: Mapping[str, Any], message: str | None) -> FieldValidator:
    error = message or "Invalid email address"

    def validate(value: Any, field: Field) -> str | None:
        try:
            validate_email(_text_of(value), check_deliverability=False)
        except EmailNotValidError:
            return error
        return None

    return validate


def length_validator(options: Mapping[str, Any], message: str | None) -> FieldValidator:
    minimum = int(options.get("min", 0))
    maximum = options.get("max")
    limit = int(maximum) if maximum is not None else None

    def validate(value: Any, field: Field) -> str | None:
        length = len(_text_of(value))
        if length < minimum:
            return message or f"Value must be at least {minimum} characters"
        if limit is not None and length > limit:
            return message or f"Value must be no more than {limit} characters"
        return None

    return validate


def regex_validator(options: Mapping[str, Any], message: str | None) -> FieldValidator:
    if "pattern" not in options:
        raise FormConfigurationError("The regex validator needs a 'pattern' option")
    pattern = re.compile(str(options["pattern"]))
    invert = bool(options.get("invert", False))
    error = message or "Invalid value"

    def validate(value: Any, field: Field) -> str | None:
        matched = pattern.search(_text_of(value)) is not None
        return None if matched != invert else error

    return validate


def digits_validator(options: Mapping[str, Any], message: str | None) -> FieldValidator:
    allow_whitespace = bool(options.get("allow_whitespace", False))
    error = message or "Only digits are allowed"

    def validate(value: Any, field: Field) -> str | None:
        text = _text_of(value)
        if allow_whitespace:
            text = re.sub(r"\s", "", text)
        return None if text.isdigit() else error

    return validate


class ValidatorRegistry:
    """Maps validator type names to factories.

    Usage:
        registry = ValidatorRegistry()
        registry.register("postcode", postcode_validator)
        validator = registry.build(settings)
    """

    def __init__(self) -> None:
        self._factories: dict[str, ValidatorFactory] = {
            "email": email_validator,
            "length": length_validator,
            "regex": regex_validator,
            "digits": digits_validator,
        }

    def register(self, name: str, factory: ValidatorFactory) -> None:
        self._factories[name] = factory

    def names(self) -> list[str]:
        return sorted(self._factories)

    def build(self, settings: ValidatorSettings) -> FieldValidator:
        """Instantiate a validator from its settings.

        Raises:
            UnknownValidatorError: If the type is not registered
        """
        if settings.type not in self._factories:
            raise UnknownValidatorError(f"Unknown validator type '{settings.type}'. Available: {self.names()}")
        return self._factories[settings.type](settings.options, settings.message)

