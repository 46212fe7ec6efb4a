"""Validation gate for registration payloads."""

import string
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from .config import Settings, settings
from .models import RegistrationInput, ValidationFailure

# Top-level fields in the order violations are reported
_FIELD_ORDER = [
    (info.alias or name) for name, info in RegistrationInput.model_fields.items()
]

_MESSAGES = {
    "missing": '"{field}" is required',
    "string_too_short": '"{field}" is not allowed to be empty',
    "string_type": '"{field}" must be a string',
    "model_type": '"{field}" must be an object',
    "model_attributes_type": '"{field}" must be an object',
}


@dataclass(frozen=True)
class PasswordPolicy:
    """
    Password rules applied at registration.

    Attributes:
        min_length: Minimum number of characters
        max_length: Maximum number of characters
        require_uppercase: At least one A-Z
        require_lowercase: At least one a-z
        require_digit: At least one 0-9
        require_special: At least one punctuation character
    """

    min_length: int = 8
    max_length: int = 128
    require_uppercase: bool = True
    require_lowercase: bool = True
    require_digit: bool = True
    require_special: bool = False

    @classmethod
    def from_settings(cls, config: Settings) -> "PasswordPolicy":
        return cls(
            min_length=config.password_min_length,
            max_length=config.password_max_length,
            require_uppercase=config.password_require_uppercase,
            require_lowercase=config.password_require_lowercase,
            require_digit=config.password_require_digit,
            require_special=config.password_require_special,
        )

    def check(self, password: str) -> list[str]:
        """Return one message per rule the password breaks."""
        problems = []
        if len(password) < self.min_length:
            problems.append(f'"password" length must be at least {self.min_length} characters long')
        if len(password) > self.max_length:
            problems.append(f'"password" length must be less than or equal to {self.max_length} characters long')
        if self.require_uppercase and not any(c.isupper() for c in password):
            problems.append('"password" must contain at least one uppercase letter')
        if self.require_lowercase and not any(c.islower() for c in password):
            problems.append('"password" must contain at least one lowercase letter')
        if self.require_digit and not any(c.isdigit() for c in password):
            problems.append('"password" must contain at least one digit')
        if self.require_special and not any(c in string.punctuation for c in password):
            problems.append('"password" must contain at least one special character')
        return problems


@dataclass
class ValidationResult:
    """Outcome of the validation gate: a validated record or its defects."""

    value: RegistrationInput | None = None
    errors: list[ValidationFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _failure_from_error(error: dict[str, Any]) -> ValidationFailure:
    path = ".".join(str(part) for part in error["loc"]) or "body"
    template = _MESSAGES.get(error["type"])
    if template:
        message = template.format(field=path)
    elif error["loc"] and error["loc"][0] == "email":
        message = '"email" must be a valid email'
    else:
        message = error["msg"]
    return ValidationFailure(field=path, message=message)


def _field_rank(failure: ValidationFailure) -> int:
    top = failure.field.split(".", 1)[0]
    return _FIELD_ORDER.index(top) if top in _FIELD_ORDER else len(_FIELD_ORDER)


def validate_registration(payload: Any, policy: PasswordPolicy | None = None) -> ValidationResult:
    """
    Validate a raw registration body.

    Every violation is reported, not just the first, ordered by field.
    Uniqueness of the email is not checked here; that belongs to the user
    service.

    Args:
        payload: Decoded JSON request body
        policy: Password rules (defaults to the configured policy)

    Returns:
        ValidationResult holding either the validated input or the failures
    """
    policy = policy or PasswordPolicy.from_settings(settings)

    if not isinstance(payload, Mapping):
        return ValidationResult(
            errors=[ValidationFailure(field="body", message='"body" must be an object')]
        )

    failures: list[ValidationFailure] = []
    value = None
    try:
        value = RegistrationInput.model_validate(dict(payload))
    except ValidationError as exc:
        failures.extend(_failure_from_error(error) for error in exc.errors())

    password = payload.get("password")
    if isinstance(password, str):
        failures.extend(
            ValidationFailure(field="password", message=message)
            for message in policy.check(password)
        )

    if failures:
        failures.sort(key=_field_rank)
        return ValidationResult(errors=failures)
    return ValidationResult(value=value)
