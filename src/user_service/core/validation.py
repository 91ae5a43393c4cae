"""Field validation for incoming user payloads.

Each payload kind has an ordered list of ``(field, rule)`` checks. Rules are
plain callables returning an error message or ``None``; the first failing
rule of a field stops further checks on that field, and every violation is
collected so the caller can report them all at once.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel

from src.user_service.core.errors import BirthdayParseError, UserValidationError, Violation

DATE_FORMAT = "YYYY-MM-DD"
_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

Rule = Callable[[str], str | None]


def required(value: str) -> str | None:
    if not value:
        return "is required"
    return None


def email_syntax(value: str) -> str | None:
    if not value:
        return None
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as e:
        return f"must be a valid email address ({e})"
    return None


def iso_date(value: str) -> str | None:
    if not value:
        return None
    try:
        parse_birthday(value)
    except BirthdayParseError:
        return f"must be a valid date in {DATE_FORMAT} format"
    return None


def parse_birthday(value: str) -> date | None:
    """Parse a ``YYYY-MM-DD`` string; an empty string means no birthday.

    Raises:
        BirthdayParseError: If the string is not a real calendar date in
            exactly that layout.
    """
    if not value:
        return None
    if not _DATE_PATTERN.match(value):
        raise BirthdayParseError(f"birthday {value!r} does not match {DATE_FORMAT}")
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise BirthdayParseError(f"birthday {value!r}: {e}") from e


CREATE_RULES: list[tuple[str, Rule]] = [
    ("username", required),
    ("password", required),
    ("phone", required),
    ("email", required),
    ("email", email_syntax),
    ("birthday", iso_date),
]

UPDATE_RULES: list[tuple[str, Rule]] = [
    ("email", email_syntax),
    ("birthday", iso_date),
]


@dataclass
class ValidationResult:
    violations: list[Violation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations

    def raise_for_violations(self) -> None:
        if self.violations:
            raise UserValidationError(self.violations)


def validate(payload: BaseModel, rules: list[tuple[str, Rule]]) -> ValidationResult:
    """Run ``rules`` in order against the attributes of ``payload``."""
    result = ValidationResult()
    failed: set[str] = set()

    for field_name, rule in rules:
        if field_name in failed:
            continue
        message = rule(getattr(payload, field_name))
        if message is not None:
            failed.add(field_name)
            result.violations.append(Violation(field=field_name, message=message))

    return result
