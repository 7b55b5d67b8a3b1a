"""
Field rules.

Each rule inspects one value, with its record for context, and returns
the violations it finds. Rules never raise: malformed input is data and
is reported as an error carrying its own fixability verdict.
"""

import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

from conformer.config.settings import CorrectionConfig, LimitsConfig
from conformer.constants import (
    EMAIL_PATTERN,
    NAME_ABBREVIATIONS,
    PHONE_PATTERN,
    STATUS_PROBES,
    ErrorCode,
)
from conformer.normalization.temporal import (
    age_on,
    format_iso,
    is_iso_date,
    is_iso_timestamp,
    parse_date,
    parse_timestamp,
)
from conformer.normalization.text import (
    DOMAIN_TYPOS,
    collapse_whitespace,
    fix_email_domain,
    is_blank,
    normalize_phone,
    repair_mojibake,
)
from conformer.validation.matching import canonical_member, closest_member
from conformer.validation.models import ValidationError

_NAME_SPECIAL_CHARS = re.compile(r"""[!@#$%^&*()_+=\[\]{};':"\\|,.<>?]""")
_EMAIL_FORBIDDEN_CHARS = re.compile(r'[<>()\[\]\\,;:"]')

# Long names may not contain single-letter words
_ABBREVIATED_NAME_LENGTH = 20


class FieldRule(ABC):
    """Checks one field value."""

    @abstractmethod
    def check(
        self, field: str, value: Any, record: Mapping[str, Any]
    ) -> list[ValidationError]:
        """
        Check a value.

        Args:
            field: Name of the field being checked, used in errors.
            value: The value as found in the record.
            record: The whole record, for rules that need context.

        Returns:
            Violations found; empty when the value is valid.
        """


class FullNameRule(FieldRule):
    """Person names: at least two capitalized words of letters."""

    def __init__(self, limits: LimitsConfig) -> None:
        self.limits = limits

    def check(
        self, field: str, value: Any, record: Mapping[str, Any]
    ) -> list[ValidationError]:
        if is_blank(value):
            return [
                ValidationError(
                    ErrorCode.NULL_VALUE, field, "Name is empty", value, fixable=False
                )
            ]

        text = str(value)
        stripped = text.strip()
        words = stripped.split()
        errors: list[ValidationError] = []

        def unfixable(code: ErrorCode, message: str) -> None:
            errors.append(ValidationError(code, field, message, value, fixable=False))

        def fixable(message: str, suggestion: Any = None) -> None:
            errors.append(
                ValidationError(
                    ErrorCode.INVALID_FORMAT,
                    field,
                    message,
                    value,
                    fixable=True,
                    suggestion=suggestion,
                )
            )

        if any(c.isdigit() for c in stripped):
            unfixable(ErrorCode.INVALID_FORMAT, "Name contains digits")
        if _NAME_SPECIAL_CHARS.search(stripped):
            unfixable(ErrorCode.INVALID_FORMAT, "Name contains special characters")
        if len(stripped) > self.limits.max_name_length:
            unfixable(
                ErrorCode.OUT_OF_RANGE,
                f"Name exceeds {self.limits.max_name_length} characters",
            )
        if len(stripped) > _ABBREVIATED_NAME_LENGTH and any(
            len(w) == 1 for w in words
        ):
            unfixable(ErrorCode.INVALID_FORMAT, "Long name contains abbreviations")

        if len(words) < 2:
            fixable("Name needs a family and a given name")
        # Only middle initials with a known expansion are fixable
        initials = [
            (i, w) for i, w in enumerate(words) if len(w) == 1 and w.isalpha()
        ]
        if any(i == 0 or w.lower() not in NAME_ABBREVIATIONS for i, w in initials):
            unfixable(ErrorCode.INVALID_FORMAT, "Name contains unknown abbreviations")
        elif initials:
            fixable("Name contains abbreviated words")
        if any(w[0] != w[0].upper() for w in words):
            fixable("Name words must start with a capital letter")
        if text != collapse_whitespace(text):
            fixable("Name contains irregular whitespace", collapse_whitespace(text))
        if repair_mojibake(stripped) != stripped:
            fixable("Name contains encoding artifacts", repair_mojibake(stripped))

        return errors


class EmailRule(FieldRule):
    """E-mail addresses, compared lower-cased."""

    def __init__(self, limits: LimitsConfig) -> None:
        self.limits = limits

    def check(
        self, field: str, value: Any, record: Mapping[str, Any]
    ) -> list[ValidationError]:
        if is_blank(value):
            return [
                ValidationError(
                    ErrorCode.NULL_VALUE, field, "Email is empty", value, fixable=False
                )
            ]

        text = str(value)
        # Structural checks run on what the corrector would produce
        candidate = "".join(text.split()).lower()
        errors: list[ValidationError] = []

        def unfixable(code: ErrorCode, message: str) -> None:
            errors.append(ValidationError(code, field, message, value, fixable=False))

        if not EMAIL_PATTERN.fullmatch(candidate):
            unfixable(ErrorCode.INVALID_FORMAT, "Email is malformed")
        if len(candidate) > self.limits.max_email_length:
            unfixable(
                ErrorCode.OUT_OF_RANGE,
                f"Email exceeds {self.limits.max_email_length} characters",
            )
        if "@" in candidate:
            parts = candidate.split("@")
            if len(parts) != 2 or not parts[0] or not parts[1]:
                unfixable(ErrorCode.INVALID_FORMAT, "Email lacks a local part or domain")
            elif "." not in parts[1]:
                unfixable(ErrorCode.INVALID_FORMAT, "Email domain lacks a dot")
        if _EMAIL_FORBIDDEN_CHARS.search(candidate):
            unfixable(ErrorCode.INVALID_FORMAT, "Email contains invalid characters")

        suggestion = fix_email_domain(candidate)
        if any(c.isspace() for c in text):
            errors.append(
                ValidationError(
                    ErrorCode.INVALID_FORMAT,
                    field,
                    "Email contains whitespace",
                    value,
                    fixable=True,
                    suggestion=suggestion,
                )
            )
        if text != text.lower():
            errors.append(
                ValidationError(
                    ErrorCode.INVALID_FORMAT,
                    field,
                    "Email must be lower case",
                    value,
                    fixable=True,
                    suggestion=suggestion,
                )
            )
        if candidate.rpartition("@")[2] in DOMAIN_TYPOS:
            errors.append(
                ValidationError(
                    ErrorCode.INVALID_FORMAT,
                    field,
                    "Email domain is misspelled",
                    value,
                    fixable=True,
                    suggestion=suggestion,
                )
            )

        return errors


class PhoneRule(FieldRule):
    """Vietnamese phone numbers; optional."""

    def __init__(self, limits: LimitsConfig) -> None:
        self.limits = limits

    def check(
        self, field: str, value: Any, record: Mapping[str, Any]
    ) -> list[ValidationError]:
        if is_blank(value):
            return []

        text = str(value)
        if PHONE_PATTERN.fullmatch(text) and len(text) <= self.limits.max_phone_length:
            return []

        normalized = normalize_phone(text)
        if normalized is not None:
            return [
                ValidationError(
                    ErrorCode.INVALID_FORMAT,
                    field,
                    "Phone number is not in 0xxxxxxxxx form",
                    value,
                    fixable=True,
                    suggestion=normalized,
                )
            ]
        return [
            ValidationError(
                ErrorCode.INVALID_FORMAT,
                field,
                "Phone number must start with 0 or +84 followed by 9-10 digits",
                value,
                fixable=False,
            )
        ]


class DateOfBirthRule(FieldRule):
    """
    Birth dates.

    Missing or unreadable dates are fixable (the corrector substitutes a
    default). A readable date that is in the future, implies an age
    outside the configured range or precedes the minimum year is
    unfixable: there is no way to know the intended value.
    """

    def __init__(
        self,
        limits: LimitsConfig,
        corrections: CorrectionConfig,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.limits = limits
        self.corrections = corrections
        self.today = today

    def check(
        self, field: str, value: Any, record: Mapping[str, Any]
    ) -> list[ValidationError]:
        default = self.corrections.default_birth_date.isoformat()
        if is_blank(value):
            return [
                ValidationError(
                    ErrorCode.NULL_VALUE,
                    field,
                    "Date of birth is missing",
                    value,
                    fixable=True,
                    suggestion=default,
                )
            ]

        born = parse_date(value)
        if born is None:
            return [
                ValidationError(
                    ErrorCode.INVALID_DATE,
                    field,
                    "Date of birth is not a recognizable date",
                    value,
                    fixable=True,
                    suggestion=default,
                )
            ]

        today = self.today()
        errors: list[ValidationError] = []

        if born > today:
            errors.append(
                ValidationError(
                    ErrorCode.INVALID_DATE,
                    field,
                    "Date of birth is in the future",
                    value,
                    fixable=False,
                )
            )
        age = age_on(born, today)
        if age < self.limits.min_age:
            errors.append(
                ValidationError(
                    ErrorCode.OUT_OF_RANGE,
                    field,
                    f"Age must be at least {self.limits.min_age}",
                    value,
                    fixable=False,
                )
            )
        if age > self.limits.max_age:
            errors.append(
                ValidationError(
                    ErrorCode.OUT_OF_RANGE,
                    field,
                    f"Age must not exceed {self.limits.max_age}",
                    value,
                    fixable=False,
                )
            )
        if born.year < self.limits.min_birth_year:
            errors.append(
                ValidationError(
                    ErrorCode.INVALID_DATE,
                    field,
                    f"Birth year must not precede {self.limits.min_birth_year}",
                    value,
                    fixable=False,
                )
            )
        if not is_iso_date(value):
            errors.append(
                ValidationError(
                    ErrorCode.INVALID_FORMAT,
                    field,
                    "Date of birth must be written YYYY-MM-DD",
                    value,
                    fixable=True,
                    suggestion=born.isoformat(),
                )
            )
        return errors


class EventDateRule(FieldRule):
    """Business event dates and timestamps, stored in ISO form."""

    def __init__(self, *, required: bool = False) -> None:
        self.required = required

    def check(
        self, field: str, value: Any, record: Mapping[str, Any]
    ) -> list[ValidationError]:
        if is_blank(value):
            if self.required:
                return [
                    ValidationError(
                        ErrorCode.NULL_VALUE,
                        field,
                        f"{field} is required",
                        value,
                        fixable=False,
                    )
                ]
            return []

        if is_iso_timestamp(value):
            return []
        if parse_timestamp(value) is None:
            return [
                ValidationError(
                    ErrorCode.INVALID_DATE,
                    field,
                    f"{field} is not a recognizable date",
                    value,
                    fixable=False,
                )
            ]
        return [
            ValidationError(
                ErrorCode.INVALID_FORMAT,
                field,
                f"{field} must be written in ISO form",
                value,
                fixable=True,
                suggestion=format_iso(value),
            )
        ]


class CategoricalRule(FieldRule):
    """
    Values drawn from a fixed vocabulary.

    Exact members are valid. Case-only mismatches and near misses are
    fixable with the member as suggestion; anything else falls back to
    the configured default when there is one and is unfixable otherwise.

    Args:
        members: Valid vocabulary, in preference order.
        ratio: Near-miss threshold relative to a member's length.
        required: Whether a missing value is an error.
        default: Member substituted for missing or unknown values.
        code: Error code for values outside the vocabulary.
    """

    def __init__(
        self,
        members: tuple[str, ...],
        ratio: float,
        *,
        required: bool = False,
        default: str | None = None,
        code: ErrorCode = ErrorCode.INVALID_FORMAT,
    ) -> None:
        self.members = members
        self.ratio = ratio
        self.required = required
        self.default = default
        self.code = code

    def members_for(self, record: Mapping[str, Any]) -> tuple[str, ...]:
        """Vocabulary applicable to ``record``."""
        return self.members

    def check(
        self, field: str, value: Any, record: Mapping[str, Any]
    ) -> list[ValidationError]:
        if is_blank(value):
            if self.default is not None:
                return [
                    ValidationError(
                        ErrorCode.NULL_VALUE,
                        field,
                        f"{field} is missing",
                        value,
                        fixable=True,
                        suggestion=self.default,
                    )
                ]
            if self.required:
                return [
                    ValidationError(
                        ErrorCode.NULL_VALUE,
                        field,
                        f"{field} is required",
                        value,
                        fixable=False,
                    )
                ]
            return []

        members = self.members_for(record)
        text = str(value)
        if text in members:
            return []

        canonical = canonical_member(text, members)
        if canonical is not None:
            return [
                ValidationError(
                    ErrorCode.INVALID_FORMAT,
                    field,
                    f"{field} is not canonically cased",
                    value,
                    fixable=True,
                    suggestion=canonical,
                )
            ]

        suggestion = closest_member(text, members, self.ratio) or self.default
        return [
            ValidationError(
                self.code,
                field,
                f"{field} must be one of: {', '.join(members)}",
                value,
                fixable=suggestion is not None,
                suggestion=suggestion,
            )
        ]


class StatusRule(CategoricalRule):
    """
    Status shared by orders, payments, tickets and staff.

    The vocabulary is chosen by the first identifying key present on the
    record; records with none are checked against the union of all
    status vocabularies.
    """

    def __init__(
        self,
        ratio: float,
        probes: tuple[tuple[str, tuple[str, ...]], ...] = STATUS_PROBES,
    ) -> None:
        union = tuple(dict.fromkeys(m for _, members in probes for m in members))
        super().__init__(union, ratio, required=True, code=ErrorCode.INVALID_STATUS)
        self.probes = probes

    def members_for(self, record: Mapping[str, Any]) -> tuple[str, ...]:
        for key, members in self.probes:
            if key in record:
                return members
        return self.members


class NumericRangeRule(FieldRule):
    """Numbers within an inclusive range."""

    def __init__(
        self,
        minimum: float,
        maximum: float,
        *,
        integer: bool = False,
        required: bool = False,
    ) -> None:
        self.minimum = Decimal(str(minimum))
        self.maximum = Decimal(str(maximum))
        self.integer = integer
        self.required = required

    def check(
        self, field: str, value: Any, record: Mapping[str, Any]
    ) -> list[ValidationError]:
        if is_blank(value):
            if self.required:
                return [
                    ValidationError(
                        ErrorCode.NULL_VALUE,
                        field,
                        f"{field} is required",
                        value,
                        fixable=False,
                    )
                ]
            return []

        number = _to_decimal(value)
        if number is None or (self.integer and number != number.to_integral_value()):
            kind = "an integer" if self.integer else "a number"
            return [
                ValidationError(
                    ErrorCode.INVALID_FORMAT,
                    field,
                    f"{field} must be {kind}",
                    value,
                    fixable=False,
                )
            ]
        if not self.minimum <= number <= self.maximum:
            return [
                ValidationError(
                    ErrorCode.OUT_OF_RANGE,
                    field,
                    f"{field} must be between {self.minimum} and {self.maximum}",
                    value,
                    fixable=False,
                )
            ]
        return []


def _to_decimal(value: Any) -> Decimal | None:
    if isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    return number if number.is_finite() else None
