"""
Field correctors.

A corrector turns a value with fixable errors into a value the matching
rule accepts. Correctors never raise and always return something usable:
irreparable input yields a configured default, or None where the field
is optional.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from datetime import date
from typing import Any

from conformer.config.settings import CorrectionConfig, LimitsConfig
from conformer.constants import NAME_ABBREVIATIONS
from conformer.normalization.temporal import age_on, format_iso, parse_date
from conformer.normalization.text import (
    collapse_whitespace,
    fix_email_domain,
    is_blank,
    normalize_phone,
    repair_mojibake,
)
from conformer.validation.models import ValidationError


class Corrector(ABC):
    """Repairs one field value."""

    action: str = "correct"

    @abstractmethod
    def correct(
        self,
        value: Any,
        record: Mapping[str, Any],
        errors: Sequence[ValidationError],
    ) -> Any:
        """
        Produce the corrected value.

        Args:
            value: Current field value.
            record: The whole record, for context.
            errors: Fixable errors the rule reported on this field.

        Returns:
            The replacement value.
        """


class NameCorrector(Corrector):
    """Collapses whitespace, capitalizes words and expands abbreviations."""

    action = "normalize_name"

    def __init__(self, corrections: CorrectionConfig) -> None:
        self.placeholder = corrections.name_placeholder

    def correct(
        self,
        value: Any,
        record: Mapping[str, Any],
        errors: Sequence[ValidationError],
    ) -> Any:
        if is_blank(value):
            return self.placeholder

        text = repair_mojibake(collapse_whitespace(str(value)))
        words = [w[:1].upper() + w[1:].lower() for w in text.split(" ")]
        words = [
            NAME_ABBREVIATIONS.get(w.lower(), w) if i > 0 and len(w) == 1 else w
            for i, w in enumerate(words)
        ]
        if len(words) < 2:
            words.insert(0, self.placeholder)
        return " ".join(words)


class EmailCorrector(Corrector):
    """Removes whitespace, lower-cases and fixes known domain typos."""

    action = "normalize_email"

    def correct(
        self,
        value: Any,
        record: Mapping[str, Any],
        errors: Sequence[ValidationError],
    ) -> Any:
        if is_blank(value):
            return value
        return fix_email_domain("".join(str(value).split()).lower())


class PhoneCorrector(Corrector):
    """Normalizes to ``0xxxxxxxxx``; irreparable numbers are dropped."""

    action = "normalize_phone"

    def correct(
        self,
        value: Any,
        record: Mapping[str, Any],
        errors: Sequence[ValidationError],
    ) -> Any:
        return normalize_phone(value)


class BirthDateCorrector(Corrector):
    """
    Re-formats birth dates as ``YYYY-MM-DD``.

    Missing, unreadable and implausible dates are replaced by the
    configured default birth date.
    """

    action = "normalize_birth_date"

    def __init__(
        self,
        limits: LimitsConfig,
        corrections: CorrectionConfig,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.limits = limits
        self.default = corrections.default_birth_date
        self.today = today

    def correct(
        self,
        value: Any,
        record: Mapping[str, Any],
        errors: Sequence[ValidationError],
    ) -> Any:
        born = parse_date(value)
        if born is None or not self._plausible(born):
            return self.default.isoformat()
        return born.isoformat()

    def _plausible(self, born: date) -> bool:
        today = self.today()
        age = age_on(born, today)
        return (
            born <= today
            and self.limits.min_age <= age <= self.limits.max_age
            and born.year >= self.limits.min_birth_year
        )


class VocabularyCorrector(Corrector):
    """
    Replaces a value by the member the rule suggested.

    Falls back to ``default`` when no error carries a suggestion, and to
    the unchanged value when there is no default either.
    """

    action = "map_to_vocabulary"

    def __init__(self, default: str | None = None) -> None:
        self.default = default

    def correct(
        self,
        value: Any,
        record: Mapping[str, Any],
        errors: Sequence[ValidationError],
    ) -> Any:
        for error in errors:
            if error.suggestion is not None:
                return error.suggestion
        if self.default is not None:
            return self.default
        return value


class EventDateCorrector(Corrector):
    """Re-formats parseable dates and timestamps in ISO form."""

    action = "format_iso_date"

    def correct(
        self,
        value: Any,
        record: Mapping[str, Any],
        errors: Sequence[ValidationError],
    ) -> Any:
        formatted = format_iso(value)
        return formatted if formatted is not None else value
