"""Validation result types."""

from dataclasses import dataclass, field
from typing import Any

from conformer.constants import ErrorCode


@dataclass(frozen=True)
class ValidationError:
    """
    One rule violation on one field.

    Attributes:
        code: Stable error code.
        field: Offending field name.
        message: Human-readable description.
        value: Offending value as seen by the rule.
        fixable: Whether a deterministic correction exists.
        suggestion: Correction hint; for enumerations the exact member.
    """

    code: ErrorCode
    field: str
    message: str
    value: Any
    fixable: bool
    suggestion: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for reports."""
        return {
            "code": self.code.value,
            "field": self.field,
            "message": self.message,
            "value": self.value,
            "fixable": self.fixable,
            "suggestion": self.suggestion,
        }


@dataclass
class ValidationResult:
    """Aggregated rule outcome for one record."""

    errors: list[ValidationError] = field(default_factory=list)
    fields_validated: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """True iff no rule reported an error."""
        return not self.errors

    @property
    def can_fix(self) -> bool:
        """True iff every reported error is individually fixable."""
        return all(e.fixable for e in self.errors)

    @property
    def fixable_errors(self) -> list[ValidationError]:
        return [e for e in self.errors if e.fixable]

    @property
    def unfixable_errors(self) -> list[ValidationError]:
        return [e for e in self.errors if not e.fixable]

    def errors_for(self, field_name: str) -> list[ValidationError]:
        """Errors reported on one field."""
        return [e for e in self.errors if e.field == field_name]


@dataclass
class RecordValidation:
    """A record paired with its validation result."""

    record: dict[str, Any]
    result: ValidationResult


@dataclass
class BatchValidation:
    """
    Validation outcome for a batch of records.

    Attributes:
        results: One entry per input record, in input order.
    """

    results: list[RecordValidation] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def valid(self) -> int:
        return sum(1 for r in self.results if r.result.is_valid)

    @property
    def invalid(self) -> int:
        return self.total - self.valid

    @property
    def fixable(self) -> int:
        """Invalid records whose errors are all fixable."""
        return sum(
            1 for r in self.results if not r.result.is_valid and r.result.can_fix
        )

    @property
    def unfixable(self) -> int:
        return self.invalid - self.fixable

    def valid_records(self) -> list[dict[str, Any]]:
        return [r.record for r in self.results if r.result.is_valid]

    def invalid_results(self) -> list[RecordValidation]:
        return [r for r in self.results if not r.result.is_valid]
