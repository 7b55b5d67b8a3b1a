"""
Rule engine.

Looks up the handler registered for each field of a record and collects
what the rules report. The engine never decides fixability itself: a
record can be fixed only when every individual error says so.
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from conformer.fields import FieldRegistry, build_field_registry
from conformer.utils.events import EventSink, Events, LogSink
from conformer.validation.models import (
    BatchValidation,
    RecordValidation,
    ValidationError,
    ValidationResult,
)


class RuleEngine:
    """
    Validates records field by field.

    Fields without a registered handler are accepted as-is.

    Args:
        registry: Field handlers; the standard registry when omitted.
        sink: Receives one event per validated record.
    """

    def __init__(
        self,
        registry: FieldRegistry | None = None,
        sink: EventSink | None = None,
    ) -> None:
        self.registry = registry if registry is not None else build_field_registry()
        self.sink = sink if sink is not None else LogSink()

    def has_rule(self, field: str) -> bool:
        return field in self.registry

    def available_rules(self) -> list[str]:
        """Names of all fields with a registered rule."""
        return self.registry.fields()

    def validate_record(
        self,
        record: Mapping[str, Any],
        fields: Sequence[str] | None = None,
    ) -> ValidationResult:
        """
        Validate one record.

        Args:
            record: Field -> value mapping.
            fields: Restrict validation to these fields; by default every
                field present on the record is checked.

        Returns:
            Aggregated result with every error found.
        """
        targets = list(fields) if fields is not None else list(record)
        errors: list[ValidationError] = []
        validated: list[str] = []

        for name in targets:
            handler = self.registry.get(name)
            if handler is None:
                continue
            errors.extend(handler.validate(name, record.get(name), record))
            validated.append(name)

        result = ValidationResult(errors=errors, fields_validated=validated)
        self.sink.emit(
            Events.RECORD_VALIDATED,
            valid=result.is_valid,
            can_fix=result.can_fix,
            errors=len(errors),
        )
        return result

    def validate_batch(
        self,
        records: Iterable[Mapping[str, Any]],
        fields: Sequence[str] | None = None,
    ) -> BatchValidation:
        """Validate every record, keeping input order."""
        return BatchValidation(
            results=[
                RecordValidation(dict(record), self.validate_record(record, fields))
                for record in records
            ]
        )
