"""
Transform engine.

Applies correctors to the fields a validation pass marked as fixable.
Records are never mutated: every result carries a fresh copy.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from conformer.fields import FieldRegistry, build_field_registry
from conformer.transform.models import BatchTransform, TransformLogEntry, TransformResult
from conformer.utils.events import EventSink, Events, LogSink
from conformer.validation.models import (
    BatchValidation,
    ValidationError,
    ValidationResult,
)


class TransformEngine:
    """
    Corrects records using the field registry.

    A record with any unfixable error is returned unchanged: partially
    repairing it would only hide why it is rejected.

    Args:
        registry: Field handlers; the standard registry when omitted.
        sink: Receives one event per changed record.
    """

    def __init__(
        self,
        registry: FieldRegistry | None = None,
        sink: EventSink | None = None,
    ) -> None:
        self.registry = registry if registry is not None else build_field_registry()
        self.sink = sink if sink is not None else LogSink()

    def transform_record(
        self,
        record: Mapping[str, Any],
        validation: ValidationResult,
    ) -> TransformResult:
        """
        Correct the fixable fields of one record.

        Args:
            record: Record as validated.
            validation: Result of validating ``record``.

        Returns:
            TransformResult with the corrected copy and a per-field log.
        """
        corrected = dict(record)
        if validation.is_valid or not validation.can_fix:
            return TransformResult(corrected)

        by_field: dict[str, list[ValidationError]] = {}
        for error in validation.fixable_errors:
            by_field.setdefault(error.field, []).append(error)

        log: list[TransformLogEntry] = []
        for name, errors in by_field.items():
            handler = self.registry.get(name)
            if handler is None or handler.corrector is None:
                continue
            original = record.get(name)
            value = handler.correct(original, record, errors)
            if value != original:
                corrected[name] = value
                log.append(
                    TransformLogEntry(name, original, value, handler.corrector.action)
                )

        if log:
            self.sink.emit(
                Events.RECORD_TRANSFORMED,
                fields=[entry.field for entry in log],
                changes=[entry.to_dict() for entry in log],
            )
        return TransformResult(corrected, was_transformed=bool(log), log=log)

    def transform_batch(
        self,
        records: Sequence[Mapping[str, Any]],
        validation: BatchValidation,
    ) -> BatchTransform:
        """
        Correct a batch against its validation results.

        Raises:
            ValueError: If ``records`` and ``validation`` differ in length.
        """
        if len(records) != validation.total:
            msg = (
                f"Got {len(records)} records but {validation.total} "
                "validation results"
            )
            raise ValueError(msg)

        return BatchTransform(
            results=[
                self.transform_record(record, checked.result)
                for record, checked in zip(records, validation.results, strict=True)
            ]
        )
