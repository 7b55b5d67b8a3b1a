"""Transform result types."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class TransformLogEntry:
    """One field replacement."""

    field: str
    original: Any
    corrected: Any
    action: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "original": self.original,
            "corrected": self.corrected,
            "action": self.action,
        }


@dataclass
class TransformResult:
    """
    Outcome of correcting one record.

    Attributes:
        record: The corrected record, always a new mapping.
        was_transformed: Whether any field changed.
        log: One entry per changed field.
    """

    record: dict[str, Any]
    was_transformed: bool = False
    log: list[TransformLogEntry] = field(default_factory=list)


@dataclass
class BatchTransform:
    """Transform outcome for a batch, in input order."""

    results: list[TransformResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def transformed(self) -> int:
        return sum(1 for r in self.results if r.was_transformed)

    @property
    def untouched(self) -> int:
        return self.total - self.transformed

    def records(self) -> list[dict[str, Any]]:
        return [r.record for r in self.results]

    def log(self) -> list[TransformLogEntry]:
        """All field replacements of the batch."""
        return [entry for r in self.results for entry in r.log]
