"""
Event sinks for pipeline outcomes.

Components never talk to a global logger about record outcomes. They
receive a sink and emit structured events to it; the default sink
forwards to structlog, the memory sink keeps events for reports and tests.
Every outcome is emitted, never a sample.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol

from conformer.utils.logging import get_logger


class Events:
    """Event names emitted by pipeline components."""

    PHASE_STARTED = "phase_started"
    PHASE_COMPLETED = "phase_completed"
    DUPLICATE_MERGED = "duplicate_merged"
    DEDUP_PASSTHROUGH = "dedup_passthrough"
    RECORD_VALIDATED = "record_validated"
    RECORD_TRANSFORMED = "record_transformed"
    RECORD_REJECTED = "record_rejected"
    ROWS_SKIPPED_FK = "rows_skipped_fk"
    ROWS_REJECTED = "rows_rejected"
    TABLE_LOADED = "table_loaded"


# Log level per event; anything not listed is logged at info
EVENT_LEVELS: dict[str, str] = {
    Events.DUPLICATE_MERGED: "debug",
    Events.RECORD_VALIDATED: "debug",
    Events.RECORD_TRANSFORMED: "debug",
    Events.DEDUP_PASSTHROUGH: "warning",
    Events.RECORD_REJECTED: "warning",
    Events.ROWS_SKIPPED_FK: "warning",
    Events.ROWS_REJECTED: "warning",
}


class EventSink(Protocol):
    """Anything that accepts structured pipeline events."""

    def emit(self, event: str, **fields: Any) -> None:
        """Record one event with its key-value payload."""
        ...


class LogSink:
    """Forwards events to a structlog logger at a per-event level."""

    def __init__(self, name: str = "conformer.events") -> None:
        self._log = get_logger(name)

    def emit(self, event: str, **fields: Any) -> None:
        level = EVENT_LEVELS.get(event, "info")
        getattr(self._log, level)(event, **fields)


@dataclass
class RecordedEvent:
    """A single event captured by MemorySink."""

    name: str
    fields: dict[str, Any]


@dataclass
class MemorySink:
    """
    Keeps every emitted event in memory.

    Optionally chains to another sink so a run can be both logged and
    inspected afterwards.
    """

    forward: EventSink | None = None
    events: list[RecordedEvent] = field(default_factory=list)

    def emit(self, event: str, **fields: Any) -> None:
        self.events.append(RecordedEvent(event, dict(fields)))
        if self.forward is not None:
            self.forward.emit(event, **fields)

    def of_kind(self, event: str) -> list[dict[str, Any]]:
        """Return the payloads of all events with the given name."""
        return [e.fields for e in self.events if e.name == event]

    def clear(self) -> None:
        self.events.clear()
