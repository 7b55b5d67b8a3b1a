"""
Duplicate removal across sources.

Records of one entity type are grouped by a composite key built from a
configured, ordered list of fields. The first record seen for a key is
kept; later ones only fill its empty fields, they never overwrite.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from conformer.config.settings import DedupConfig
from conformer.utils.events import EventSink, Events, LogSink
from conformer.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class DedupStats:
    """Record counts of one entity type before and after deduplication."""

    entity_type: str
    original: int
    after: int

    @property
    def removed(self) -> int:
        return self.original - self.after

    def to_dict(self) -> dict[str, int]:
        return {"original": self.original, "after": self.after, "removed": self.removed}


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


class DeduplicationService:
    """
    Removes duplicate records per entity type.

    Entity types without a configured key pass through untouched; the
    pass-through is reported to the sink so it never goes unnoticed.

    Args:
        config: Key fields per entity type, separator and missing-value
            sentinel.
        sink: Receives merge and pass-through events.
    """

    def __init__(
        self,
        config: DedupConfig | None = None,
        sink: EventSink | None = None,
    ) -> None:
        self.config = config or DedupConfig()
        self.sink = sink if sink is not None else LogSink()

    def key_fields(self, entity_type: str) -> list[str] | None:
        return self.config.keys.get(entity_type)

    def composite_key(self, record: Mapping[str, Any], fields: Iterable[str]) -> str:
        """
        Build the normalized key of ``record``.

        Values are stringified, trimmed and lower-cased; missing fields
        contribute the configured sentinel.
        """
        parts = []
        for name in fields:
            value = record.get(name)
            parts.append(
                self.config.missing_sentinel
                if value is None
                else str(value).strip().lower()
            )
        return self.config.separator.join(parts)

    @staticmethod
    def merge_records(
        base: Mapping[str, Any], other: Mapping[str, Any]
    ) -> dict[str, Any]:
        """
        Fill the empty fields of ``base`` from ``other``.

        Populated base fields always win. When both records carry a
        ``source``, the merged record lists every contributing source in
        ``sources``.
        """
        merged = dict(base)
        for name, value in other.items():
            if not _is_empty(value) and _is_empty(merged.get(name)):
                merged[name] = value

        if base.get("source") and other.get("source"):
            sources: set[str] = set()
            for record in (base, other):
                listed = record.get("sources")
                if listed:
                    sources.update(s for s in str(listed).split(",") if s)
                else:
                    sources.add(str(record["source"]))
            merged["sources"] = ",".join(sorted(sources))
        return merged

    def deduplicate(
        self, entity_type: str, records: Iterable[Mapping[str, Any]]
    ) -> list[dict[str, Any]]:
        """Deduplicate the records of one entity type, keeping first-seen order."""
        fields = self.key_fields(entity_type)
        if fields is None:
            records = [dict(r) for r in records]
            self.sink.emit(
                Events.DEDUP_PASSTHROUGH,
                entity_type=entity_type,
                records=len(records),
            )
            return records

        unique: dict[str, dict[str, Any]] = {}
        for record in records:
            key = self.composite_key(record, fields)
            existing = unique.get(key)
            if existing is None:
                unique[key] = dict(record)
                continue
            unique[key] = self.merge_records(existing, record)
            self.sink.emit(
                Events.DUPLICATE_MERGED,
                entity_type=entity_type,
                key=key,
                source=record.get("source"),
            )
        return list(unique.values())

    def deduplicate_all(
        self, data: Mapping[str, Iterable[Mapping[str, Any]]]
    ) -> tuple[dict[str, list[dict[str, Any]]], dict[str, DedupStats]]:
        """
        Deduplicate every entity type.

        Returns:
            Tuple of (deduplicated data, stats per entity type).
        """
        self.sink.emit(Events.PHASE_STARTED, phase="dedup")
        result: dict[str, list[dict[str, Any]]] = {}
        stats: dict[str, DedupStats] = {}

        for entity_type, records in data.items():
            records = list(records)
            result[entity_type] = self.deduplicate(entity_type, records)
            stats[entity_type] = DedupStats(
                entity_type, len(records), len(result[entity_type])
            )
            if stats[entity_type].removed:
                log.info(
                    "Removed duplicates",
                    entity_type=entity_type,
                    removed=stats[entity_type].removed,
                    key=self.key_fields(entity_type),
                )

        self.sink.emit(
            Events.PHASE_COMPLETED,
            phase="dedup",
            original=sum(s.original for s in stats.values()),
            after=sum(s.after for s in stats.values()),
        )
        return result, stats

    def remove_duplicates(
        self, data: Mapping[str, Iterable[Mapping[str, Any]]]
    ) -> dict[str, list[dict[str, Any]]]:
        """Deduplicate every entity type and return the surviving records."""
        result, _ = self.deduplicate_all(data)
        return result

    def find_duplicates(
        self, entity_type: str, records: Iterable[Mapping[str, Any]]
    ) -> dict[str, list[dict[str, Any]]]:
        """
        Group records sharing a key, without merging anything.

        Returns:
            Key -> records, only for keys seen more than once. Empty for
            entity types without a configured key.
        """
        fields = self.key_fields(entity_type)
        if fields is None:
            return {}
        groups: dict[str, list[dict[str, Any]]] = {}
        for record in records:
            groups.setdefault(self.composite_key(record, fields), []).append(
                dict(record)
            )
        return {key: group for key, group in groups.items() if len(group) > 1}

    def analyze(
        self, data: Mapping[str, Iterable[Mapping[str, Any]]]
    ) -> dict[str, DedupStats]:
        """Report how many records deduplication would remove, per entity type."""
        stats: dict[str, DedupStats] = {}
        for entity_type, records in data.items():
            records = list(records)
            fields = self.key_fields(entity_type)
            after = (
                len(records)
                if fields is None
                else len({self.composite_key(r, fields) for r in records})
            )
            stats[entity_type] = DedupStats(entity_type, len(records), after)
        return stats
