"""
Pipeline runner.

Runs the fixed stage sequence over staged records:

    tag identifiers -> deduplicate -> validate -> transform
        -> re-validate -> partition -> load

Each stage completes for every entity type before the next begins.
Records failing the final validation never reach the warehouse; they
are reported with all of their errors.
"""

from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

from conformer.config.settings import PipelineConfig
from conformer.dedup.service import DedupStats, DeduplicationService
from conformer.fields import build_field_registry
from conformer.ingestion.staging import StagingReader
from conformer.pipeline.report import write_error_report
from conformer.transform.engine import TransformEngine
from conformer.transform.identifiers import SourcePrefixer
from conformer.transform.models import TransformLogEntry
from conformer.utils.events import EventSink, Events, LogSink
from conformer.utils.logging import get_logger
from conformer.validation.engine import RuleEngine
from conformer.validation.models import RecordValidation
from conformer.warehouse.loader import LoadStats, WarehouseLoader

log = get_logger(__name__)


@dataclass(frozen=True)
class EntityQualityStats:
    """Record counts of one entity type through the quality stages."""

    entity_type: str
    records: int
    valid: int
    transformed: int
    clean: int
    rejected: int

    def to_dict(self) -> dict[str, int]:
        return {
            "records": self.records,
            "valid": self.valid,
            "transformed": self.transformed,
            "clean": self.clean,
            "rejected": self.rejected,
        }


@dataclass
class EntityOutcome:
    """Clean and rejected records of one entity type."""

    entity_type: str
    clean: list[dict[str, Any]]
    rejected: list[RecordValidation]
    transform_log: list[TransformLogEntry]
    stats: EntityQualityStats


@dataclass
class PipelineResult:
    """
    Result of a pipeline run.

    Attributes:
        dedup: Deduplication counts per entity type.
        quality: Quality-stage counts per entity type.
        clean: Records that passed final validation.
        rejected: Records that failed it, with their results.
        transform_log: Every field replacement, per entity type.
        load: Warehouse load outcome, when loading ran.
        error_report_path: Where the error report was written, if at all.
    """

    dedup: dict[str, DedupStats] = field(default_factory=dict)
    quality: dict[str, EntityQualityStats] = field(default_factory=dict)
    clean: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    rejected: dict[str, list[RecordValidation]] = field(default_factory=dict)
    transform_log: dict[str, list[TransformLogEntry]] = field(default_factory=dict)
    load: LoadStats | None = None
    error_report_path: Path | None = None

    @property
    def total_clean(self) -> int:
        return sum(len(records) for records in self.clean.values())

    @property
    def total_rejected(self) -> int:
        return sum(len(records) for records in self.rejected.values())


class QualityPipeline:
    """
    Conforms records from several sources and loads them.

    Args:
        config: Pipeline configuration.
        sink: Event sink shared by every stage; logs when omitted.
        today: Clock for age checks; injectable for tests.
        loader: Warehouse loader; built from ``config.warehouse`` when
            omitted and then closed after the load.
    """

    def __init__(
        self,
        config: PipelineConfig,
        *,
        sink: EventSink | None = None,
        today: Callable[[], date] = date.today,
        loader: WarehouseLoader | None = None,
    ) -> None:
        self.config = config
        self.sink = sink if sink is not None else LogSink()
        registry = build_field_registry(config.limits, config.corrections, today=today)
        self.prefixer = SourcePrefixer(config.sources)
        self.dedup = DeduplicationService(config.dedup, self.sink)
        self.rules = RuleEngine(registry, self.sink)
        self.transformer = TransformEngine(registry, self.sink)
        self.loader = loader

    def conform_entity(
        self, entity_type: str, records: Sequence[dict[str, Any]]
    ) -> EntityOutcome:
        """
        Validate, correct and re-validate the records of one entity type.

        Records valid on first sight are clean as they are. Invalid ones
        are corrected where every error is fixable, then validated again;
        whatever still fails is rejected.
        """
        first = self.rules.validate_batch(records)
        corrected = self.transformer.transform_batch(records, first)

        clean: list[dict[str, Any]] = []
        rejected: list[RecordValidation] = []
        for checked, fixed in zip(first.results, corrected.results, strict=True):
            if checked.result.is_valid:
                clean.append(fixed.record)
                continue
            final = self.rules.validate_record(fixed.record)
            if final.is_valid:
                clean.append(fixed.record)
                continue
            rejected.append(RecordValidation(fixed.record, final))
            self.sink.emit(
                Events.RECORD_REJECTED,
                entity_type=entity_type,
                record=fixed.record,
                errors=[e.to_dict() for e in final.errors],
            )

        stats = EntityQualityStats(
            entity_type=entity_type,
            records=len(records),
            valid=first.valid,
            transformed=corrected.transformed,
            clean=len(clean),
            rejected=len(rejected),
        )
        return EntityOutcome(entity_type, clean, rejected, corrected.log(), stats)

    def conform(
        self, data: Mapping[str, Sequence[dict[str, Any]]]
    ) -> dict[str, EntityOutcome]:
        """
        Run the quality stages for every entity type.

        Entity types are independent here, so they may run on a thread
        pool when ``processing.parallel`` is set.
        """
        self.sink.emit(Events.PHASE_STARTED, phase="quality")
        processing = self.config.processing

        if processing.parallel and len(data) > 1:
            with ThreadPoolExecutor(max_workers=processing.max_workers) as executor:
                futures = {
                    entity_type: executor.submit(
                        self.conform_entity, entity_type, records
                    )
                    for entity_type, records in data.items()
                }
                outcomes = {
                    entity_type: future.result()
                    for entity_type, future in futures.items()
                }
        else:
            outcomes = {
                entity_type: self.conform_entity(entity_type, records)
                for entity_type, records in data.items()
            }

        self.sink.emit(
            Events.PHASE_COMPLETED,
            phase="quality",
            clean=sum(o.stats.clean for o in outcomes.values()),
            rejected=sum(o.stats.rejected for o in outcomes.values()),
        )
        return outcomes

    def run(
        self,
        data: Mapping[str, Sequence[dict[str, Any]]],
        *,
        load: bool = True,
        write_report: bool = True,
    ) -> PipelineResult:
        """
        Run every stage over staged records.

        Args:
            data: Entity type -> records tagged with their ``source``.
            load: Whether to load clean records into the warehouse.
            write_report: Whether to write the JSON error report.

        Returns:
            PipelineResult with counts, partitions and load outcome.

        Raises:
            WarehouseError: If the warehouse is unreachable or broken.
        """
        tagged = self.prefixer.apply_all(data)
        deduplicated, dedup_stats = self.dedup.deduplicate_all(tagged)
        outcomes = self.conform(deduplicated)

        result = PipelineResult(
            dedup=dedup_stats,
            quality={name: o.stats for name, o in outcomes.items()},
            clean={name: o.clean for name, o in outcomes.items()},
            rejected={name: o.rejected for name, o in outcomes.items()},
            transform_log={name: o.transform_log for name, o in outcomes.items()},
        )

        if write_report:
            result.error_report_path = write_error_report(
                result.rejected, self.config.error_report_path
            )

        if load:
            result.load = self._load(result.clean)

        log.info(
            "Pipeline finished",
            clean=result.total_clean,
            rejected=result.total_rejected,
            loaded=result.load.total_loaded if result.load else None,
        )
        return result

    def _load(self, clean: Mapping[str, Sequence[dict[str, Any]]]) -> LoadStats:
        loader = self.loader or WarehouseLoader(self.config.warehouse, self.sink)
        try:
            loader.initialize()
            return loader.load_all(clean)
        finally:
            if self.loader is None:
                loader.close()


def run_pipeline(
    config: PipelineConfig,
    *,
    load: bool = True,
    sink: EventSink | None = None,
) -> PipelineResult:
    """
    Convenience function to read the staging area and run the pipeline.

    Args:
        config: Pipeline configuration.
        load: Whether to load clean records into the warehouse.
        sink: Optional event sink.

    Returns:
        PipelineResult of the run.
    """
    data = StagingReader(config).read_all()
    return QualityPipeline(config, sink=sink).run(data, load=load)
