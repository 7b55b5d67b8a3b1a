"""
Warehouse loader.

Loads clean records table by table in dependency order. Before each
table, the primary keys of every table it references are read once;
rows whose populated foreign keys do not resolve against that snapshot
are skipped and counted rather than failing the load. Inserts ignore
conflicts, so re-running a load never duplicates rows.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from conformer.config.settings import WarehouseConfig
from conformer.exceptions import WarehouseError
from conformer.normalization.text import is_blank
from conformer.utils.events import EventSink, Events, LogSink
from conformer.utils.logging import get_logger
from conformer.warehouse.schema import DIMENSION, LOAD_PLAN, LoadTarget, metadata

log = get_logger(__name__)

_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


@dataclass
class TableLoad:
    """Outcome of loading one table."""

    table: str
    kind: str
    attempted: int = 0
    loaded: int = 0
    skipped_fk: int = 0
    rejected: int = 0

    @property
    def conflicts(self) -> int:
        """Rows ignored because their key already existed."""
        return self.attempted - self.loaded - self.skipped_fk - self.rejected


@dataclass
class LoadStats:
    """Outcome of a full load, per table in load order."""

    tables: list[TableLoad] = field(default_factory=list)

    @property
    def total_loaded(self) -> int:
        return sum(t.loaded for t in self.tables)

    @property
    def total_skipped_fk(self) -> int:
        return sum(t.skipped_fk for t in self.tables)

    @property
    def total_rejected(self) -> int:
        return sum(t.rejected for t in self.tables)

    def to_dict(self) -> dict[str, Any]:
        """
        Summarize the load.

        Skip and rejection counts only list tables where something was
        skipped or rejected.
        """
        return {
            "dimension_tables": {
                t.table: t.loaded for t in self.tables if t.kind == DIMENSION
            },
            "fact_tables": {
                t.table: t.loaded for t in self.tables if t.kind != DIMENSION
            },
            "total_loaded": self.total_loaded,
            "skipped_due_to_fk": {
                t.table: t.skipped_fk for t in self.tables if t.skipped_fk
            },
            "rejected_rows": {t.table: t.rejected for t in self.tables if t.rejected},
        }


class RowRejected(ValueError):
    """A row that cannot be stored in its table."""


def coerce_value(column: sa.Column, value: Any) -> Any:
    """
    Convert a staged value to the Python type of ``column``.

    Raises:
        RowRejected: If the value cannot be represented in the column.
    """
    if value is None:
        return None
    column_type = column.type

    if isinstance(column_type, sa.String):
        text = value if isinstance(value, str) else str(value)
        if column_type.length is not None and len(text) > column_type.length:
            msg = f"{column.name} exceeds {column_type.length} characters"
            raise RowRejected(msg)
        return text

    if is_blank(value):
        return None

    try:
        if isinstance(column_type, sa.DateTime):
            if isinstance(value, datetime):
                return value
            if isinstance(value, date):
                return datetime.combine(value, datetime.min.time())
            return datetime.fromisoformat(str(value).strip())
        if isinstance(column_type, sa.Date):
            if isinstance(value, datetime):
                return value.date()
            if isinstance(value, date):
                return value
            return datetime.fromisoformat(str(value).strip()).date()
        if isinstance(column_type, (sa.Integer, sa.Numeric)):
            number = Decimal(str(value).strip())
    except (ValueError, InvalidOperation) as e:
        msg = f"{column.name} cannot hold {value!r}"
        raise RowRejected(msg) from e

    if isinstance(column_type, sa.Integer):
        if not number.is_finite() or number != number.to_integral_value():
            msg = f"{column.name} must be an integer, got {value!r}"
            raise RowRejected(msg)
        return int(number)
    if isinstance(column_type, sa.Numeric):
        if not number.is_finite():
            msg = f"{column.name} must be a finite number, got {value!r}"
            raise RowRejected(msg)
        return number
    return value


def project_row(table: sa.Table, record: Mapping[str, Any]) -> dict[str, Any]:
    """
    Keep the declared columns of ``table`` and coerce their values.

    Fields the table does not declare (provenance, staging timestamps)
    are dropped. Columns with a server default are omitted when the
    record has no value for them.

    Raises:
        RowRejected: If a value cannot be coerced or a required column is
            missing.
    """
    row: dict[str, Any] = {}
    for column in table.columns:
        value = coerce_value(column, record.get(column.name))
        if value is None:
            if column.server_default is not None:
                continue
            if not column.nullable:
                msg = f"{column.name} is required"
                raise RowRejected(msg)
        row[column.name] = value
    return row


class WarehouseLoader:
    """
    Loads conformed records into the warehouse.

    Args:
        config: Warehouse URL and options.
        sink: Receives skip, rejection and per-table events.
        engine: Pre-built engine; created from ``config`` when omitted.
    """

    def __init__(
        self,
        config: WarehouseConfig | None = None,
        sink: EventSink | None = None,
        engine: Engine | None = None,
    ) -> None:
        self.config = config or WarehouseConfig()
        self.sink = sink if sink is not None else LogSink()
        self._engine = engine

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            try:
                self._engine = sa.create_engine(
                    self.config.url, echo=self.config.echo, pool_pre_ping=True
                )
            except (SQLAlchemyError, ImportError) as e:
                msg = f"Cannot create warehouse engine: {e}"
                raise WarehouseError(msg) from e
        return self._engine

    def __enter__(self) -> "WarehouseLoader":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Dispose of the engine and its connections."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def initialize(self) -> None:
        """Create every missing warehouse table; existing tables are kept."""
        try:
            metadata.create_all(self.engine, checkfirst=True)
        except SQLAlchemyError as e:
            msg = f"Cannot create warehouse schema: {e}"
            raise WarehouseError(msg) from e
        log.info("Warehouse schema ready", tables=len(metadata.tables))

    def reset(self) -> None:
        """Drop and recreate every warehouse table."""
        try:
            metadata.drop_all(self.engine)
        except SQLAlchemyError as e:
            msg = f"Cannot drop warehouse schema: {e}"
            raise WarehouseError(msg) from e
        log.warning("Warehouse schema dropped")
        self.initialize()

    def table_counts(self) -> dict[str, int]:
        """Row count of every warehouse table, in load order."""
        try:
            with self.engine.connect() as conn:
                return {
                    target.name: conn.execute(
                        sa.select(sa.func.count()).select_from(target.table)
                    ).scalar_one()
                    for target in LOAD_PLAN
                }
        except SQLAlchemyError as e:
            msg = f"Cannot count warehouse rows: {e}"
            raise WarehouseError(msg) from e

    def _insert(self, table: sa.Table) -> Any:
        dialect = self.engine.dialect.name
        insert = _INSERTS.get(dialect)
        if insert is None:
            msg = f"Unsupported warehouse dialect: {dialect}"
            raise WarehouseError(msg)
        return insert(table).on_conflict_do_nothing()

    @staticmethod
    def _snapshot(conn: Connection, column: sa.Column) -> set[Any]:
        return set(conn.execute(sa.select(column)).scalars())

    def load_table(
        self, target: LoadTarget, records: Iterable[Mapping[str, Any]]
    ) -> TableLoad:
        """
        Load one table in a single transaction.

        Args:
            target: Destination table and its kind.
            records: Clean records of the matching entity type.

        Returns:
            Counts of loaded, skipped and rejected rows.

        Raises:
            WarehouseError: On connectivity or schema failures.
        """
        records = list(records)
        outcome = TableLoad(target.name, target.kind, attempted=len(records))
        skipped: list[dict[str, Any]] = []
        rejected: list[dict[str, Any]] = []
        if not records:
            self._report(target, outcome, skipped, rejected)
            return outcome

        statement = self._insert(target.table)

        try:
            with self.engine.begin() as conn:
                # One snapshot per referenced table for the whole load
                oracles = {
                    name: self._snapshot(conn, column)
                    for name, column in target.references.items()
                }
                for record in records:
                    missing = {
                        name: record.get(name)
                        for name, known in oracles.items()
                        if not is_blank(record.get(name))
                        and record.get(name) not in known
                    }
                    if missing:
                        skipped.append(missing)
                        continue
                    try:
                        row = project_row(target.table, record)
                    except RowRejected as e:
                        rejected.append({"reason": str(e), "record": dict(record)})
                        continue
                    result = conn.execute(statement, row)
                    outcome.loaded += max(result.rowcount, 0)
        except SQLAlchemyError as e:
            msg = f"Failed to load {target.name}: {e}"
            raise WarehouseError(msg) from e

        self._report(target, outcome, skipped, rejected)
        return outcome

    def _report(
        self,
        target: LoadTarget,
        outcome: TableLoad,
        skipped: list[dict[str, Any]],
        rejected: list[dict[str, Any]],
    ) -> None:
        """Record skip and reject counts and emit the table outcome."""
        outcome.skipped_fk = len(skipped)
        outcome.rejected = len(rejected)
        if skipped:
            self.sink.emit(
                Events.ROWS_SKIPPED_FK,
                table=target.name,
                count=len(skipped),
                unresolved=skipped,
            )
        if rejected:
            self.sink.emit(
                Events.ROWS_REJECTED,
                table=target.name,
                count=len(rejected),
                rows=rejected,
            )
        self.sink.emit(
            Events.TABLE_LOADED,
            table=target.name,
            kind=target.kind,
            loaded=outcome.loaded,
            skipped_fk=outcome.skipped_fk,
            rejected=outcome.rejected,
            conflicts=outcome.conflicts,
        )

    def load_all(self, data: Mapping[str, Iterable[Mapping[str, Any]]]) -> LoadStats:
        """
        Load every entity type in dependency order.

        Dimensions load before facts, and every table loads after the
        tables it references, so rows loaded earlier in the same run
        satisfy later foreign keys.

        Args:
            data: Entity type -> clean records.

        Returns:
            LoadStats covering every warehouse table.
        """
        known = {target.entity_type for target in LOAD_PLAN}
        unknown = sorted(set(data) - known)
        if unknown:
            log.warning("No warehouse table for entity types", entity_types=unknown)

        self.sink.emit(Events.PHASE_STARTED, phase="load")
        stats = LoadStats()
        for target in LOAD_PLAN:
            stats.tables.append(self.load_table(target, data.get(target.entity_type, [])))
        self.sink.emit(Events.PHASE_COMPLETED, phase="load", **stats.to_dict())
        return stats
