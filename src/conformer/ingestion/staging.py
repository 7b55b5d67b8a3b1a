"""
Staging area ingestion.

The extract jobs leave one sub-directory per source system in the
staging directory, each holding ``<entity_type>.csv`` files:

    staging/
        postgresql/customer.csv
        postgresql/order.csv
        csv/customer.csv

Files are read as text, column names are normalized, and every record
is tagged with the name of the source it came from.
"""

from pathlib import Path
from typing import Any

import pandas as pd

from conformer.config.settings import PipelineConfig
from conformer.constants import EntityType
from conformer.exceptions import StagingError
from conformer.ingestion.base import DataLoader
from conformer.normalization.columns import normalize_columns
from conformer.schemas.registry import SchemaRegistry
from conformer.utils.logging import get_logger

log = get_logger(__name__)


class StagingTableLoader(DataLoader):
    """Loader for one staged CSV file."""

    def __init__(self, path: Path, entity_type: str) -> None:
        """Initialize with the entity type's staging schema."""
        super().__init__(path, SchemaRegistry.get(entity_type))
        self.entity_type = entity_type

    def _load_raw(self) -> pd.DataFrame:
        """Load the CSV keeping every value as text."""
        df = pd.read_csv(self.path, dtype=str, encoding="utf-8-sig")
        return normalize_columns(df)


def frame_to_records(df: pd.DataFrame) -> list[dict[str, Any]]:
    """Convert a DataFrame to records with None for missing values."""
    return df.astype(object).where(df.notna(), None).to_dict(orient="records")


class StagingReader:
    """
    Reads every staged entity file of every configured source.

    Sources are read in configuration order, which is also the order in
    which deduplication meets them.
    """

    def __init__(self, config: PipelineConfig) -> None:
        self.config = config
        self.root = config.staging.path

    def sources(self) -> list[str]:
        """Configured sources that have a staging directory."""
        if not self.root.is_dir():
            msg = f"Staging directory not found: {self.root}"
            raise StagingError(msg)

        present = {p.name for p in self.root.iterdir() if p.is_dir()}
        unknown = sorted(present - set(self.config.sources.prefixes))
        if unknown:
            log.warning("Ignoring unconfigured staging sources", sources=unknown)
        return [s for s in self.config.sources.prefixes if s in present]

    def read_entity(self, source: str, entity_type: str) -> list[dict[str, Any]]:
        """
        Read one staged file, tagging records with their source.

        Returns:
            Records of the file; empty when the source has no such file.

        Raises:
            StagingError: If the file exists but is unreadable or invalid.
        """
        path = self.root / source / f"{entity_type}.csv"
        if not path.exists():
            log.debug("No staged file", source=source, entity_type=entity_type)
            return []

        df = StagingTableLoader(path, entity_type).load()
        records = frame_to_records(df)
        for record in records:
            record["source"] = source
        log.info(
            "Read staged records",
            source=source,
            entity_type=entity_type,
            records=len(records),
        )
        return records

    def read_all(self) -> dict[str, list[dict[str, Any]]]:
        """
        Read all entity types from all sources.

        Returns:
            Entity type -> records, every entity type present (possibly
            empty).
        """
        sources = self.sources()
        data: dict[str, list[dict[str, Any]]] = {e.value: [] for e in EntityType}
        for source in sources:
            for entity_type in data:
                data[entity_type].extend(self.read_entity(source, entity_type))
        return data
