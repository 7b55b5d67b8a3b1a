"""
Typed configuration models using Pydantic.

All tunable behavior of the pipeline lives here: validation limits,
correction defaults, source prefixes, dedup keys and warehouse location.
Processing code reads these values, it never hardcodes them.
"""

from datetime import date
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from conformer.constants import IDENTIFIER_FIELDS


class LimitsConfig(BaseModel):
    """Numeric and length limits enforced by the field rules."""

    model_config = ConfigDict(frozen=True)

    min_age: int = Field(default=13, ge=0)
    max_age: int = Field(default=120, ge=1)
    min_birth_year: int = Field(default=1900, ge=1800)
    min_price: float = Field(default=0)
    max_price: float = Field(default=999_999_999)
    min_quantity: int = Field(default=1)
    max_quantity: int = Field(default=10_000)
    min_rating: int = Field(default=1)
    max_rating: int = Field(default=5)
    max_name_length: int = Field(default=100, ge=1)
    max_email_length: int = Field(default=100, ge=3)
    max_phone_length: int = Field(default=20, ge=1)

    @model_validator(mode="after")
    def check_ranges(self) -> "LimitsConfig":
        """Ensure every min/max pair is ordered."""
        pairs = [
            ("min_age", "max_age"),
            ("min_price", "max_price"),
            ("min_quantity", "max_quantity"),
            ("min_rating", "max_rating"),
        ]
        for low, high in pairs:
            if getattr(self, low) > getattr(self, high):
                msg = f"{low} must not exceed {high}"
                raise ValueError(msg)
        return self


class CorrectionConfig(BaseModel):
    """Defaults and thresholds used by the correctors."""

    model_config = ConfigDict(frozen=True)

    default_birth_date: date = Field(
        default=date(2004, 5, 29),
        description="Replacement for missing or irreparable birth dates",
    )
    name_placeholder: str = Field(
        default="Không Rõ",
        description="Prepended to single-word names",
    )
    default_customer_type: str = Field(default="Thường")
    near_match_ratio: float = Field(
        default=0.3,
        gt=0,
        lt=1,
        description="Max edit distance relative to the candidate's length",
    )


class SourcesConfig(BaseModel):
    """Source systems and the identifier prefix each one receives."""

    model_config = ConfigDict(frozen=True)

    prefixes: dict[str, str] = Field(
        default_factory=lambda: {"postgresql": "PG_", "csv": "CSV_"},
    )
    identifier_fields: list[str] = Field(
        default_factory=lambda: list(IDENTIFIER_FIELDS),
    )

    @field_validator("prefixes")
    @classmethod
    def validate_prefixes(cls, v: dict[str, str]) -> dict[str, str]:
        """Prefixes must be non-empty and must not be prefixes of each other."""
        values = list(v.values())
        if any(not p for p in values):
            msg = "Source prefixes must be non-empty"
            raise ValueError(msg)
        if len(set(values)) != len(values):
            msg = "Source prefixes must be distinct"
            raise ValueError(msg)
        for a in values:
            for b in values:
                if a != b and b.startswith(a):
                    msg = f"Ambiguous source prefixes: {a!r} is a prefix of {b!r}"
                    raise ValueError(msg)
        return v


def _default_dedup_keys() -> dict[str, list[str]]:
    return {
        # Sources allocate customer ids independently; email is the natural key
        "customer": ["email"],
        "category": ["category_id"],
        "product": ["product_id"],
        "support_staff": ["staff_id"],
        "order": ["order_id"],
        "order_line": ["order_id", "product_id"],
        "payment": ["payment_id"],
        "support_ticket": ["ticket_id"],
        "rating": ["rating_id"],
        "ticket_resolution": ["resolution_id"],
    }


class DedupConfig(BaseModel):
    """Composite dedup key per entity type."""

    model_config = ConfigDict(frozen=True)

    keys: dict[str, list[str]] = Field(default_factory=_default_dedup_keys)
    separator: str = Field(default="|", min_length=1)
    missing_sentinel: str = Field(default="null")

    @field_validator("keys")
    @classmethod
    def validate_keys(cls, v: dict[str, list[str]]) -> dict[str, list[str]]:
        """Every configured key list must name at least one field."""
        empty = [entity for entity, fields in v.items() if not fields]
        if empty:
            msg = f"Dedup key lists must not be empty: {', '.join(empty)}"
            raise ValueError(msg)
        return v


class StagingConfig(BaseModel):
    """Location of staged source exports."""

    model_config = ConfigDict(frozen=True)

    path: Path = Field(
        default=Path("./staging"),
        description="Directory with one sub-directory of CSV files per source",
    )


class WarehouseConfig(BaseModel):
    """Destination warehouse connection."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(
        default="sqlite:///warehouse.db",
        description="SQLAlchemy database URL",
    )
    echo: bool = Field(default=False, description="Echo SQL statements")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Reject obviously malformed URLs early."""
        if "://" not in v:
            msg = f"Warehouse URL must be a SQLAlchemy URL, got: {v!r}"
            raise ValueError(msg)
        return v


class ProcessingConfig(BaseModel):
    """Execution options for the quality stages."""

    model_config = ConfigDict(frozen=True)

    parallel: bool = Field(default=False)
    max_workers: int = Field(default=4, ge=1, le=64)


class OutputConfig(BaseModel):
    """Output paths configuration.

    Structure: ./output/{project}/errors.json, ./output/{project}/run.log
    """

    model_config = ConfigDict(frozen=True)

    output_root: Path = Field(
        default=Path("./output"), description="Root directory for all outputs"
    )


class PipelineConfig(BaseModel):
    """Complete pipeline configuration."""

    model_config = ConfigDict(frozen=True)

    project: str = Field(description="Project name used for output paths")
    staging: StagingConfig = Field(default_factory=StagingConfig)
    warehouse: WarehouseConfig = Field(default_factory=WarehouseConfig)
    sources: SourcesConfig = Field(default_factory=SourcesConfig)
    dedup: DedupConfig = Field(default_factory=DedupConfig)
    limits: LimitsConfig = Field(default_factory=LimitsConfig)
    corrections: CorrectionConfig = Field(default_factory=CorrectionConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @field_validator("project")
    @classmethod
    def validate_project(cls, v: str) -> str:
        """Project names become directory names."""
        if not v or "/" in v or "\\" in v:
            msg = f"Project name must be a plain directory name, got: {v!r}"
            raise ValueError(msg)
        return v

    @property
    def output_dir(self) -> Path:
        """Per-project output directory."""
        return self.output.output_root / self.project

    @property
    def error_report_path(self) -> Path:
        """Path of the complete error report."""
        return self.output_dir / "errors.json"

    @property
    def log_path(self) -> Path:
        """Path of the JSON-lines run log."""
        return self.output_dir / "run.log"
