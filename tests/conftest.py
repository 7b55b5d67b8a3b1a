"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from datetime import date
from pathlib import Path
from typing import Any

import pandas as pd
import pytest
import structlog

from conformer.config import (
    OutputConfig,
    PipelineConfig,
    StagingConfig,
    WarehouseConfig,
)
from conformer.fields import FieldRegistry, build_field_registry
from conformer.transform.engine import TransformEngine
from conformer.utils.events import MemorySink
from conformer.utils.logging import close_run_log
from conformer.validation.engine import RuleEngine

TODAY = date(2025, 6, 1)


@pytest.fixture(autouse=True)
def _reset_structlog() -> Any:
    """Undo logging configuration done by a test."""
    yield
    structlog.reset_defaults()
    close_run_log()


@pytest.fixture
def today() -> Callable[[], date]:
    """Fixed clock so age checks do not drift."""
    return lambda: TODAY


@pytest.fixture
def sink() -> MemorySink:
    return MemorySink()


@pytest.fixture
def registry(today: Callable[[], date]) -> FieldRegistry:
    return build_field_registry(today=today)


@pytest.fixture
def rule_engine(registry: FieldRegistry, sink: MemorySink) -> RuleEngine:
    return RuleEngine(registry, sink)


@pytest.fixture
def transform_engine(registry: FieldRegistry, sink: MemorySink) -> TransformEngine:
    return TransformEngine(registry, sink)


@pytest.fixture
def valid_customer() -> dict[str, Any]:
    """A customer record every rule accepts."""
    return {
        "customer_id": "PG_KH001",
        "full_name": "Nguyễn Văn An",
        "email": "an.nguyen@gmail.com",
        "phone": "0912345678",
        "date_of_birth": "1990-04-12",
        "gender": "Nam",
        "customer_type": "VIP",
        "registered_on": "2023-01-10",
        "address": "12 Lê Lợi, Huế",
        "source": "postgresql",
    }


@pytest.fixture
def pipeline_config(tmp_path: Path) -> PipelineConfig:
    """Configuration pointing at a throwaway SQLite warehouse."""
    return PipelineConfig(
        project="test",
        staging=StagingConfig(path=tmp_path / "staging"),
        warehouse=WarehouseConfig(url=f"sqlite:///{tmp_path / 'warehouse.db'}"),
        output=OutputConfig(output_root=tmp_path / "output"),
    )


@pytest.fixture
def write_staged(tmp_path: Path) -> Callable[[str, str, list[dict[str, Any]]], Path]:
    """Write one staged CSV file: ``write_staged(source, entity, rows)``."""

    def _write(source: str, entity_type: str, rows: list[dict[str, Any]]) -> Path:
        path = tmp_path / "staging" / source / f"{entity_type}.csv"
        path.parent.mkdir(parents=True, exist_ok=True)
        pd.DataFrame(rows).to_csv(path, index=False)
        return path

    return _write


@pytest.fixture
def base_config() -> dict[str, Any]:
    """Create a minimal configuration dictionary for testing."""
    return {
        "project": "shop",
        "warehouse": {"url": "sqlite:///warehouse.db"},
        "dedup": {"keys": {"customer": ["email"]}},
    }
