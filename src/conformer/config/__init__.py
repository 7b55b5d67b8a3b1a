"""
Configuration management with typed Pydantic models.

Provides validated limits, correction defaults, dedup keys and
environment-aware configuration loading.
"""

from conformer.config.loader import load_config
from conformer.config.settings import (
    CorrectionConfig,
    DedupConfig,
    LimitsConfig,
    OutputConfig,
    PipelineConfig,
    ProcessingConfig,
    SourcesConfig,
    StagingConfig,
    WarehouseConfig,
)

__all__ = [
    "CorrectionConfig",
    "DedupConfig",
    "LimitsConfig",
    "OutputConfig",
    "PipelineConfig",
    "ProcessingConfig",
    "SourcesConfig",
    "StagingConfig",
    "WarehouseConfig",
    "load_config",
]
