"""
Pipeline orchestration.

Tags, deduplicates, validates, corrects and loads staged records.
"""

from conformer.pipeline.runner import (
    EntityQualityStats,
    PipelineResult,
    QualityPipeline,
    run_pipeline,
)

__all__ = ["EntityQualityStats", "PipelineResult", "QualityPipeline", "run_pipeline"]
