"""
Data ingestion layer for loading staged exports with schema validation.

All staged data loading happens through this module to ensure
consistent validation at system boundaries.
"""

from conformer.ingestion.staging import StagingReader, StagingTableLoader

__all__ = ["StagingReader", "StagingTableLoader"]
