"""Cross-source deduplication."""

from conformer.dedup.service import DedupStats, DeduplicationService

__all__ = ["DedupStats", "DeduplicationService"]
