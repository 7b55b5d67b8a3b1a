"""
Error report output.

Every record that fails its final validation is written with all of its
errors, grouped by entity type. The report is complete, never sampled.
"""

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from conformer.utils.logging import get_logger
from conformer.validation.models import RecordValidation

log = get_logger(__name__)


def build_error_report(
    errors: Mapping[str, Sequence[RecordValidation]],
) -> dict[str, list[dict[str, Any]]]:
    """
    Build the report document.

    Returns:
        ``{entity_type: [{"record": ..., "errors": [...]}]}`` with only
        entity types that have rejected records.
    """
    return {
        entity_type: [
            {
                "record": rejected.record,
                "errors": [e.to_dict() for e in rejected.result.errors],
            }
            for rejected in records
        ]
        for entity_type, records in errors.items()
        if records
    }


def write_error_report(
    errors: Mapping[str, Sequence[RecordValidation]],
    path: Path,
) -> Path:
    """
    Write the error report as JSON.

    Args:
        errors: Rejected records per entity type.
        path: Destination file; parent directories are created.

    Returns:
        The written path.
    """
    report = build_error_report(errors)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(report, f, indent=2, ensure_ascii=False, default=str)
    log.info(
        "Wrote error report",
        path=str(path),
        records=sum(len(records) for records in report.values()),
    )
    return path
