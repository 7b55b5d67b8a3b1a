"""
Record validation.

Rules live in ``conformer.validation.rules``; ``RuleEngine`` in
``conformer.validation.engine`` applies them through the field registry.
"""

from conformer.validation.models import (
    BatchValidation,
    RecordValidation,
    ValidationError,
    ValidationResult,
)

__all__ = [
    "BatchValidation",
    "RecordValidation",
    "ValidationError",
    "ValidationResult",
]
