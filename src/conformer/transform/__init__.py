"""
Record correction.

Correctors live in ``conformer.transform.correctors``; ``TransformEngine``
in ``conformer.transform.engine`` applies them to fixable fields.
"""

from conformer.transform.models import BatchTransform, TransformLogEntry, TransformResult

__all__ = ["BatchTransform", "TransformLogEntry", "TransformResult"]
