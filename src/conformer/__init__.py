"""
Conformer: cross-source data quality and warehouse loading.

This package deduplicates, validates, corrects and loads staged records
from two independently operated sources into a conformed
dimension/fact warehouse.
"""

from importlib.metadata import version

__version__ = version("conformer")

__all__ = ["__version__"]
