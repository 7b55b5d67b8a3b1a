"""
Warehouse schema and loading.

Star schema of four dimensions and six facts, loaded in foreign-key
order with conflict-ignoring inserts.
"""

from conformer.warehouse.loader import LoadStats, TableLoad, WarehouseLoader
from conformer.warehouse.schema import LOAD_PLAN, LoadTarget, metadata

__all__ = [
    "LOAD_PLAN",
    "LoadStats",
    "LoadTarget",
    "TableLoad",
    "WarehouseLoader",
    "metadata",
]
