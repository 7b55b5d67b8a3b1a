"""
Schema definitions using Pandera for data validation.

Staged exports are checked against these contracts before any record
reaches the quality stages.
"""

from conformer.schemas.registry import SchemaInfo, SchemaRegistry
from conformer.schemas.staging import (
    CategoryStagingSchema,
    CustomerStagingSchema,
    OrderLineStagingSchema,
    OrderStagingSchema,
    PaymentStagingSchema,
    ProductStagingSchema,
    RatingStagingSchema,
    SupportStaffStagingSchema,
    SupportTicketStagingSchema,
    TicketResolutionStagingSchema,
)

__all__ = [
    "CategoryStagingSchema",
    "CustomerStagingSchema",
    "OrderLineStagingSchema",
    "OrderStagingSchema",
    "PaymentStagingSchema",
    "ProductStagingSchema",
    "RatingStagingSchema",
    "SchemaInfo",
    "SchemaRegistry",
    "SupportStaffStagingSchema",
    "SupportTicketStagingSchema",
    "TicketResolutionStagingSchema",
]
