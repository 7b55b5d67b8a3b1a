"""
Schema registry for versioning and discovery.

Provides access to the staging schema of every entity type with
version tracking.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

import pandera.pandas as pa

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

if TYPE_CHECKING:
    import pandas as pd


@dataclass(frozen=True)
class SchemaInfo:
    """Metadata about a registered schema."""

    name: str
    schema: type[pa.DataFrameModel]
    version: str
    description: str


class SchemaRegistry:
    """
    Registry of staging schemas, keyed by entity type.

    Provides version tracking and schema discovery.
    """

    _version = "1.0.0"

    _schemas: ClassVar[dict[str, SchemaInfo]] = {
        "customer": SchemaInfo(
            name="customer",
            schema=CustomerStagingSchema,
            version="1.0.0",
            description="Customers from both sources",
        ),
        "category": SchemaInfo(
            name="category",
            schema=CategoryStagingSchema,
            version="1.0.0",
            description="Product categories",
        ),
        "product": SchemaInfo(
            name="product",
            schema=ProductStagingSchema,
            version="1.0.0",
            description="Product catalogue",
        ),
        "support_staff": SchemaInfo(
            name="support_staff",
            schema=SupportStaffStagingSchema,
            version="1.0.0",
            description="Customer support staff",
        ),
        "order": SchemaInfo(
            name="order",
            schema=OrderStagingSchema,
            version="1.0.0",
            description="Order headers",
        ),
        "order_line": SchemaInfo(
            name="order_line",
            schema=OrderLineStagingSchema,
            version="1.0.0",
            description="Order lines keyed by order and product",
        ),
        "payment": SchemaInfo(
            name="payment",
            schema=PaymentStagingSchema,
            version="1.0.0",
            description="Payments against orders",
        ),
        "support_ticket": SchemaInfo(
            name="support_ticket",
            schema=SupportTicketStagingSchema,
            version="1.0.0",
            description="Support tickets",
        ),
        "rating": SchemaInfo(
            name="rating",
            schema=RatingStagingSchema,
            version="1.0.0",
            description="Customer ratings",
        ),
        "ticket_resolution": SchemaInfo(
            name="ticket_resolution",
            schema=TicketResolutionStagingSchema,
            version="1.0.0",
            description="Ticket handling by staff",
        ),
    }

    @classmethod
    def registry_version(cls) -> str:
        """Get the registry version."""
        return cls._version

    @classmethod
    def get(cls, name: str) -> type[pa.DataFrameModel]:
        """
        Get a schema by entity type.

        Args:
            name: Entity type.

        Returns:
            The Pandera DataFrameModel class.

        Raises:
            KeyError: If schema not found.
        """
        return cls.get_info(name).schema

    @classmethod
    def get_info(cls, name: str) -> SchemaInfo:
        """Get full schema info by entity type."""
        if name not in cls._schemas:
            available = ", ".join(cls._schemas.keys())
            msg = f"Unknown schema '{name}'. Available: {available}"
            raise KeyError(msg)
        return cls._schemas[name]

    @classmethod
    def list_schemas(cls) -> list[str]:
        """List all registered entity types."""
        return list(cls._schemas.keys())

    @classmethod
    def validate(cls, df: "pd.DataFrame", schema_name: str) -> "pd.DataFrame":
        """
        Validate a DataFrame against a registered schema.

        All failures are collected before raising.

        Raises:
            pandera.errors.SchemaErrors: If validation fails.
        """
        return cls.get(schema_name).validate(df, lazy=True)
