"""
Pandera schemas for staged source exports.

Staged files are read as text, so every column is a nullable string at
this boundary. The schemas only guarantee that identifying columns are
present and non-empty where populated; content rules run later, per
record, in the rule engine.
"""

import pandera.pandas as pa
from pandera.typing import Series

_ID = {"str_length": {"min_value": 1, "max_value": 40}, "nullable": True}


class CustomerStagingSchema(pa.DataFrameModel):
    """Customers; email is the cross-source identity."""

    customer_id: Series[str] = pa.Field(**_ID)
    email: Series[str] = pa.Field(nullable=True)
    full_name: Series[str] | None = pa.Field(nullable=True)
    phone: Series[str] | None = pa.Field(nullable=True)
    date_of_birth: Series[str] | None = pa.Field(nullable=True)

    class Config:
        """Schema configuration."""

        name = "CustomerStagingSchema"
        strict = False


class CategoryStagingSchema(pa.DataFrameModel):
    """Product categories."""

    category_id: Series[str] = pa.Field(**_ID)
    category_name: Series[str] | None = pa.Field(nullable=True)

    class Config:
        """Schema configuration."""

        name = "CategoryStagingSchema"
        strict = False


class ProductStagingSchema(pa.DataFrameModel):
    """Products and their category."""

    product_id: Series[str] = pa.Field(**_ID)
    category_id: Series[str] | None = pa.Field(nullable=True)
    unit_price: Series[str] | None = pa.Field(nullable=True)

    class Config:
        """Schema configuration."""

        name = "ProductStagingSchema"
        strict = False


class SupportStaffStagingSchema(pa.DataFrameModel):
    """Customer support staff."""

    staff_id: Series[str] = pa.Field(**_ID)
    full_name: Series[str] | None = pa.Field(nullable=True)
    status: Series[str] | None = pa.Field(nullable=True)

    class Config:
        """Schema configuration."""

        name = "SupportStaffStagingSchema"
        strict = False


class OrderStagingSchema(pa.DataFrameModel):
    """Order headers."""

    order_id: Series[str] = pa.Field(**_ID)
    customer_id: Series[str] | None = pa.Field(nullable=True)
    order_date: Series[str] | None = pa.Field(nullable=True)
    status: Series[str] | None = pa.Field(nullable=True)

    class Config:
        """Schema configuration."""

        name = "OrderStagingSchema"
        strict = False


class OrderLineStagingSchema(pa.DataFrameModel):
    """Order lines, keyed by order and product."""

    order_id: Series[str] = pa.Field(**_ID)
    product_id: Series[str] = pa.Field(**_ID)
    quantity: Series[str] | None = pa.Field(nullable=True)

    class Config:
        """Schema configuration."""

        name = "OrderLineStagingSchema"
        strict = False


class PaymentStagingSchema(pa.DataFrameModel):
    """Payments against orders."""

    payment_id: Series[str] = pa.Field(**_ID)
    order_id: Series[str] | None = pa.Field(nullable=True)
    amount: Series[str] | None = pa.Field(nullable=True)

    class Config:
        """Schema configuration."""

        name = "PaymentStagingSchema"
        strict = False


class SupportTicketStagingSchema(pa.DataFrameModel):
    """Support tickets raised by customers."""

    ticket_id: Series[str] = pa.Field(**_ID)
    customer_id: Series[str] | None = pa.Field(nullable=True)
    priority: Series[str] | None = pa.Field(nullable=True)

    class Config:
        """Schema configuration."""

        name = "SupportTicketStagingSchema"
        strict = False


class RatingStagingSchema(pa.DataFrameModel):
    """Customer ratings."""

    rating_id: Series[str] = pa.Field(**_ID)
    customer_id: Series[str] | None = pa.Field(nullable=True)
    score: Series[str] | None = pa.Field(nullable=True)

    class Config:
        """Schema configuration."""

        name = "RatingStagingSchema"
        strict = False


class TicketResolutionStagingSchema(pa.DataFrameModel):
    """Actions taken by staff on tickets."""

    resolution_id: Series[str] = pa.Field(**_ID)
    ticket_id: Series[str] | None = pa.Field(nullable=True)
    staff_id: Series[str] | None = pa.Field(nullable=True)

    class Config:
        """Schema configuration."""

        name = "TicketResolutionStagingSchema"
        strict = False
