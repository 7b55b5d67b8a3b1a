"""
Warehouse star schema.

Four dimensions and six facts. Foreign keys are declared on the tables
themselves; the loader derives its reference checks from them, so the
schema is the single source of truth for what must resolve.
"""

from dataclasses import dataclass

import sqlalchemy as sa

from conformer.constants import EntityType

metadata = sa.MetaData()

ID = sa.String(40)


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime, server_default=sa.func.now())


dim_customer = sa.Table(
    "dim_customer",
    metadata,
    sa.Column("customer_id", ID, primary_key=True),
    sa.Column("full_name", sa.String(100), nullable=False),
    sa.Column("email", sa.String(100), nullable=False, unique=True),
    sa.Column("phone", sa.String(20)),
    sa.Column("address", sa.String(255)),
    sa.Column("date_of_birth", sa.Date),
    sa.Column("registered_on", sa.Date),
    sa.Column("gender", sa.String(10)),
    sa.Column("customer_type", sa.String(50), server_default="Thường"),
    _created_at(),
)

dim_category = sa.Table(
    "dim_category",
    metadata,
    sa.Column("category_id", ID, primary_key=True),
    sa.Column("category_name", sa.String(100), nullable=False),
    _created_at(),
)

dim_product = sa.Table(
    "dim_product",
    metadata,
    sa.Column("product_id", ID, primary_key=True),
    sa.Column("product_name", sa.String(150), nullable=False),
    sa.Column("description", sa.Text),
    sa.Column("category_id", ID, sa.ForeignKey("dim_category.category_id")),
    sa.Column("unit_price", sa.Numeric(12, 2)),
    sa.Column("stock_quantity", sa.Integer),
    _created_at(),
)

dim_support_staff = sa.Table(
    "dim_support_staff",
    metadata,
    sa.Column("staff_id", ID, primary_key=True),
    sa.Column("full_name", sa.String(100), nullable=False),
    sa.Column("email", sa.String(100), unique=True),
    sa.Column("phone", sa.String(20)),
    sa.Column("position", sa.String(50)),
    sa.Column("department", sa.String(50)),
    sa.Column("hired_on", sa.Date),
    sa.Column("status", sa.String(20)),
    _created_at(),
)

fact_order = sa.Table(
    "fact_order",
    metadata,
    sa.Column("order_id", ID, primary_key=True),
    sa.Column("customer_id", ID, sa.ForeignKey("dim_customer.customer_id"), index=True),
    sa.Column("order_date", sa.Date, nullable=False, index=True),
    sa.Column("total_amount", sa.Numeric(12, 2)),
    sa.Column("status", sa.String(50)),
    _created_at(),
)

fact_order_line = sa.Table(
    "fact_order_line",
    metadata,
    sa.Column(
        "order_id", ID, sa.ForeignKey("fact_order.order_id"), primary_key=True
    ),
    sa.Column(
        "product_id", ID, sa.ForeignKey("dim_product.product_id"), primary_key=True
    ),
    sa.Column("quantity", sa.Integer),
    sa.Column("unit_price", sa.Numeric(12, 2)),
)

fact_payment = sa.Table(
    "fact_payment",
    metadata,
    sa.Column("payment_id", ID, primary_key=True),
    sa.Column("order_id", ID, sa.ForeignKey("fact_order.order_id")),
    sa.Column("paid_on", sa.Date),
    sa.Column("amount", sa.Numeric(12, 2)),
    sa.Column("status", sa.String(50)),
    sa.Column("method", sa.String(50)),
    _created_at(),
)

fact_support_ticket = sa.Table(
    "fact_support_ticket",
    metadata,
    sa.Column("ticket_id", ID, primary_key=True),
    sa.Column("customer_id", ID, sa.ForeignKey("dim_customer.customer_id"), index=True),
    sa.Column("issue_type", sa.String(100)),
    sa.Column("description", sa.Text),
    sa.Column("created_on", sa.DateTime),
    sa.Column("status", sa.String(50)),
    sa.Column("priority", sa.String(20)),
    _created_at(),
)

fact_rating = sa.Table(
    "fact_rating",
    metadata,
    sa.Column("rating_id", ID, primary_key=True),
    sa.Column("customer_id", ID, sa.ForeignKey("dim_customer.customer_id")),
    sa.Column("score", sa.Integer),
    sa.Column("comment", sa.Text),
    sa.Column("rated_on", sa.Date),
    _created_at(),
    sa.CheckConstraint("score BETWEEN 1 AND 5", name="ck_fact_rating_score"),
)

fact_ticket_resolution = sa.Table(
    "fact_ticket_resolution",
    metadata,
    sa.Column("resolution_id", ID, primary_key=True),
    sa.Column("ticket_id", ID, sa.ForeignKey("fact_support_ticket.ticket_id")),
    sa.Column("staff_id", ID, sa.ForeignKey("dim_support_staff.staff_id")),
    sa.Column("resolved_at", sa.DateTime),
    sa.Column("action", sa.String(100)),
    sa.Column("outcome", sa.String(50)),
    sa.Column("note", sa.Text),
    _created_at(),
)


@dataclass(frozen=True)
class LoadTarget:
    """Where one entity type lands in the warehouse."""

    entity_type: str
    table: sa.Table
    kind: str

    @property
    def name(self) -> str:
        return self.table.name

    @property
    def references(self) -> dict[str, sa.Column]:
        """Local column -> referenced column, one per declared foreign key."""
        return {
            fk.parent.name: fk.column
            for fk in sorted(self.table.foreign_keys, key=lambda fk: fk.parent.name)
        }


DIMENSION = "dimension"
FACT = "fact"

# Parents always precede their children
LOAD_PLAN: tuple[LoadTarget, ...] = (
    # Independent dimensions
    LoadTarget(EntityType.CUSTOMER.value, dim_customer, DIMENSION),
    LoadTarget(EntityType.CATEGORY.value, dim_category, DIMENSION),
    LoadTarget(EntityType.SUPPORT_STAFF.value, dim_support_staff, DIMENSION),
    # Dependent dimension
    LoadTarget(EntityType.PRODUCT.value, dim_product, DIMENSION),
    # Single-parent facts
    LoadTarget(EntityType.ORDER.value, fact_order, FACT),
    LoadTarget(EntityType.PAYMENT.value, fact_payment, FACT),
    LoadTarget(EntityType.SUPPORT_TICKET.value, fact_support_ticket, FACT),
    LoadTarget(EntityType.RATING.value, fact_rating, FACT),
    # Multi-parent facts
    LoadTarget(EntityType.ORDER_LINE.value, fact_order_line, FACT),
    LoadTarget(EntityType.TICKET_RESOLUTION.value, fact_ticket_resolution, FACT),
)


def target_for(entity_type: str) -> LoadTarget | None:
    """Look up the table an entity type loads into."""
    for target in LOAD_PLAN:
        if target.entity_type == entity_type:
            return target
    return None
