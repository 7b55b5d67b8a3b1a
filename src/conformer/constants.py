"""
Fixed vocabularies shared across the pipeline.

Enumeration members are the canonical spellings used by both source
systems; rules and correctors compare against these, never against
free text.
"""

import re
from enum import Enum


class ErrorCode(str, Enum):
    """Stable validation error codes."""

    INVALID_FORMAT = "E001"
    NULL_VALUE = "E002"
    OUT_OF_RANGE = "E003"
    DUPLICATE = "E004"
    INVALID_REFERENCE = "E005"
    INVALID_DATE = "E006"
    INVALID_STATUS = "E007"


class EntityType(str, Enum):
    """Logical table names shared by staging and the warehouse."""

    CUSTOMER = "customer"
    CATEGORY = "category"
    PRODUCT = "product"
    SUPPORT_STAFF = "support_staff"
    ORDER = "order"
    ORDER_LINE = "order_line"
    PAYMENT = "payment"
    SUPPORT_TICKET = "support_ticket"
    RATING = "rating"
    TICKET_RESOLUTION = "ticket_resolution"


# Status vocabularies per entity
ORDER_STATUSES: tuple[str, ...] = (
    "Chờ xử lý",
    "Đang chuẩn bị",
    "Đang giao",
    "Đã giao",
    "Hủy",
    "Trả hàng",
    "Đang xử lý",
)
PAYMENT_STATUSES: tuple[str, ...] = (
    "Chưa thanh toán",
    "Đã thanh toán",
    "Hoàn tiền",
    "Thất bại",
    "Thành công",
    "Đang xử lý",
)
TICKET_STATUSES: tuple[str, ...] = (
    "Mới",
    "Đang xử lý",
    "Chờ phản hồi",
    "Đã giải quyết",
    "Đóng",
    "Hủy",
)
STAFF_STATUSES: tuple[str, ...] = ("Đang làm", "Nghỉ phép", "Đã nghỉ")

# Probed in order: the first key present on a record selects its statuses.
# payment_id precedes order_id because payments also carry their order.
STATUS_PROBES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("payment_id", PAYMENT_STATUSES),
    ("ticket_id", TICKET_STATUSES),
    ("staff_id", STAFF_STATUSES),
    ("order_id", ORDER_STATUSES),
)

# Other categorical vocabularies
PAYMENT_METHODS: tuple[str, ...] = (
    "Tiền mặt",
    "Chuyển khoản",
    "Thẻ tín dụng",
    "Ví điện tử",
    "COD",
)
GENDERS: tuple[str, ...] = ("Nam", "Nữ", "Khác")
CUSTOMER_TYPES: tuple[str, ...] = ("Thường", "VIP", "Doanh nghiệp", "Mới")
PRIORITIES: tuple[str, ...] = ("Thấp", "Trung bình", "Cao", "Khẩn cấp")
POSITIONS: tuple[str, ...] = ("Nhân viên", "Trưởng nhóm", "Quản lý", "Giám đốc")
RESOLUTION_OUTCOMES: tuple[str, ...] = ("Thành công", "Thất bại", "Đang xử lý")

# Single-letter middle names and their usual expansion
NAME_ABBREVIATIONS: dict[str, str] = {
    "v": "Văn",
    "t": "Thị",
    "h": "Hữu",
    "d": "Đức",
    "k": "Kim",
    "m": "Minh",
    "n": "Ngọc",
}

# Identifier-shaped fields that receive a source prefix
IDENTIFIER_FIELDS: tuple[str, ...] = (
    "customer_id",
    "category_id",
    "product_id",
    "staff_id",
    "order_id",
    "payment_id",
    "ticket_id",
    "rating_id",
    "resolution_id",
)

# Columns that only exist in staging and never reach the warehouse
PROVENANCE_FIELDS: frozenset[str] = frozenset({"source", "sources", "inserted_at"})

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
PHONE_PATTERN = re.compile(r"^(0|\+84)[0-9]{9,10}$")
ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
