"""
Column name normalization.

Both source systems export their tables with Vietnamese column names.
Staging maps them onto the canonical English field names used by the
rules, the dedup keys and the warehouse schema.
"""

import pandas as pd

from conformer.utils.logging import get_logger

log = get_logger(__name__)

# Maps source column names to canonical field names
COLUMN_MAPPING: dict[str, str] = {
    # Identifiers
    "ma_khach_hang": "customer_id",
    "ma_danh_muc": "category_id",
    "ma_san_pham": "product_id",
    "ma_nhan_vien": "staff_id",
    "ma_don_hang": "order_id",
    "ma_thanh_toan": "payment_id",
    "ma_phieu_ho_tro": "ticket_id",
    "ma_danh_gia": "rating_id",
    "ma_phieu_xu_ly": "resolution_id",
    # People
    "ho_ten": "full_name",
    "so_dien_thoai": "phone",
    "sdt": "phone",
    "dia_chi": "address",
    "ngay_sinh": "date_of_birth",
    "gioi_tinh": "gender",
    "loai_khach_hang": "customer_type",
    "ngay_dang_ky": "registered_on",
    "chuc_vu": "position",
    "phong_ban": "department",
    "ngay_tuyen_dung": "hired_on",
    # Catalogue
    "ten_danh_muc": "category_name",
    "ten_san_pham": "product_name",
    "mo_ta": "description",
    "don_gia": "unit_price",
    "ton_kho": "stock_quantity",
    # Orders and payments
    "ngay_dat": "order_date",
    "tong_tien": "total_amount",
    "trang_thai": "status",
    "so_luong": "quantity",
    "ngay_thanh_toan": "paid_on",
    "so_tien": "amount",
    "phuong_thuc": "method",
    # Support
    "loai_van_de": "issue_type",
    "ngay_tao": "created_on",
    "do_uu_tien": "priority",
    "diem_danh_gia": "score",
    "nhan_xet": "comment",
    "ngay_danh_gia": "rated_on",
    "ngay_xu_ly": "resolved_at",
    "hanh_dong": "action",
    "ket_qua": "outcome",
    "ghi_chu": "note",
}


def normalize_columns(
    df: pd.DataFrame,
    mapping: dict[str, str] | None = None,
) -> pd.DataFrame:
    """
    Normalize column names to canonical form.

    Column names are trimmed and lower-cased before lookup; columns
    without a mapping keep their (lower-cased) name.

    Args:
        df: DataFrame to normalize.
        mapping: Optional custom mapping (defaults to COLUMN_MAPPING).

    Returns:
        DataFrame with normalized column names.
    """
    mapping = mapping or COLUMN_MAPPING

    cleaned = {col: str(col).strip().lower() for col in df.columns}
    rename_dict = {col: mapping.get(name, name) for col, name in cleaned.items()}
    renamed = [col for col, new in rename_dict.items() if col != new]

    if renamed:
        log.debug("Normalizing columns", renamed=renamed)
        df = df.rename(columns=rename_dict)

    return df
