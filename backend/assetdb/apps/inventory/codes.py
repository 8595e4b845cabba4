"""
SKU and serial-code numbering.

Product SKUs look like ``IT-0008``: the short code embedded in the category
label followed by a 4-digit running number per prefix. Serial codes append
another running number to the SKU: ``IT-0008-0001``.

The "last code" lookups order codes as strings, which matches numeric order
only while every suffix has exactly 4 digits. Numbers past 9999 are still
formatted (with 5+ digits) but will not sort after their predecessors.
"""

from __future__ import annotations

import re
from typing import List, Optional

from sqlalchemy.orm import Session

from . import models

DEFAULT_PREFIX = "GEN"
SEQUENCE_WIDTH = 4
SHORT_LABEL_LENGTH = 10

_CATEGORY_CODE_RE = re.compile(r"\(([^)]+)\)")
_TRAILING_NUMBER_RE = re.compile(r"-(\d+)$")

SYSTEM_CATEGORIES = [
    "ไอที/อิเล็กทรอนิกส์ (IT)",
    "เฟอร์นิเจอร์ (FR)",
    "เครื่องมือ/อุปกรณ์ช่าง (TL)",
    "เสื้อผ้าและเครื่องแต่งกาย (CL)",
    "วัสดุสิ้นเปลือง (CS)",
    "อุปกรณ์สำนักงาน (ST)",
    "อะไหล่/ชิ้นส่วนสำรอง (SP)",
    "เครื่องใช้ไฟฟ้าบาง (AP)",
    "อุปกรณ์ความปลอดภัย (PP)",
    "อุปกรณ์โสต/สื่อ (AV)",
]


def extract_category_code(label: Optional[str]) -> Optional[str]:
    """Upper-cased text inside the first pair of parentheses, or None."""
    match = _CATEGORY_CODE_RE.search(label or "")
    if not match:
        return None
    return match.group(1).strip().upper() or None


def category_prefix(label: Optional[str]) -> str:
    return extract_category_code(label) or DEFAULT_PREFIX


def category_short_label(label: Optional[str]) -> str:
    """Grouping key for reports: the embedded code, else a truncated label."""
    code = extract_category_code(label)
    if code:
        return code
    return (label or "")[:SHORT_LABEL_LENGTH]


def resolve_category(value: Optional[str]) -> str:
    """
    Map free text (a short code like "it" or a full label) to a system
    category. Unknown input falls back to the first system category.
    """
    clean = (value or "").strip().upper()
    for category in SYSTEM_CATEGORIES:
        if extract_category_code(category) == clean or category.upper() == clean:
            return category
    return SYSTEM_CATEGORIES[0]


def parse_sequence(code: Optional[str]) -> int:
    """Trailing running number of a code; 0 when there is none."""
    match = _TRAILING_NUMBER_RE.search(code or "")
    if not match:
        return 0
    return int(match.group(1))


def format_code(prefix: str, number: int) -> str:
    return f"{prefix}-{number:0{SEQUENCE_WIDTH}d}"


def is_valid_code(code: Optional[str], prefix: str) -> bool:
    """True for `PREFIX-NNNN` with exactly 4 digits."""
    pattern = rf"{re.escape(prefix)}-\d{{{SEQUENCE_WIDTH}}}"
    return bool(re.fullmatch(pattern, code or ""))


def next_code(prefix: str, last_code: Optional[str]) -> str:
    """
    >>> next_code("IT", "IT-0007")
    'IT-0008'
    >>> next_code("IT", None)
    'IT-0001'
    """
    return format_code(prefix, parse_sequence(last_code) + 1)


def serial_codes(sku: str, start: int, count: int) -> List[str]:
    """`count` serial codes following running number `start`."""
    if count < 0:
        raise ValueError("count must be >= 0")
    return [format_code(sku, start + offset) for offset in range(1, count + 1)]


# ---------------------------------------------------------------------------
# DATABASE LOOKUPS
# ---------------------------------------------------------------------------


def last_product_sku(db: Session, prefix: str) -> Optional[str]:
    row = (
        db.query(models.Product.p_id)
        .filter(models.Product.p_id.ilike(f"{prefix}-%"))
        .order_by(models.Product.p_id.desc())
        .limit(1)
        .first()
    )
    return row[0] if row else None


def next_product_sku(db: Session, category: str) -> str:
    """
    Next free SKU for a category. Not reserved: a concurrent insert can
    take the same number, in which case the unique index on `p_id` rejects
    the second writer.
    """
    prefix = category_prefix(category)
    return next_code(prefix, last_product_sku(db, prefix))


def last_serial_sequence(db: Session, product_id: str) -> int:
    row = (
        db.query(models.ProductSerial.serial_code)
        .filter(models.ProductSerial.product_id == product_id)
        .order_by(models.ProductSerial.serial_code.desc())
        .limit(1)
        .first()
    )
    return parse_sequence(row[0]) if row else 0
