"""
Stock counting over serial statuses.

Serial statuses are free strings written in both English and Thai. Each
known string belongs to exactly one bucket; anything else only counts
towards the product total.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple


class StockBucket(str, Enum):
    AVAILABLE = "available"
    BORROWED = "borrowed"
    REPAIR = "repair"


AVAILABLE_STATUSES = frozenset({"Ready", "พร้อมใช้"})
BORROWED_STATUSES = frozenset({"Borrowed", "ถูกยืม", "Active"})
REPAIR_STATUSES = frozenset(
    {"Repair", "ส่งซ่อม", "ซ่อม", "เสีย", "พัง", "ไม่พร้อมใช้", "Missing", "หาย"}
)

_BUCKETS = (
    (StockBucket.AVAILABLE, AVAILABLE_STATUSES),
    (StockBucket.BORROWED, BORROWED_STATUSES),
    (StockBucket.REPAIR, REPAIR_STATUSES),
)

LOW_STOCK_THRESHOLD = 3


@dataclass
class StockCounts:
    total: int = 0
    available: int = 0
    borrowed: int = 0
    repair: int = 0

    def add(self, status: Optional[str]) -> None:
        self.total += 1
        bucket = classify_status(status)
        if bucket is StockBucket.AVAILABLE:
            self.available += 1
        elif bucket is StockBucket.BORROWED:
            self.borrowed += 1
        elif bucket is StockBucket.REPAIR:
            self.repair += 1


def classify_status(status: Optional[str]) -> Optional[StockBucket]:
    if not status:
        return None
    for bucket, statuses in _BUCKETS:
        if status in statuses:
            return bucket
    return None


def is_available(status: Optional[str]) -> bool:
    return classify_status(status) is StockBucket.AVAILABLE


def aggregate_stock(rows: Iterable[Tuple[str, Optional[str]]]) -> Dict[str, StockCounts]:
    """Fold `(product_id, status)` rows into per-product counts."""
    counts: Dict[str, StockCounts] = {}
    for product_id, status in rows:
        counts.setdefault(product_id, StockCounts()).add(status)
    return counts


def is_low_stock(counts: StockCounts) -> bool:
    return counts.available < LOW_STOCK_THRESHOLD and counts.total > 0


def low_stock_product_ids(counts_by_product: Dict[str, StockCounts]) -> List[str]:
    return [
        product_id
        for product_id, counts in counts_by_product.items()
        if is_low_stock(counts)
    ]
