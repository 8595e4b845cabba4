from __future__ import annotations

import logging
from collections import Counter

from sqlalchemy.orm import Session

from assetdb.apps.inventory import codes, models as inventory_models, stock
from . import schemas

logger = logging.getLogger(__name__)

TOP_CATEGORIES = 5

STATUS_LABELS = (
    ("พร้อมใช้", "available"),
    ("ถูกยืม", "borrowed"),
    ("ส่งซ่อม", "repair"),
)


def dashboard_stats(db: Session) -> schemas.DashboardStats:
    """
    Inventory overview for the dashboard.

    Counts are built from serials that belong to an existing product; the
    value of a product is its unit price times its serial count.
    """
    products = (
        db.query(inventory_models.Product)
        .order_by(inventory_models.Product.p_id.asc())
        .all()
    )
    rows = (
        db.query(inventory_models.ProductSerial.product_id, inventory_models.ProductSerial.status)
        .join(
            inventory_models.Product,
            inventory_models.ProductSerial.product_id == inventory_models.Product.id,
        )
        .all()
    )
    counts_by_product = stock.aggregate_stock(rows)

    stats = schemas.DashboardStats()
    totals = stock.StockCounts()
    category_totals: Counter = Counter()

    for product in products:
        counts = counts_by_product.get(product.id, stock.StockCounts())
        totals.total += counts.total
        totals.available += counts.available
        totals.borrowed += counts.borrowed
        totals.repair += counts.repair
        stats.total_value += (product.price or 0.0) * counts.total
        if counts.total:
            category_totals[codes.category_short_label(product.category)] += counts.total

        stats.inventory_summary.append(
            schemas.InventorySummaryItem(
                product_id=product.id,
                p_id=product.p_id,
                name=product.name,
                category=product.category,
                total=counts.total,
                available=counts.available,
                borrowed=counts.borrowed,
                repair=counts.repair,
            )
        )
        if stock.is_low_stock(counts):
            stats.low_stock_items.append(
                schemas.LowStockItem(
                    product_id=product.id,
                    p_id=product.p_id,
                    name=product.name,
                    category=product.category,
                    current=counts.available,
                    total=counts.total,
                )
            )

    stats.total_items = totals.total
    stats.available_count = totals.available
    stats.borrowed_count = totals.borrowed
    stats.repair_count = totals.repair
    stats.category_stats = [
        schemas.NamedCount(name=name, value=value)
        for name, value in category_totals.most_common(TOP_CATEGORIES)
    ]
    stats.status_stats = [
        schemas.NamedCount(name=label, value=getattr(totals, field))
        for label, field in STATUS_LABELS
    ]

    if stats.low_stock_items:
        logger.info(
            "Low stock products found",
            extra={"products": [item.p_id for item in stats.low_stock_items]},
        )
    return stats
