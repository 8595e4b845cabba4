from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class NamedCount(BaseModel):
    name: str
    value: int


class LowStockItem(BaseModel):
    product_id: str
    p_id: str
    name: str
    category: str
    current: int
    total: int


class InventorySummaryItem(BaseModel):
    product_id: str
    p_id: str
    name: str
    category: str
    total: int
    available: int
    borrowed: int
    repair: int


class DashboardStats(BaseModel):
    total_value: float = 0.0
    total_items: int = 0
    available_count: int = 0
    borrowed_count: int = 0
    repair_count: int = 0
    category_stats: List[NamedCount] = Field(default_factory=list)
    status_stats: List[NamedCount] = Field(default_factory=list)
    low_stock_items: List[LowStockItem] = Field(default_factory=list)
    inventory_summary: List[InventorySummaryItem] = Field(default_factory=list)
