from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from assetdb.apps.masterdata.schemas import LocationRead


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    category: str = Field(..., min_length=1, max_length=255)
    brand: Optional[str] = None
    model: Optional[str] = None
    price: float = Field(default=0.0, ge=0)
    unit: str = "ชิ้น"
    description: Optional[str] = None
    notes: Optional[str] = None
    image_url: Optional[str] = None


class ProductCreate(ProductBase):
    # Generated from the category when omitted.
    p_id: Optional[str] = Field(default=None, max_length=64)
    initial_quantity: int = Field(default=0, ge=0)


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    category: Optional[str] = Field(default=None, min_length=1, max_length=255)
    brand: Optional[str] = None
    model: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    unit: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    image_url: Optional[str] = None
    quantity: Optional[int] = Field(default=None, ge=0)
    current_quantity: Optional[int] = Field(default=None, ge=0)


class ProductRead(ProductBase):
    id: str
    p_id: str
    quantity: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProductStockRead(ProductRead):
    stock_total: int = 0
    stock_available: int = 0


class ProductRef(BaseModel):
    id: str
    p_id: str
    name: str
    category: str
    price: float
    unit: str

    class Config:
        from_attributes = True


class SerialRead(BaseModel):
    id: str
    product_id: str
    serial_code: str
    status: str
    sticker_status: str
    sticker_date: Optional[date] = None
    sticker_image_url: Optional[str] = None
    location_id: Optional[str] = None
    image_url: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    product: Optional[ProductRef] = None
    location: Optional[LocationRead] = None

    class Config:
        from_attributes = True


class SerialUpdate(BaseModel):
    status: Optional[str] = Field(default=None, min_length=1, max_length=64)
    sticker_status: Optional[str] = Field(default=None, min_length=1, max_length=64)
    sticker_date: Optional[date] = None
    sticker_image_url: Optional[str] = None
    location_id: Optional[str] = None
    image_url: Optional[str] = None
    notes: Optional[str] = None


class NextSkuRead(BaseModel):
    category: str
    prefix: str
    next_sku: str


class ImportResult(BaseModel):
    success: int = 0
    errors: List[str] = Field(default_factory=list)
