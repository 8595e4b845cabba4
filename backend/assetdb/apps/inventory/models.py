from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from assetdb.database import Base
from assetdb.utils.identifiers import generate_id


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Initial values written on every newly created serial.
SERIAL_INITIAL_STATUS = "พร้อมใช้"
STICKER_PENDING = "รอติดสติ๊กเกอร์"
STICKER_DONE = "ติดแล้ว"


class Product(Base):
    """
    Item master. `p_id` is the SKU (`PREFIX-NNNN`) where PREFIX is the short
    code embedded in the category label, e.g. "ไอที/อิเล็กทรอนิกส์ (IT)".
    """

    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=generate_id)
    p_id = Column(String(64), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    category = Column(String(255), nullable=False, index=True)
    brand = Column(String(255), nullable=True)
    model = Column(String(255), nullable=True)
    price = Column(Float, nullable=False, default=0.0)
    unit = Column(String(32), nullable=False, default="ชิ้น")
    quantity = Column(Integer, nullable=False, default=0)
    description = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    image_url = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=True, default=_utcnow, onupdate=_utcnow)

    serials = relationship(
        "ProductSerial",
        back_populates="product",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Product {self.p_id} {self.name}>"


class ProductSerial(Base):
    """
    One physical unit of a product. `serial_code` is `{p_id}-NNNN` and is
    never renumbered once issued.
    """

    __tablename__ = "product_serials"
    __table_args__ = (
        Index("ix_product_serials_product_status", "product_id", "status"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    product_id = Column(
        String(36),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    serial_code = Column(String(80), nullable=False, unique=True, index=True)
    status = Column(String(64), nullable=False, default=SERIAL_INITIAL_STATUS, index=True)
    sticker_status = Column(String(64), nullable=False, default=STICKER_PENDING)
    sticker_date = Column(Date, nullable=True)
    sticker_image_url = Column(Text, nullable=True)
    location_id = Column(
        String(36),
        ForeignKey("locations.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    image_url = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    product = relationship("Product", back_populates="serials", lazy="joined")
    location = relationship("Location", lazy="joined")

    def __repr__(self) -> str:
        return f"<ProductSerial {self.serial_code} ({self.status})>"
