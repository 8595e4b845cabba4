from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from assetdb.apps.audit import services as audit_services
from assetdb.apps.masterdata import models as masterdata_models
from . import codes, models, schemas, stock

logger = logging.getLogger(__name__)

# Columns that may not be cleared through a partial update.
_REQUIRED_PRODUCT_FIELDS = {"name", "category", "price", "unit"}


def get_product(db: Session, *, product_id: str) -> models.Product:
    product = db.query(models.Product).filter(models.Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found.")
    return product


def get_serial(db: Session, *, serial_id: str) -> models.ProductSerial:
    serial = (
        db.query(models.ProductSerial)
        .filter(models.ProductSerial.id == serial_id)
        .first()
    )
    if not serial:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Serial not found.")
    return serial


def stock_counts(db: Session) -> Dict[str, stock.StockCounts]:
    rows = db.query(models.ProductSerial.product_id, models.ProductSerial.status).all()
    return stock.aggregate_stock(rows)


# ---------------------------------------------------------------------------
# PRODUCTS
# ---------------------------------------------------------------------------


def list_products(db: Session) -> List[schemas.ProductStockRead]:
    products = (
        db.query(models.Product)
        .order_by(models.Product.created_at.desc(), models.Product.id.desc())
        .all()
    )
    counts = stock_counts(db)
    items: List[schemas.ProductStockRead] = []
    for product in products:
        item = schemas.ProductStockRead.model_validate(product)
        product_counts = counts.get(product.id)
        if product_counts:
            item.stock_total = product_counts.total
            item.stock_available = product_counts.available
        items.append(item)
    return items


def get_next_sku(db: Session, *, category: str) -> schemas.NextSkuRead:
    return schemas.NextSkuRead(
        category=category,
        prefix=codes.category_prefix(category),
        next_sku=codes.next_product_sku(db, category),
    )


def _add_serials(
    db: Session,
    *,
    product: models.Product,
    start: int,
    count: int,
    actor: Any = None,
) -> List[models.ProductSerial]:
    serials = [
        models.ProductSerial(
            product_id=product.id,
            serial_code=code,
            status=models.SERIAL_INITIAL_STATUS,
            sticker_status=models.STICKER_PENDING,
        )
        for code in codes.serial_codes(product.p_id, start, count)
    ]
    if not serials:
        return serials
    db.add_all(serials)
    db.flush()
    for serial in serials:
        audit_services.record_change(
            db,
            table_name="product_serials",
            record_id=serial.id,
            operation="INSERT",
            actor=actor,
            new_data=audit_services.snapshot(serial),
        )
    logger.info(
        "Created serial batch",
        extra={
            "product_id": product.id,
            "p_id": product.p_id,
            "first_serial": serials[0].serial_code,
            "count": len(serials),
        },
    )
    return serials


def _resolve_p_id(db: Session, *, category: str, requested: Optional[str]) -> str:
    if not requested or not requested.strip():
        return codes.next_product_sku(db, category)

    p_id = requested.strip().upper()
    prefix = codes.category_prefix(category)
    if not codes.is_valid_code(p_id, prefix):
        raise HTTPException(
            status_code=422,
            detail=f"p_id must look like '{prefix}-0001' for category '{category}'.",
        )
    exists = db.query(models.Product.id).filter(models.Product.p_id == p_id).first()
    if exists:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="p_id already exists.")
    return p_id


def create_product(
    db: Session,
    *,
    payload: schemas.ProductCreate,
    actor: Any = None,
) -> models.Product:
    category = payload.category.strip()
    p_id = _resolve_p_id(db, category=category, requested=payload.p_id)

    data = payload.model_dump(exclude={"p_id", "initial_quantity"})
    data["category"] = category
    data["name"] = payload.name.strip()
    product = models.Product(p_id=p_id, quantity=payload.initial_quantity, **data)
    db.add(product)
    db.flush()
    audit_services.record_change(
        db,
        table_name="products",
        record_id=product.id,
        operation="INSERT",
        actor=actor,
        new_data=audit_services.snapshot(product),
    )
    logger.info("Created product", extra={"product_id": product.id, "p_id": p_id})

    _add_serials(db, product=product, start=0, count=payload.initial_quantity, actor=actor)
    return product


def update_product(
    db: Session,
    *,
    product_id: str,
    payload: schemas.ProductUpdate,
    actor: Any = None,
) -> models.Product:
    product = get_product(db, product_id=product_id)
    before = audit_services.snapshot(product)

    updates = payload.model_dump(exclude_unset=True)
    quantity = updates.pop("quantity", None)
    current_quantity = updates.pop("current_quantity", None)

    new_category = (updates.get("category") or "").strip()
    if new_category:
        prefix = codes.category_prefix(new_category)
        if not product.p_id.startswith(f"{prefix}-"):
            raise HTTPException(
                status_code=422,
                detail=f"Category '{new_category}' does not match p_id {product.p_id}.",
            )

    for field, value in updates.items():
        if value is None and field in _REQUIRED_PRODUCT_FIELDS:
            continue
        if isinstance(value, str) and field in {"name", "category"}:
            value = value.strip()
        setattr(product, field, value)

    if quantity is not None:
        if current_quantity is None:
            current_quantity = (
                db.query(models.ProductSerial)
                .filter(models.ProductSerial.product_id == product.id)
                .count()
            )
        added = quantity - current_quantity
        if added > 0:
            start = codes.last_serial_sequence(db, product.id)
            _add_serials(db, product=product, start=start, count=added, actor=actor)
        product.quantity = quantity

    db.add(product)
    db.flush()
    audit_services.record_change(
        db,
        table_name="products",
        record_id=product.id,
        operation="UPDATE",
        actor=actor,
        old_data=before,
        new_data=audit_services.snapshot(product),
    )
    return product


def delete_product(db: Session, *, product_id: str, actor: Any = None) -> None:
    product = get_product(db, product_id=product_id)
    before = audit_services.snapshot(product)
    serial_count = len(product.serials)
    db.delete(product)
    db.flush()
    audit_services.record_change(
        db,
        table_name="products",
        record_id=product_id,
        operation="DELETE",
        actor=actor,
        old_data=before,
    )
    logger.info(
        "Deleted product",
        extra={"product_id": product_id, "p_id": before.get("p_id"), "serials": serial_count},
    )


# ---------------------------------------------------------------------------
# SERIALS
# ---------------------------------------------------------------------------


def list_serials(db: Session, *, search: Optional[str] = None) -> List[models.ProductSerial]:
    query = db.query(models.ProductSerial).join(
        models.Product, models.ProductSerial.product_id == models.Product.id
    )
    term = (search or "").strip()
    if term:
        pattern = f"%{term}%"
        query = query.filter(
            or_(
                models.ProductSerial.serial_code.ilike(pattern),
                models.Product.name.ilike(pattern),
            )
        )
    return query.order_by(models.ProductSerial.serial_code.asc()).all()


def list_available_serials(db: Session) -> List[models.ProductSerial]:
    return (
        db.query(models.ProductSerial)
        .filter(models.ProductSerial.status.in_(stock.AVAILABLE_STATUSES))
        .order_by(models.ProductSerial.serial_code.asc())
        .all()
    )


def update_serial(
    db: Session,
    *,
    serial_id: str,
    payload: schemas.SerialUpdate,
    actor: Any = None,
) -> models.ProductSerial:
    serial = get_serial(db, serial_id=serial_id)
    before = audit_services.snapshot(serial)

    updates = payload.model_dump(exclude_unset=True)
    if "location_id" in updates:
        updates["location_id"] = updates["location_id"] or None
        if updates["location_id"]:
            location = (
                db.query(masterdata_models.Location)
                .filter(masterdata_models.Location.id == updates["location_id"])
                .first()
            )
            if not location:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Location not found.")

    for field, value in updates.items():
        if value is None and field in {"status", "sticker_status"}:
            continue
        setattr(serial, field, value)
    db.add(serial)
    db.flush()
    audit_services.record_change(
        db,
        table_name="product_serials",
        record_id=serial.id,
        operation="UPDATE",
        actor=actor,
        old_data=before,
        new_data=audit_services.snapshot(serial),
    )
    return serial
