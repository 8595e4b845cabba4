from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile, status
from sqlalchemy.orm import Session

from assetdb.database import get_db, get_read_db
from assetdb.security import WRITE_ROLES, get_current_active_user, require_roles
from assetdb.apps.accounts import models as account_models

from . import importer, schemas, services

router = APIRouter(prefix="", tags=["inventory"])


# ---------------------------------------------------------------------------
# PRODUCTS
# ---------------------------------------------------------------------------


@router.get("/products", response_model=List[schemas.ProductStockRead])
def list_products(
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return services.list_products(db)


@router.get("/products/next-sku", response_model=schemas.NextSkuRead)
def get_next_sku(
    category: str = Query(..., min_length=1),
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return services.get_next_sku(db, category=category)


@router.post(
    "/products",
    response_model=schemas.ProductRead,
    status_code=status.HTTP_201_CREATED,
)
def create_product(
    payload: schemas.ProductCreate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_roles(*WRITE_ROLES)),
):
    product = services.create_product(db, payload=payload, actor=current_user)
    db.commit()
    db.refresh(product)
    return product


@router.post("/products/import", response_model=schemas.ImportResult)
async def import_products(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_roles(*WRITE_ROLES)),
):
    """
    Import products from a CSV upload. Rows that fail are reported in
    `errors` and do not prevent the remaining rows from being saved.
    """
    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty.")
    result = importer.import_products_csv(db, content, actor=current_user)
    db.commit()
    return result


@router.patch("/products/{product_id}", response_model=schemas.ProductRead)
def update_product(
    product_id: str,
    payload: schemas.ProductUpdate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_roles(*WRITE_ROLES)),
):
    product = services.update_product(db, product_id=product_id, payload=payload, actor=current_user)
    db.commit()
    db.refresh(product)
    return product


@router.delete("/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_roles(*WRITE_ROLES)),
):
    services.delete_product(db, product_id=product_id, actor=current_user)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# SERIALS
# ---------------------------------------------------------------------------


@router.get("/serials", response_model=List[schemas.SerialRead])
def list_serials(
    search: Optional[str] = Query(None),
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return services.list_serials(db, search=search)


@router.get("/serials/available", response_model=List[schemas.SerialRead])
def list_available_serials(
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return services.list_available_serials(db)


@router.patch("/serials/{serial_id}", response_model=schemas.SerialRead)
def update_serial(
    serial_id: str,
    payload: schemas.SerialUpdate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_roles(*WRITE_ROLES)),
):
    serial = services.update_serial(db, serial_id=serial_id, payload=payload, actor=current_user)
    db.commit()
    db.refresh(serial)
    return serial
