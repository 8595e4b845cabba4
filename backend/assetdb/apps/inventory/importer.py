"""
Bulk product import from CSV.

Expected columns (header names are case-insensitive):
    name, category, brand, model, price, unit, quantity, description, notes

Only `name` is required. Each row gets a freshly generated SKU and its
serials; a row that fails is rolled back on its own savepoint and reported
as "Row N: ..." where N is the CSV line number (the header is line 1).
"""

from __future__ import annotations

import logging
from io import BytesIO
from typing import Any, Dict, Optional

import pandas as pd
from fastapi import HTTPException, status
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import codes, schemas, services

logger = logging.getLogger(__name__)

IMPORT_COLUMNS = (
    "name",
    "category",
    "brand",
    "model",
    "price",
    "unit",
    "quantity",
    "description",
    "notes",
)


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _to_float(value: Optional[str], field: str) -> float:
    if value is None:
        return 0.0
    try:
        return float(value.replace(",", ""))
    except ValueError:
        raise ValueError(f"invalid {field} '{value}'")


def _to_int(value: Optional[str], field: str) -> int:
    if value is None:
        return 0
    number = _to_float(value, field)
    if not number.is_integer():
        raise ValueError(f"invalid {field} '{value}'")
    return int(number)


def _row_payload(row: Dict[str, Any]) -> schemas.ProductCreate:
    name = _clean(row.get("name"))
    if not name:
        raise ValueError("name is required")
    return schemas.ProductCreate(
        name=name,
        category=codes.resolve_category(_clean(row.get("category"))),
        brand=_clean(row.get("brand")),
        model=_clean(row.get("model")),
        price=_to_float(_clean(row.get("price")), "price"),
        unit=_clean(row.get("unit")) or "ชิ้น",
        initial_quantity=_to_int(_clean(row.get("quantity")), "quantity"),
        description=_clean(row.get("description")),
        notes=_clean(row.get("notes")),
    )


def _error_message(exc: Exception) -> str:
    if isinstance(exc, HTTPException):
        return str(exc.detail)
    if isinstance(exc, ValidationError):
        return "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
    return str(exc)


def read_import_frame(content: bytes) -> pd.DataFrame:
    try:
        frame = pd.read_csv(
            BytesIO(content),
            dtype=str,
            keep_default_na=False,
            encoding="utf-8-sig",
            skipinitialspace=True,
            skip_blank_lines=False,
        ).fillna("")
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Could not read CSV file: {exc}",
        )

    frame.columns = [str(column).strip().lower() for column in frame.columns]
    if "name" not in frame.columns:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="CSV file must have a 'name' column.",
        )
    # Blank lines are kept while reading so the index tracks file lines.
    filled = frame.apply(lambda column: column.str.strip() != "").any(axis=1)
    frame = frame[filled]
    if frame.empty:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Uploaded file contains no data.")
    return frame.reindex(columns=list(IMPORT_COLUMNS), fill_value="")


def import_products_csv(db: Session, content: bytes, *, actor: Any = None) -> schemas.ImportResult:
    frame = read_import_frame(content)
    result = schemas.ImportResult()

    for idx, row in frame.iterrows():
        row_number = int(idx) + 2
        try:
            payload = _row_payload(row.to_dict())
            with db.begin_nested():
                services.create_product(db, payload=payload, actor=actor)
        except (HTTPException, ValueError, SQLAlchemyError) as exc:
            message = _error_message(exc)
            result.errors.append(f"Row {row_number}: {message}")
            logger.warning(
                "Skipped CSV import row",
                extra={"row": row_number, "error": message},
            )
            continue
        result.success += 1

    logger.info(
        "Finished CSV product import",
        extra={"imported": result.success, "failed": len(result.errors)},
    )
    return result
