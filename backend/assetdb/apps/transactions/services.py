from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from assetdb.apps.audit import services as audit_services
from assetdb.apps.inventory import services as inventory_services
from assetdb.apps.inventory import stock
from assetdb.apps.masterdata import models as masterdata_models
from assetdb.apps.masterdata import services as masterdata_services
from . import models, schemas

logger = logging.getLogger(__name__)

# Serial statuses written by borrow / return. New serials start as
# "พร้อมใช้"; both spellings fall in the available bucket.
SERIAL_BORROWED = "Borrowed"
SERIAL_RETURNED = "Ready"

TRANSITIONS: Dict[str, FrozenSet[str]] = {
    models.STATUS_ACTIVE: frozenset({models.STATUS_COMPLETED}),
    models.STATUS_COMPLETED: frozenset(),
}


@dataclass
class TransitionError(Exception):
    code: str
    detail: List[Dict[str, str]]


def check_transition(from_state: str, to_state: str) -> None:
    if to_state not in TRANSITIONS.get(from_state, frozenset()):
        raise TransitionError(
            code="invalid_transition",
            detail=[{"field": "status", "reason": f"Cannot transition from {from_state} to {to_state}"}],
        )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def get_transaction(db: Session, *, transaction_id: str) -> models.Transaction:
    txn = db.query(models.Transaction).filter(models.Transaction.id == transaction_id).first()
    if not txn:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found.")
    return txn


def _active_transaction_for(db: Session, serial_id: str) -> Optional[models.Transaction]:
    return (
        db.query(models.Transaction)
        .filter(
            models.Transaction.serial_id == serial_id,
            models.Transaction.status == models.STATUS_ACTIVE,
        )
        .first()
    )


def _ensure_borrower(db: Session, payload: schemas.BorrowRequest) -> None:
    if payload.employee_id:
        masterdata_services.get_employee(db, employee_id=payload.employee_id)
        return
    department = (
        db.query(masterdata_models.Department)
        .filter(masterdata_models.Department.id == payload.department_id)
        .first()
    )
    if not department:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Department not found.")


# ---------------------------------------------------------------------------
# BORROW / RETURN
# ---------------------------------------------------------------------------


def borrow_serial(
    db: Session,
    *,
    payload: schemas.BorrowRequest,
    actor: Any = None,
) -> models.Transaction:
    """
    Lend one available serial to an employee or a department.

    Creates the `Active` transaction and flips the serial to "Borrowed" in
    the same session; the caller commits both together.
    """
    serial = inventory_services.get_serial(db, serial_id=payload.serial_id)
    if not stock.is_available(serial.status):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Serial {serial.serial_code} is not available (status: {serial.status}).",
        )
    if _active_transaction_for(db, serial.id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Serial {serial.serial_code} already has an active transaction.",
        )
    _ensure_borrower(db, payload)

    serial_before = audit_services.snapshot(serial)
    txn = models.Transaction(
        serial_id=serial.id,
        employee_id=payload.employee_id or None,
        department_id=payload.department_id or None,
        borrow_date=_utcnow(),
        status=models.STATUS_ACTIVE,
        note=payload.note,
    )
    serial.status = SERIAL_BORROWED
    db.add(txn)
    db.add(serial)
    db.flush()

    audit_services.record_change(
        db,
        table_name="transactions",
        record_id=txn.id,
        operation="INSERT",
        actor=actor,
        new_data=audit_services.snapshot(txn),
    )
    audit_services.record_change(
        db,
        table_name="product_serials",
        record_id=serial.id,
        operation="UPDATE",
        actor=actor,
        old_data=serial_before,
        new_data=audit_services.snapshot(serial),
    )
    logger.info(
        "Serial borrowed",
        extra={
            "transaction_id": txn.id,
            "serial_code": serial.serial_code,
            "employee_id": txn.employee_id,
            "department_id": txn.department_id,
        },
    )
    return txn


def return_transaction(
    db: Session,
    *,
    transaction_id: str,
    actor: Any = None,
) -> models.Transaction:
    txn = get_transaction(db, transaction_id=transaction_id)
    check_transition(txn.status, models.STATUS_COMPLETED)

    txn_before = audit_services.snapshot(txn)
    serial = inventory_services.get_serial(db, serial_id=txn.serial_id)
    serial_before = audit_services.snapshot(serial)

    txn.status = models.STATUS_COMPLETED
    txn.return_date = _utcnow()
    serial.status = SERIAL_RETURNED
    db.add(txn)
    db.add(serial)
    db.flush()

    audit_services.record_change(
        db,
        table_name="transactions",
        record_id=txn.id,
        operation="UPDATE",
        actor=actor,
        old_data=txn_before,
        new_data=audit_services.snapshot(txn),
    )
    audit_services.record_change(
        db,
        table_name="product_serials",
        record_id=serial.id,
        operation="UPDATE",
        actor=actor,
        old_data=serial_before,
        new_data=audit_services.snapshot(serial),
    )
    logger.info(
        "Serial returned",
        extra={"transaction_id": txn.id, "serial_code": serial.serial_code},
    )
    return txn


# ---------------------------------------------------------------------------
# QUERIES
# ---------------------------------------------------------------------------


def _newest_first(query):
    return query.order_by(
        models.Transaction.borrow_date.desc(),
        models.Transaction.created_at.desc(),
        models.Transaction.id.desc(),
    )


def list_transactions(db: Session, *, status_filter: Optional[str] = None) -> List[models.Transaction]:
    query = db.query(models.Transaction)
    if status_filter:
        query = query.filter(models.Transaction.status == status_filter)
    return _newest_first(query).all()


def list_recent_transactions(db: Session, *, limit: int = 5) -> List[models.Transaction]:
    return _newest_first(db.query(models.Transaction)).limit(limit).all()


def list_employee_transactions(db: Session, *, employee_id: str) -> List[models.Transaction]:
    masterdata_services.get_employee(db, employee_id=employee_id)
    query = db.query(models.Transaction).filter(models.Transaction.employee_id == employee_id)
    return _newest_first(query).all()
