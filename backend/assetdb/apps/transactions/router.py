from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from assetdb.database import get_db, get_read_db
from assetdb.security import WRITE_ROLES, get_current_active_user, require_roles
from assetdb.apps.accounts import models as account_models

from . import schemas, services

router = APIRouter(prefix="", tags=["transactions"])


def _transition_conflict(exc: services.TransitionError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={"code": exc.code, "errors": exc.detail},
    )


@router.get("/transactions", response_model=List[schemas.TransactionRead])
def list_transactions(
    status_filter: Optional[schemas.TransactionStatus] = Query(None, alias="status"),
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return services.list_transactions(db, status_filter=status_filter)


@router.get("/transactions/recent", response_model=List[schemas.TransactionRead])
def list_recent_transactions(
    limit: int = Query(5, ge=1, le=100),
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return services.list_recent_transactions(db, limit=limit)


@router.post(
    "/transactions/borrow",
    response_model=schemas.TransactionRead,
    status_code=status.HTTP_201_CREATED,
)
def borrow_serial(
    payload: schemas.BorrowRequest,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_roles(*WRITE_ROLES)),
):
    txn = services.borrow_serial(db, payload=payload, actor=current_user)
    db.commit()
    db.refresh(txn)
    return txn


@router.post("/transactions/{transaction_id}/return", response_model=schemas.TransactionRead)
def return_transaction(
    transaction_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_roles(*WRITE_ROLES)),
):
    try:
        txn = services.return_transaction(db, transaction_id=transaction_id, actor=current_user)
    except services.TransitionError as exc:
        db.rollback()
        raise _transition_conflict(exc)
    db.commit()
    db.refresh(txn)
    return txn


@router.get("/employees/{employee_id}/transactions", response_model=List[schemas.TransactionRead])
def list_employee_transactions(
    employee_id: str,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return services.list_employee_transactions(db, employee_id=employee_id)
