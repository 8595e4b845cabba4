from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from assetdb.security import require_roles
from assetdb.apps.accounts.models import AccountRole, User
from assetdb.database import get_read_db

from . import schemas, services


router = APIRouter(prefix="/audit", tags=["audit"])


@router.get("", response_model=List[schemas.AuditEventRead])
def list_audit_logs(
    table_name: Optional[str] = None,
    record_id: Optional[str] = None,
    limit: int = Query(200, ge=1, le=1000),
    db: Session = Depends(get_read_db),
    current_user: User = Depends(require_roles(AccountRole.ADMIN)),
):
    return services.list_audit_logs(db, table_name=table_name, record_id=record_id, limit=limit)
