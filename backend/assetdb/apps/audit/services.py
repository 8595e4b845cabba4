from __future__ import annotations

import enum
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Session

from . import models

logger = logging.getLogger(__name__)

OPERATIONS = {"INSERT", "UPDATE", "DELETE"}


def _json_value(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, enum.Enum):
        return value.value
    return value


def snapshot(obj: Any) -> Dict[str, Any]:
    """Column values of an ORM instance as a JSON-safe dict."""
    mapper = sa_inspect(obj).mapper
    return {attr.key: _json_value(getattr(obj, attr.key)) for attr in mapper.column_attrs}


def record_change(
    db: Session,
    *,
    table_name: str,
    record_id: str,
    operation: str,
    actor: Any = None,
    old_data: Optional[dict] = None,
    new_data: Optional[dict] = None,
) -> models.AuditEvent:
    """
    Append an audit row in the caller's session.

    `actor` is the acting `accounts.User` (or None for scripts); its id and
    e-mail are copied so the row survives user deletion.
    """
    if operation not in OPERATIONS:
        raise ValueError(f"Unknown audit operation {operation!r}")
    event = models.AuditEvent(
        table_name=table_name,
        record_id=str(record_id),
        operation=operation,
        old_data=old_data,
        new_data=new_data,
        changed_by_user_id=getattr(actor, "id", None),
        changed_by_email=getattr(actor, "email", None),
    )
    db.add(event)
    db.flush()
    logger.debug(
        "Audit event recorded",
        extra={"table_name": table_name, "record_id": str(record_id), "operation": operation},
    )
    return event


def list_audit_logs(
    db: Session,
    *,
    table_name: Optional[str] = None,
    record_id: Optional[str] = None,
    limit: int = 200,
) -> List[models.AuditEvent]:
    query = db.query(models.AuditEvent)
    if table_name:
        query = query.filter(models.AuditEvent.table_name == table_name)
    if record_id:
        query = query.filter(models.AuditEvent.record_id == record_id)
    return (
        query.order_by(models.AuditEvent.created_at.desc(), models.AuditEvent.id.desc())
        .limit(limit)
        .all()
    )
