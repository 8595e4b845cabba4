from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, JSON, String, desc

from ...database import Base
from ...utils.identifiers import generate_id


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(Base):
    """
    Append-only change log: one row per INSERT / UPDATE / DELETE of an
    inventory, master-data or transaction record.
    """

    __tablename__ = "audit_events"
    __table_args__ = (
        Index("ix_audit_events_table_record", "table_name", "record_id"),
        Index("ix_audit_events_created_desc", desc("created_at")),
    )

    id = Column(String(36), primary_key=True, default=generate_id, index=True)
    table_name = Column(String(64), nullable=False, index=True)
    record_id = Column(String(36), nullable=False, index=True)
    operation = Column(String(16), nullable=False, index=True)
    old_data = Column(JSON, nullable=True)
    new_data = Column(JSON, nullable=True)
    changed_by_user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    changed_by_email = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)

    def __repr__(self) -> str:
        return f"<AuditEvent id={self.id} {self.operation} {self.table_name}:{self.record_id}>"
