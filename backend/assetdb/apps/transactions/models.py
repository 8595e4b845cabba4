from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from assetdb.database import Base
from assetdb.utils.identifiers import generate_id


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


STATUS_ACTIVE = "Active"
STATUS_COMPLETED = "Completed"


class Transaction(Base):
    """
    A borrow of one serial by either an employee or a department.
    `Active` until returned, then `Completed` with `return_date` set.
    """

    __tablename__ = "transactions"
    __table_args__ = (
        Index("ix_transactions_serial_status", "serial_id", "status"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    serial_id = Column(
        String(36),
        ForeignKey("product_serials.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    employee_id = Column(
        String(36),
        ForeignKey("employees.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    department_id = Column(
        String(36),
        ForeignKey("departments.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    borrow_date = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    return_date = Column(DateTime(timezone=True), nullable=True)
    status = Column(String(32), nullable=False, default=STATUS_ACTIVE, index=True)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)

    serial = relationship("ProductSerial", lazy="joined")
    employee = relationship("Employee", lazy="joined")
    department = relationship("Department", lazy="joined")

    def __repr__(self) -> str:
        return f"<Transaction {self.id} serial={self.serial_id} ({self.status})>"
