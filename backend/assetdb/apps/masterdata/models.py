from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from assetdb.database import Base
from assetdb.utils.identifiers import generate_id


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Department(Base):
    __tablename__ = "departments"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False, unique=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    employees = relationship("Employee", back_populates="department", lazy="selectin")

    def __repr__(self) -> str:
        return f"<Department {self.name}>"


class Location(Base):
    """Where a serialized asset physically sits (room, store, site)."""

    __tablename__ = "locations"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False, index=True)
    building = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    def __repr__(self) -> str:
        return f"<Location {self.name}>"


class Employee(Base):
    """
    A person who can borrow assets. Belongs to at most one department;
    deleting the department leaves the employee without one.
    """

    __tablename__ = "employees"

    id = Column(String(36), primary_key=True, default=generate_id)
    emp_code = Column(String(32), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    nickname = Column(String(128), nullable=True)
    gender = Column(String(32), nullable=True)
    email = Column(String(255), nullable=True)
    tel = Column(String(64), nullable=True)
    location = Column(String(255), nullable=True)
    image_url = Column(Text, nullable=True)
    department_id = Column(
        String(36),
        ForeignKey("departments.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    department = relationship("Department", back_populates="employees", lazy="joined")

    def __repr__(self) -> str:
        return f"<Employee {self.emp_code} {self.name}>"
