from __future__ import annotations

from typing import Any, List

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from assetdb.apps.audit import services as audit_services
from . import models, schemas


def _get_or_404(db: Session, model, record_id: str, label: str):
    obj = db.query(model).filter(model.id == record_id).first()
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found.")
    return obj


# ---------------------------------------------------------------------------
# DEPARTMENTS
# ---------------------------------------------------------------------------


def list_departments(db: Session) -> List[models.Department]:
    return db.query(models.Department).order_by(models.Department.name.asc()).all()


def create_department(
    db: Session,
    *,
    payload: schemas.DepartmentCreate,
    actor: Any = None,
) -> models.Department:
    name = payload.name.strip()
    existing = db.query(models.Department).filter(models.Department.name == name).first()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Department already exists.")
    department = models.Department(name=name)
    db.add(department)
    db.flush()
    audit_services.record_change(
        db,
        table_name="departments",
        record_id=department.id,
        operation="INSERT",
        actor=actor,
        new_data=audit_services.snapshot(department),
    )
    return department


def delete_department(db: Session, *, department_id: str, actor: Any = None) -> None:
    department = _get_or_404(db, models.Department, department_id, "Department")
    before = audit_services.snapshot(department)
    db.delete(department)
    db.flush()
    audit_services.record_change(
        db,
        table_name="departments",
        record_id=department_id,
        operation="DELETE",
        actor=actor,
        old_data=before,
    )


# ---------------------------------------------------------------------------
# LOCATIONS
# ---------------------------------------------------------------------------


def list_locations(db: Session) -> List[models.Location]:
    return db.query(models.Location).order_by(models.Location.name.asc()).all()


def create_location(
    db: Session,
    *,
    payload: schemas.LocationCreate,
    actor: Any = None,
) -> models.Location:
    location = models.Location(
        name=payload.name.strip(),
        building=(payload.building or "").strip() or None,
    )
    db.add(location)
    db.flush()
    audit_services.record_change(
        db,
        table_name="locations",
        record_id=location.id,
        operation="INSERT",
        actor=actor,
        new_data=audit_services.snapshot(location),
    )
    return location


def delete_location(db: Session, *, location_id: str, actor: Any = None) -> None:
    location = _get_or_404(db, models.Location, location_id, "Location")
    before = audit_services.snapshot(location)
    db.delete(location)
    db.flush()
    audit_services.record_change(
        db,
        table_name="locations",
        record_id=location_id,
        operation="DELETE",
        actor=actor,
        old_data=before,
    )


# ---------------------------------------------------------------------------
# EMPLOYEES
# ---------------------------------------------------------------------------


def list_employees(db: Session) -> List[models.Employee]:
    return db.query(models.Employee).order_by(models.Employee.emp_code.asc()).all()


def get_employee(db: Session, *, employee_id: str) -> models.Employee:
    return _get_or_404(db, models.Employee, employee_id, "Employee")


def _ensure_unique_emp_code(db: Session, emp_code: str, *, exclude_id: str | None = None) -> None:
    query = db.query(models.Employee).filter(models.Employee.emp_code == emp_code)
    if exclude_id:
        query = query.filter(models.Employee.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Employee code already exists.")


def _ensure_department(db: Session, department_id: str | None) -> None:
    if department_id:
        _get_or_404(db, models.Department, department_id, "Department")


def create_employee(
    db: Session,
    *,
    payload: schemas.EmployeeCreate,
    actor: Any = None,
) -> models.Employee:
    emp_code = payload.emp_code.strip()
    _ensure_unique_emp_code(db, emp_code)
    _ensure_department(db, payload.department_id)

    data = payload.model_dump()
    data["emp_code"] = emp_code
    data["department_id"] = payload.department_id or None
    employee = models.Employee(**data)
    db.add(employee)
    db.flush()
    audit_services.record_change(
        db,
        table_name="employees",
        record_id=employee.id,
        operation="INSERT",
        actor=actor,
        new_data=audit_services.snapshot(employee),
    )
    return employee


def update_employee(
    db: Session,
    *,
    employee_id: str,
    payload: schemas.EmployeeUpdate,
    actor: Any = None,
) -> models.Employee:
    employee = get_employee(db, employee_id=employee_id)
    before = audit_services.snapshot(employee)

    updates = payload.model_dump(exclude_unset=True)
    if "emp_code" in updates and updates["emp_code"] is not None:
        updates["emp_code"] = updates["emp_code"].strip()
        _ensure_unique_emp_code(db, updates["emp_code"], exclude_id=employee.id)
    if "department_id" in updates:
        updates["department_id"] = updates["department_id"] or None
        _ensure_department(db, updates["department_id"])

    for field, value in updates.items():
        setattr(employee, field, value)
    db.add(employee)
    db.flush()
    audit_services.record_change(
        db,
        table_name="employees",
        record_id=employee.id,
        operation="UPDATE",
        actor=actor,
        old_data=before,
        new_data=audit_services.snapshot(employee),
    )
    return employee


def delete_employee(db: Session, *, employee_id: str, actor: Any = None) -> None:
    employee = get_employee(db, employee_id=employee_id)
    before = audit_services.snapshot(employee)
    db.delete(employee)
    db.flush()
    audit_services.record_change(
        db,
        table_name="employees",
        record_id=employee_id,
        operation="DELETE",
        actor=actor,
        old_data=before,
    )
