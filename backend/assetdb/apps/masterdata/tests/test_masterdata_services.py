from __future__ import annotations

import pytest
from fastapi import HTTPException

from assetdb.apps.audit import models as audit_models
from assetdb.apps.masterdata import schemas, services


def test_department_crud(db_session, admin_user):
    it = services.create_department(db_session, payload=schemas.DepartmentCreate(name=" IT "), actor=admin_user)
    services.create_department(db_session, payload=schemas.DepartmentCreate(name="Accounting"))

    assert it.name == "IT"
    assert [d.name for d in services.list_departments(db_session)] == ["Accounting", "IT"]

    with pytest.raises(HTTPException) as exc:
        services.create_department(db_session, payload=schemas.DepartmentCreate(name="IT"))
    assert exc.value.status_code == 409

    services.delete_department(db_session, department_id=it.id, actor=admin_user)
    assert [d.name for d in services.list_departments(db_session)] == ["Accounting"]

    with pytest.raises(HTTPException) as exc:
        services.delete_department(db_session, department_id=it.id)
    assert exc.value.status_code == 404

    events = (
        db_session.query(audit_models.AuditEvent)
        .filter(audit_models.AuditEvent.record_id == it.id)
        .all()
    )
    assert sorted(e.operation for e in events) == ["DELETE", "INSERT"]


def test_location_crud(db_session):
    location = services.create_location(
        db_session,
        payload=schemas.LocationCreate(name="Warehouse", building=" "),
    )
    services.create_location(db_session, payload=schemas.LocationCreate(name="Archive", building="B2"))

    assert location.building is None
    assert [l.name for l in services.list_locations(db_session)] == ["Archive", "Warehouse"]

    services.delete_location(db_session, location_id=location.id)
    assert [l.name for l in services.list_locations(db_session)] == ["Archive"]


def test_employee_create_update_delete(db_session):
    department = services.create_department(db_session, payload=schemas.DepartmentCreate(name="HR"))
    employee = services.create_employee(
        db_session,
        payload=schemas.EmployeeCreate(emp_code="E002", name="Suda", department_id=department.id),
    )
    services.create_employee(db_session, payload=schemas.EmployeeCreate(emp_code="E001", name="Anan"))

    assert [e.emp_code for e in services.list_employees(db_session)] == ["E001", "E002"]

    with pytest.raises(HTTPException) as exc:
        services.create_employee(db_session, payload=schemas.EmployeeCreate(emp_code="E001", name="Dup"))
    assert exc.value.status_code == 409

    with pytest.raises(HTTPException) as exc:
        services.create_employee(
            db_session,
            payload=schemas.EmployeeCreate(emp_code="E003", name="Nobody", department_id="missing"),
        )
    assert exc.value.status_code == 404

    updated = services.update_employee(
        db_session,
        employee_id=employee.id,
        payload=schemas.EmployeeUpdate(nickname="Da", tel="081-000-0000"),
    )
    assert updated.nickname == "Da"
    assert updated.name == "Suda"
    assert updated.department_id == department.id

    with pytest.raises(HTTPException) as exc:
        services.update_employee(
            db_session,
            employee_id=employee.id,
            payload=schemas.EmployeeUpdate(emp_code="E001"),
        )
    assert exc.value.status_code == 409

    services.delete_employee(db_session, employee_id=employee.id)
    with pytest.raises(HTTPException) as exc:
        services.get_employee(db_session, employee_id=employee.id)
    assert exc.value.status_code == 404
