from __future__ import annotations

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from assetdb.apps.audit import models as audit_models
from assetdb.apps.inventory import models as inventory_models
from assetdb.apps.inventory import schemas as inventory_schemas
from assetdb.apps.inventory import services as inventory_services
from assetdb.apps.masterdata import models as masterdata_models
from assetdb.apps.transactions import models as transaction_models
from assetdb.apps.transactions import schemas as transaction_schemas
from assetdb.apps.transactions import services as transaction_services


@pytest.fixture()
def serials(db_session):
    product = inventory_services.create_product(
        db_session,
        payload=inventory_schemas.ProductCreate(
            name="Laptop",
            category="ไอที/อิเล็กทรอนิกส์ (IT)",
            initial_quantity=2,
        ),
    )
    db_session.commit()
    return (
        db_session.query(inventory_models.ProductSerial)
        .filter(inventory_models.ProductSerial.product_id == product.id)
        .order_by(inventory_models.ProductSerial.serial_code.asc())
        .all()
    )


@pytest.fixture()
def department(db_session):
    department = masterdata_models.Department(name="IT Support")
    db_session.add(department)
    db_session.commit()
    return department


@pytest.fixture()
def employee(db_session, department):
    employee = masterdata_models.Employee(
        emp_code="E001",
        name="Somchai",
        department_id=department.id,
    )
    db_session.add(employee)
    db_session.commit()
    return employee


def _borrow(db, serial_id, **borrower):
    return transaction_services.borrow_serial(
        db,
        payload=transaction_schemas.BorrowRequest(serial_id=serial_id, **borrower),
    )


def test_borrow_and_return_round_trip(db_session, serials, employee, admin_user):
    serial = serials[0]

    txn = transaction_services.borrow_serial(
        db_session,
        payload=transaction_schemas.BorrowRequest(serial_id=serial.id, employee_id=employee.id, note="Home office"),
        actor=admin_user,
    )
    db_session.commit()

    assert txn.status == "Active"
    assert txn.borrow_date is not None
    assert txn.return_date is None
    assert serial.status == "Borrowed"

    returned = transaction_services.return_transaction(db_session, transaction_id=txn.id, actor=admin_user)
    db_session.commit()

    assert returned.status == "Completed"
    assert returned.return_date is not None
    assert serial.status == "Ready"

    operations = [
        (e.table_name, e.operation)
        for e in db_session.query(audit_models.AuditEvent)
        .filter(audit_models.AuditEvent.changed_by_user_id == admin_user.id)
        .all()
    ]
    assert operations.count(("transactions", "INSERT")) == 1
    assert operations.count(("transactions", "UPDATE")) == 1
    assert operations.count(("product_serials", "UPDATE")) == 2


def test_returned_serial_can_be_borrowed_again(db_session, serials, department):
    txn = _borrow(db_session, serials[0].id, department_id=department.id)
    transaction_services.return_transaction(db_session, transaction_id=txn.id)

    again = _borrow(db_session, serials[0].id, department_id=department.id)

    assert again.status == "Active"
    assert again.department_id == department.id
    assert again.employee_id is None


def test_borrow_rejects_unavailable_serial(db_session, serials, employee):
    serials[0].status = "ส่งซ่อม"
    db_session.flush()

    with pytest.raises(HTTPException) as exc:
        _borrow(db_session, serials[0].id, employee_id=employee.id)
    assert exc.value.status_code == 409


def test_borrow_twice_conflicts(db_session, serials, employee):
    _borrow(db_session, serials[0].id, employee_id=employee.id)

    with pytest.raises(HTTPException) as exc:
        _borrow(db_session, serials[0].id, employee_id=employee.id)
    assert exc.value.status_code == 409


def test_borrow_conflicts_with_stray_active_transaction(db_session, serials, employee):
    db_session.add(
        transaction_models.Transaction(serial_id=serials[1].id, employee_id=employee.id, status="Active")
    )
    db_session.flush()

    with pytest.raises(HTTPException) as exc:
        _borrow(db_session, serials[1].id, employee_id=employee.id)
    assert exc.value.status_code == 409


def test_borrow_unknown_serial_or_borrower_is_404(db_session, serials, employee):
    with pytest.raises(HTTPException) as exc:
        _borrow(db_session, "missing", employee_id=employee.id)
    assert exc.value.status_code == 404

    with pytest.raises(HTTPException) as exc:
        _borrow(db_session, serials[0].id, employee_id="ghost")
    assert exc.value.status_code == 404

    with pytest.raises(HTTPException) as exc:
        _borrow(db_session, serials[0].id, department_id="ghost")
    assert exc.value.status_code == 404
    assert serials[0].status == "พร้อมใช้"


def test_borrow_request_requires_exactly_one_borrower():
    with pytest.raises(ValidationError):
        transaction_schemas.BorrowRequest(serial_id="s1")
    with pytest.raises(ValidationError):
        transaction_schemas.BorrowRequest(serial_id="s1", employee_id="e1", department_id="d1")
    assert transaction_schemas.BorrowRequest(serial_id="s1", employee_id="e1").department_id is None


def test_return_twice_is_invalid_transition(db_session, serials, employee):
    txn = _borrow(db_session, serials[0].id, employee_id=employee.id)
    transaction_services.return_transaction(db_session, transaction_id=txn.id)

    with pytest.raises(transaction_services.TransitionError) as exc:
        transaction_services.return_transaction(db_session, transaction_id=txn.id)
    assert exc.value.code == "invalid_transition"


def test_return_unknown_transaction_is_404(db_session):
    with pytest.raises(HTTPException) as exc:
        transaction_services.return_transaction(db_session, transaction_id="missing")
    assert exc.value.status_code == 404


def test_check_transition_table():
    transaction_services.check_transition("Active", "Completed")
    for from_state, to_state in (("Completed", "Active"), ("Completed", "Completed"), ("Active", "Active")):
        with pytest.raises(transaction_services.TransitionError):
            transaction_services.check_transition(from_state, to_state)


def test_transaction_queries(db_session, serials, employee, department):
    first = _borrow(db_session, serials[0].id, employee_id=employee.id)
    second = _borrow(db_session, serials[1].id, department_id=department.id)
    transaction_services.return_transaction(db_session, transaction_id=first.id)
    db_session.commit()

    all_ids = [t.id for t in transaction_services.list_transactions(db_session)]
    assert set(all_ids) == {first.id, second.id}
    assert [t.id for t in transaction_services.list_transactions(db_session, status_filter="Active")] == [second.id]
    assert [t.id for t in transaction_services.list_transactions(db_session, status_filter="Completed")] == [first.id]
    assert len(transaction_services.list_recent_transactions(db_session, limit=1)) == 1
    assert [t.id for t in transaction_services.list_employee_transactions(db_session, employee_id=employee.id)] == [
        first.id
    ]

    with pytest.raises(HTTPException) as exc:
        transaction_services.list_employee_transactions(db_session, employee_id="ghost")
    assert exc.value.status_code == 404
