from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from assetdb.database import Base, enable_sqlite_savepoints, get_db, get_read_db
from assetdb.main import app
from assetdb.apps.accounts import models as account_models
from assetdb.security import get_password_hash

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin-pass-123"
VIEWER_EMAIL = "viewer@example.com"
VIEWER_PASSWORD = "viewer-pass-123"

IT = "ไอที/อิเล็กทรอนิกส์ (IT)"


@pytest.fixture()
def client(tmp_path):
    # File-backed so every request session gets its own connection.
    engine = create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'assets.db'}",
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_savepoints(engine)
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    seed = TestingSession()
    for email, password, role in (
        (ADMIN_EMAIL, ADMIN_PASSWORD, account_models.AccountRole.ADMIN),
        (VIEWER_EMAIL, VIEWER_PASSWORD, account_models.AccountRole.VIEW_ONLY),
    ):
        seed.add(
            account_models.User(
                email=email,
                full_name=email.split("@")[0],
                role=role,
                hashed_password=get_password_hash(password),
            )
        )
    seed.commit()
    seed.close()

    def _session():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _session
    app.dependency_overrides[get_read_db] = _session
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
        engine.dispose()


def _login(client, email, password):
    response = client.post("/auth/login", data={"username": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture()
def admin_headers(client):
    return _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_login_and_me(client, admin_headers):
    bad = client.post("/auth/login", data={"username": ADMIN_EMAIL, "password": "wrong"})
    assert bad.status_code == 401

    me = client.get("/auth/me", headers=admin_headers)
    assert me.status_code == 200
    assert me.json()["email"] == ADMIN_EMAIL
    assert me.json()["role"] == "ADMIN"
    assert me.json()["last_login_at"] is not None


def test_reads_require_token(client):
    assert client.get("/products").status_code == 401


def test_view_only_cannot_write(client):
    headers = _login(client, VIEWER_EMAIL, VIEWER_PASSWORD)
    assert client.get("/products", headers=headers).status_code == 200
    response = client.post("/departments", json={"name": "Ops"}, headers=headers)
    assert response.status_code == 403
    assert client.get("/audit", headers=headers).status_code == 403


def test_borrow_return_flow(client, admin_headers):
    department = client.post("/departments", json={"name": "IT Support"}, headers=admin_headers)
    assert department.status_code == 201
    employee = client.post(
        "/employees",
        json={"emp_code": "E001", "name": "Somchai", "department_id": department.json()["id"]},
        headers=admin_headers,
    )
    assert employee.status_code == 201
    assert employee.json()["department"] == {"name": "IT Support"}

    next_sku = client.get("/products/next-sku", params={"category": IT}, headers=admin_headers)
    assert next_sku.json()["next_sku"] == "IT-0001"

    product = client.post(
        "/products",
        json={"name": "Laptop", "category": IT, "price": 30000, "initial_quantity": 3},
        headers=admin_headers,
    )
    assert product.status_code == 201
    assert product.json()["p_id"] == "IT-0001"

    serials = client.get("/serials", params={"search": "IT-0001"}, headers=admin_headers).json()
    assert [s["serial_code"] for s in serials] == ["IT-0001-0001", "IT-0001-0002", "IT-0001-0003"]
    assert serials[0]["product"]["p_id"] == "IT-0001"
    serial_id = serials[0]["id"]

    both = client.post(
        "/transactions/borrow",
        json={
            "serial_id": serial_id,
            "employee_id": employee.json()["id"],
            "department_id": department.json()["id"],
        },
        headers=admin_headers,
    )
    assert both.status_code == 422

    borrow = client.post(
        "/transactions/borrow",
        json={"serial_id": serial_id, "employee_id": employee.json()["id"]},
        headers=admin_headers,
    )
    assert borrow.status_code == 201, borrow.text
    assert borrow.json()["status"] == "Active"
    assert borrow.json()["serial"]["status"] == "Borrowed"
    assert borrow.json()["employee"]["emp_code"] == "E001"

    again = client.post(
        "/transactions/borrow",
        json={"serial_id": serial_id, "employee_id": employee.json()["id"]},
        headers=admin_headers,
    )
    assert again.status_code == 409

    available = client.get("/serials/available", headers=admin_headers).json()
    assert serial_id not in {s["id"] for s in available}

    products = client.get("/products", headers=admin_headers).json()
    assert products[0]["stock_total"] == 3
    assert products[0]["stock_available"] == 2

    stats = client.get("/dashboard/stats", headers=admin_headers).json()
    assert stats["total_items"] == 3
    assert stats["borrowed_count"] == 1
    assert stats["total_value"] == 90000
    assert stats["low_stock_items"][0]["current"] == 2

    txn_id = borrow.json()["id"]
    returned = client.post(f"/transactions/{txn_id}/return", headers=admin_headers)
    assert returned.status_code == 200
    assert returned.json()["status"] == "Completed"
    assert returned.json()["serial"]["status"] == "Ready"

    twice = client.post(f"/transactions/{txn_id}/return", headers=admin_headers)
    assert twice.status_code == 409
    assert twice.json()["detail"]["code"] == "invalid_transition"

    history = client.get(f"/employees/{employee.json()['id']}/transactions", headers=admin_headers)
    assert [t["id"] for t in history.json()] == [txn_id]
    recent = client.get("/transactions/recent", params={"limit": 5}, headers=admin_headers)
    assert [t["id"] for t in recent.json()] == [txn_id]
    completed = client.get("/transactions", params={"status": "Completed"}, headers=admin_headers)
    assert [t["id"] for t in completed.json()] == [txn_id]

    audit = client.get(
        "/audit",
        params={"table_name": "transactions", "record_id": txn_id},
        headers=admin_headers,
    )
    assert [e["operation"] for e in audit.json()] == ["UPDATE", "INSERT"]


def test_product_update_delete_and_import(client, admin_headers):
    created = client.post(
        "/products",
        json={"name": "Desk", "category": "เฟอร์นิเจอร์ (FR)", "initial_quantity": 1},
        headers=admin_headers,
    ).json()

    updated = client.patch(
        f"/products/{created['id']}",
        json={"quantity": 3, "current_quantity": 1, "notes": "Meeting room"},
        headers=admin_headers,
    )
    assert updated.status_code == 200
    assert updated.json()["quantity"] == 3
    codes = [s["serial_code"] for s in client.get("/serials", headers=admin_headers).json()]
    assert codes == ["FR-0001-0001", "FR-0001-0002", "FR-0001-0003"]

    serial_id = client.get("/serials", headers=admin_headers).json()[0]["id"]
    sticker = client.patch(
        f"/serials/{serial_id}",
        json={"sticker_status": "ติดแล้ว", "sticker_date": "2026-03-01"},
        headers=admin_headers,
    )
    assert sticker.status_code == 200
    assert sticker.json()["sticker_status"] == "ติดแล้ว"

    csv_body = "name,category,price,quantity\nChair,FR,1200,2\n,FR,1,1\n".encode("utf-8")
    imported = client.post(
        "/products/import",
        files={"file": ("products.csv", csv_body, "text/csv")},
        headers=admin_headers,
    )
    assert imported.status_code == 200
    assert imported.json() == {"success": 1, "errors": ["Row 3: name is required"]}
    assert {p["p_id"] for p in client.get("/products", headers=admin_headers).json()} == {
        "FR-0001",
        "FR-0002",
    }

    duplicate = client.post(
        "/products",
        json={"name": "Desk 2", "category": "เฟอร์นิเจอร์ (FR)", "p_id": "FR-0002"},
        headers=admin_headers,
    )
    assert duplicate.status_code == 409

    deleted = client.delete(f"/products/{created['id']}", headers=admin_headers)
    assert deleted.status_code == 204
    remaining = client.get("/serials", headers=admin_headers).json()
    assert [s["serial_code"] for s in remaining] == ["FR-0002-0001", "FR-0002-0002"]
