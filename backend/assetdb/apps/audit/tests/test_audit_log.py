from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from assetdb.apps.accounts.models import AccountRole
from assetdb.apps.audit import models as audit_models
from assetdb.apps.audit import services as audit_services
from assetdb.apps.inventory import models as inventory_models


def test_record_change_copies_actor(db_session, admin_user):
    event = audit_services.record_change(
        db_session,
        table_name="products",
        record_id="p1",
        operation="INSERT",
        actor=admin_user,
        new_data={"name": "Laptop"},
    )

    stored = db_session.query(audit_models.AuditEvent).filter(audit_models.AuditEvent.id == event.id).one()
    assert stored.changed_by_user_id == admin_user.id
    assert stored.changed_by_email == admin_user.email
    assert stored.new_data == {"name": "Laptop"}
    assert stored.old_data is None


def test_record_change_rejects_unknown_operation(db_session):
    with pytest.raises(ValueError):
        audit_services.record_change(db_session, table_name="products", record_id="p1", operation="UPSERT")


def test_snapshot_is_json_safe(db_session):
    product = inventory_models.Product(p_id="IT-0001", name="Laptop", category="IT", price=10.5)
    db_session.add(product)
    db_session.flush()
    serial = inventory_models.ProductSerial(
        product_id=product.id,
        serial_code="IT-0001-0001",
        sticker_date=date(2026, 1, 2),
    )
    db_session.add(serial)
    db_session.flush()

    data = audit_services.snapshot(serial)

    assert data["serial_code"] == "IT-0001-0001"
    assert data["sticker_date"] == "2026-01-02"
    assert isinstance(data["created_at"], str)


def test_snapshot_converts_enums(admin_user):
    assert audit_services.snapshot(admin_user)["role"] == AccountRole.ADMIN.value


def test_list_audit_logs_filters_and_orders(db_session):
    older = audit_models.AuditEvent(
        table_name="products",
        record_id="p1",
        operation="INSERT",
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )
    newer = audit_models.AuditEvent(
        table_name="products",
        record_id="p1",
        operation="UPDATE",
        created_at=datetime(2026, 2, 1, tzinfo=timezone.utc),
    )
    other = audit_models.AuditEvent(table_name="employees", record_id="e1", operation="INSERT")
    db_session.add_all([older, newer, other])
    db_session.flush()

    logs = audit_services.list_audit_logs(db_session, table_name="products", record_id="p1")
    assert [e.operation for e in logs] == ["UPDATE", "INSERT"]
    assert len(audit_services.list_audit_logs(db_session)) == 3
    assert len(audit_services.list_audit_logs(db_session, limit=1)) == 1
