from fastapi import HTTPException
import pytest

import luckysnap.cqrs.commands.migrations as migrations
from luckysnap.db.schema import ensure_schema
from conftest import FakeConn, FakeCursor


def test_run_migrations_applies_schema_in_transaction(monkeypatch):
    calls = []
    monkeypatch.setattr(migrations, "run_transaction", lambda handler: calls.append(handler))

    response = migrations.run_migrations()

    assert calls == [ensure_schema]
    assert response["status"] == "ok"


def test_run_migrations_failure_maps_to_500(monkeypatch):
    def boom(handler):
        raise RuntimeError("connection refused")

    monkeypatch.setattr(migrations, "run_transaction", boom)
    with pytest.raises(HTTPException) as exc:
        migrations.run_migrations()
    assert exc.value.status_code == 500


def test_schema_creates_reservation_table():
    cursor = FakeCursor()
    ensure_schema(FakeConn(cursor))
    ddl = " ".join(cursor.statements())
    for table in ("raffles", "customers", "orders", "order_tickets", "winners", "settings"):
        assert f"CREATE TABLE IF NOT EXISTS {table}" in ddl
    assert "PRIMARY KEY (raffle_id, number)" in ddl
