from types import SimpleNamespace
import uuid

from fastapi.testclient import TestClient
import pytest

from luckysnap.api import dependencies
from luckysnap.api.routes import health
from luckysnap.cqrs.commands import orders as orders_commands
from luckysnap.cqrs.queries import auth as auth_queries
from luckysnap.cqrs.queries import raffles as raffles_queries
from luckysnap.cqrs.queries import settings as settings_queries
from luckysnap.main import app
from luckysnap.services.serializers import order_out
from conftest import make_order_row

ADMIN = {"X-Admin-Token": "secret"}


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(dependencies, "db_configured", lambda: True)
    monkeypatch.setattr(dependencies, "settings", SimpleNamespace(admin_api_key="secret"))
    monkeypatch.setattr(auth_queries, "get_session_user", lambda token: None)
    return TestClient(app)


def test_health_reports_database_state(client, monkeypatch):
    monkeypatch.setattr(health, "db_configured", lambda: False)
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["database"] == "unconfigured"


def test_version(client):
    assert client.get("/api/version").json() == {"version": "1.0.0"}


def test_occupied_tickets_route(client, monkeypatch):
    monkeypatch.setattr(raffles_queries, "get_occupied_tickets", lambda raffle_id: [3, 5, 10])
    response = client.get(f"/api/public/raffles/{uuid.uuid4()}/occupied-tickets")
    assert response.status_code == 200
    assert response.json() == [3, 5, 10]


def test_create_order_returns_camel_case(client, monkeypatch):
    captured = {}

    def fake_create(payload):
        captured["payload"] = payload
        return order_out(make_order_row(tickets=payload.tickets))

    monkeypatch.setattr(orders_commands, "create_order", fake_create)
    response = client.post(
        "/api/public/orders",
        json={
            "raffleId": str(uuid.uuid4()),
            "customer": {"name": "Ana Torres", "phone": "5512345678"},
            "tickets": [5, 10, 15],
            "paymentMethod": "transfer",
        },
    )
    assert response.status_code == 201
    body = response.json()
    assert body["folio"] == "LKSNP-TEST-AAAA1111"
    assert body["tickets"] == [5, 10, 15]
    assert body["totalAmount"] == "150.00"
    assert "expiresAt" in body
    assert captured["payload"].payment_method == "transfer"


def test_create_order_validation_error(client):
    response = client.post("/api/public/orders", json={"tickets": [1]})
    assert response.status_code == 422
    assert response.json()["type"] == "validation_error"


def test_public_settings_defaults(client, monkeypatch):
    monkeypatch.setattr(settings_queries, "fetch_one", lambda sql, params=(): None)
    response = client.get("/api/public/settings")
    assert response.status_code == 200
    body = response.json()
    assert body["version"] == 0
    assert body["appearance"]["siteName"] == "Lucky Snap"
    assert body["contactInfo"]["email"] == "contacto@luckysnap.com"


def test_routes_require_database(client, monkeypatch):
    monkeypatch.setattr(dependencies, "db_configured", lambda: False)
    response = client.get("/api/public/raffles/active")
    assert response.status_code == 500
    assert response.json()["detail"] == "Database is not configured"


def test_admin_requires_token(client):
    response = client.get("/api/admin/orders")
    assert response.status_code == 401


def test_admin_rejects_unknown_token(client):
    response = client.get("/api/admin/orders", headers={"X-Admin-Token": "nope"})
    assert response.status_code == 401


def test_admin_accepts_api_key(client, monkeypatch):
    monkeypatch.setattr(orders_commands, "expire_stale_orders", lambda raffle_id: {"expired": 0, "folios": []})
    response = client.post("/api/admin/orders/expire", headers=ADMIN)
    assert response.status_code == 200
    assert response.json() == {"expired": 0, "folios": []}


def test_admin_accepts_bearer_session(client, monkeypatch):
    editor = {"id": str(uuid.uuid4()), "name": "Eva", "username": "eva", "role": "Editor"}
    monkeypatch.setattr(auth_queries, "get_session_user", lambda token: editor if token == "tok" else None)
    monkeypatch.setattr(orders_commands, "expire_stale_orders", lambda raffle_id: {"expired": 1, "folios": ["X"]})
    response = client.post("/api/admin/orders/expire", headers={"Authorization": "Bearer tok"})
    assert response.status_code == 200


def test_editor_cannot_manage_accounts(client, monkeypatch):
    editor = {"id": str(uuid.uuid4()), "name": "Eva", "username": "eva", "role": "Editor"}
    monkeypatch.setattr(auth_queries, "get_session_user", lambda token: editor)
    response = client.get("/api/admin/accounts", headers={"X-Admin-Token": "tok"})
    assert response.status_code == 403


def test_unhandled_errors_are_wrapped(client, monkeypatch):
    def boom(raffle_id):
        raise RuntimeError("kaboom")

    monkeypatch.setattr(raffles_queries, "get_occupied_tickets", boom)
    safe_client = TestClient(app, raise_server_exceptions=False)
    response = safe_client.get(f"/api/public/raffles/{uuid.uuid4()}/occupied-tickets")
    assert response.status_code == 500
    assert response.json()["type"] == "server_error"


def test_admin_updates_status_by_folio(client, monkeypatch):
    captured = {}

    def fake_update(folio, payload):
        captured["folio"] = folio
        captured["status"] = payload.status
        return order_out(make_order_row(status=payload.status))

    monkeypatch.setattr(orders_commands, "update_order_by_folio", fake_update)
    response = client.patch(
        "/api/admin/orders/folio/LKSNP-TEST-AAAA1111/status", json={"status": "PAID"}, headers=ADMIN
    )
    assert response.status_code == 200
    assert response.json()["status"] == "PAID"
    assert captured == {"folio": "LKSNP-TEST-AAAA1111", "status": "PAID"}
