from datetime import datetime, timedelta, timezone
from decimal import Decimal
import uuid

from fastapi import HTTPException
import pytest

import luckysnap.cqrs.commands.orders as orders_commands
import luckysnap.cqrs.queries.orders as orders_queries
from luckysnap.models.schemas import CustomerIn, OrderCreate, OrderUpdate
from conftest import make_order_row, result


def _raffle(raffle_id, status="active", ticket_count=100, packs=None):
    return result(
        {
            "id": raffle_id,
            "title": "Camioneta 4x4",
            "status": status,
            "ticket_count": ticket_count,
            "ticket_price": Decimal("50.00"),
            "packs": packs if packs is not None else [{"q": 3, "price": 120}],
        }
    )


def _customer():
    return result(
        {
            "id": uuid.uuid4(),
            "name": "Ana Torres",
            "phone": "5512345678",
            "email": "ana@example.com",
            "district": "Centro",
        }
    )


def _payload(raffle_id, tickets):
    return OrderCreate(
        raffle_id=raffle_id,
        customer=CustomerIn(name="Ana Torres", phone="55 1234 5678", email="ana@example.com"),
        tickets=tickets,
        payment_method="transfer",
    )


def _order_returning(raffle_id, tickets, total):
    row = make_order_row(raffle_id=raffle_id, tickets=tickets, total_amount=total)
    row.pop("raffle_title")
    return result(row)


def test_create_order_rejects_empty_tickets_without_touching_db(fake_transaction):
    cursor = fake_transaction(orders_commands, [])
    with pytest.raises(HTTPException) as exc:
        orders_commands.create_order(_payload(uuid.uuid4(), []))
    assert exc.value.status_code == 400
    assert cursor.executed == []


def test_create_order_requires_customer():
    payload = OrderCreate(raffle_id=uuid.uuid4(), tickets=[1])
    with pytest.raises(HTTPException) as exc:
        orders_commands.create_order(payload)
    assert exc.value.status_code == 400


def test_create_order_unknown_raffle(fake_transaction):
    fake_transaction(orders_commands, [result(None)])
    with pytest.raises(HTTPException) as exc:
        orders_commands.create_order(_payload(uuid.uuid4(), [1]))
    assert exc.value.status_code == 400
    assert exc.value.detail == "Raffle not found"


def test_create_order_closed_raffle(fake_transaction):
    raffle_id = uuid.uuid4()
    fake_transaction(orders_commands, [_raffle(raffle_id, status="finished")])
    with pytest.raises(HTTPException) as exc:
        orders_commands.create_order(_payload(raffle_id, [1]))
    assert exc.value.status_code == 400


def test_create_order_out_of_range_ticket(fake_transaction):
    raffle_id = uuid.uuid4()
    fake_transaction(orders_commands, [_raffle(raffle_id, ticket_count=10)])
    with pytest.raises(HTTPException) as exc:
        orders_commands.create_order(_payload(raffle_id, [3, 11]))
    assert exc.value.status_code == 400
    assert exc.value.detail["numbers"] == [11]


def test_create_order_reports_taken_tickets(fake_transaction):
    raffle_id = uuid.uuid4()
    fake_transaction(
        orders_commands,
        [
            _raffle(raffle_id),
            None,
            result(None),
            result(None),
            _customer(),
            _order_returning(raffle_id, [10, 20], Decimal("100.00")),
            {"rowcount": 0},
            {"rowcount": 1},
        ],
    )
    with pytest.raises(HTTPException) as exc:
        orders_commands.create_order(_payload(raffle_id, [20, 10]))
    assert exc.value.status_code == 400
    assert exc.value.detail["numbers"] == [10]


def test_create_order_prices_pack_and_reserves_each_ticket(fake_transaction):
    raffle_id = uuid.uuid4()
    cursor = fake_transaction(
        orders_commands,
        [
            _raffle(raffle_id),
            None,
            result(None),
            result(None),
            _customer(),
            _order_returning(raffle_id, [5, 10, 15], Decimal("120.00")),
            {"rowcount": 1},
            {"rowcount": 1},
            {"rowcount": 1},
        ],
    )
    order = orders_commands.create_order(_payload(raffle_id, [15, 5, 10]))

    assert order["tickets"] == [5, 10, 15]
    assert order["status"] == "PENDING"
    assert order["raffle_title"] == "Camioneta 4x4"

    statements = cursor.statements()
    assert "FOR UPDATE" in statements[0]
    assert statements[1].startswith("WITH stale AS")
    inserts = [(sql, params) for sql, params in cursor.executed if sql.startswith("INSERT INTO orders")]
    assert len(inserts) == 1
    params = inserts[0][1]
    assert params[1].startswith("LKSNP-")
    assert params[8] == [5, 10, 15]
    assert params[9] == Decimal("120.00")
    reserved = [params[1] for sql, params in cursor.executed if sql.startswith("INSERT INTO order_tickets")]
    assert reserved == [5, 10, 15]
    lookup = [params for sql, params in cursor.executed if "FROM customers WHERE phone" in sql]
    assert lookup == [("5512345678",)]


def _raffle_lock(status="active", ticket_count=100):
    return result({"id": uuid.uuid4(), "status": status, "ticket_count": ticket_count})


def test_update_order_rejects_invalid_transition(fake_transaction):
    row = make_order_row(status="COMPLETED")
    fake_transaction(orders_commands, [_raffle_lock(), result(row)])
    with pytest.raises(HTTPException) as exc:
        orders_commands.update_order(row["id"], OrderUpdate(status="PENDING"))
    assert exc.value.status_code == 400


def test_update_order_missing(fake_transaction):
    fake_transaction(orders_commands, [result(None)])
    with pytest.raises(HTTPException) as exc:
        orders_commands.update_order(uuid.uuid4(), OrderUpdate(status="PAID"))
    assert exc.value.status_code == 404


def test_update_order_requires_fields():
    with pytest.raises(HTTPException) as exc:
        orders_commands.update_order(uuid.uuid4(), OrderUpdate())
    assert exc.value.status_code == 400


def test_update_order_locks_raffle_before_order(fake_transaction):
    row = make_order_row(status="PENDING")
    cursor = fake_transaction(
        orders_commands, [_raffle_lock(), result(row), None, result(dict(row, status="PAID"))]
    )
    orders_commands.update_order(row["id"], OrderUpdate(status="PAID"))
    statements = cursor.statements()
    assert statements[0].startswith("SELECT id, status, ticket_count FROM raffles")
    assert "FOR UPDATE OF o" in statements[1]


def test_cancel_releases_tickets(fake_transaction):
    row = make_order_row(status="PAID")
    cancelled = dict(row, status="CANCELLED")
    cursor = fake_transaction(
        orders_commands, [_raffle_lock(), result(row), None, None, result(cancelled)]
    )
    order = orders_commands.update_order(row["id"], OrderUpdate(status="CANCELLED"))

    assert order["status"] == "CANCELLED"
    statements = cursor.statements()
    assert statements[2] == "DELETE FROM order_tickets WHERE order_id = %s"
    assert statements[3].startswith("UPDATE orders SET status = %s")
    assert cursor.executed[3][1][0] == "CANCELLED"


def test_reactivation_sweeps_stale_orders_before_reserving(fake_transaction):
    row = make_order_row(status="CANCELLED", tickets=[7])
    pending = dict(row, status="PENDING")
    cursor = fake_transaction(
        orders_commands,
        [
            _raffle_lock(),
            result(row),
            {"columns": ["folio"], "rows": [("LKSNP-STALE",)]},
            {"rowcount": 1},
            None,
            result(pending),
        ],
    )
    order = orders_commands.update_order(row["id"], OrderUpdate(status="PENDING"))

    assert order["status"] == "PENDING"
    statements = cursor.statements()
    assert statements[2].startswith("WITH stale AS")
    assert statements[3].startswith("INSERT INTO order_tickets")
    update_sql, update_params = cursor.executed[4]
    assert "expires_at = %s" in update_sql
    assert update_params[0] == "PENDING"


def test_reactivation_conflict_returns_409(fake_transaction):
    row = make_order_row(status="CANCELLED", tickets=[7, 8])
    fake_transaction(
        orders_commands,
        [_raffle_lock(), result(row), None, {"rowcount": 1}, {"rowcount": 0}],
    )
    with pytest.raises(HTTPException) as exc:
        orders_commands.update_order(row["id"], OrderUpdate(status="PENDING"))
    assert exc.value.status_code == 409
    assert exc.value.detail["numbers"] == [8]


def test_reactivation_rejects_tickets_beyond_shrunk_raffle(fake_transaction):
    row = make_order_row(status="CANCELLED", tickets=[90])
    cursor = fake_transaction(orders_commands, [_raffle_lock(ticket_count=50), result(row)])
    with pytest.raises(HTTPException) as exc:
        orders_commands.update_order(row["id"], OrderUpdate(status="PENDING"))
    assert exc.value.status_code == 400
    assert exc.value.detail["numbers"] == [90]
    assert not any(sql.startswith("INSERT INTO order_tickets") for sql in cursor.statements())


def test_reactivation_rejects_closed_raffle(fake_transaction):
    row = make_order_row(status="EXPIRED", tickets=[3])
    cursor = fake_transaction(orders_commands, [_raffle_lock(status="finished"), result(row)])
    with pytest.raises(HTTPException) as exc:
        orders_commands.update_order(row["id"], OrderUpdate(status="PENDING"))
    assert exc.value.status_code == 400
    assert len(cursor.executed) == 2


def test_order_keeps_submitted_phone_when_matched_by_email(fake_transaction):
    raffle_id = uuid.uuid4()
    stored = {
        "id": uuid.uuid4(),
        "name": "Ana Torres",
        "phone": "5500000000",
        "email": "ana@example.com",
        "district": "Centro",
    }
    cursor = fake_transaction(
        orders_commands,
        [
            _raffle(raffle_id),
            None,
            result(None),
            result(stored),
            result(stored),
            _order_returning(raffle_id, [1], Decimal("50.00")),
            {"rowcount": 1},
        ],
    )
    payload = OrderCreate(
        raffle_id=raffle_id,
        customer=CustomerIn(name="Ana Torres", phone="55 9999 9999", email="ANA@example.com"),
        tickets=[1],
    )
    orders_commands.create_order(payload)

    params = next(p for sql, p in cursor.executed if sql.startswith("INSERT INTO orders"))
    assert params[3] == stored["id"]
    assert params[5] == "5599999999"
    assert params[6] == "ana@example.com"
    assert params[7] == "Centro"


def test_update_by_folio_resolves_order(monkeypatch):
    order_id = uuid.uuid4()
    calls = {}
    monkeypatch.setattr(
        orders_commands, "fetch_one", lambda sql, params=(): {"id": order_id} if params == ("LKSNP-ABC",) else None
    )

    def fake_update(target, payload):
        calls["target"] = target
        return {"id": str(target)}

    monkeypatch.setattr(orders_commands, "update_order", fake_update)
    orders_commands.update_order_by_folio(" lksnp-abc ", OrderUpdate(status="PAID"))
    assert calls["target"] == order_id

    with pytest.raises(HTTPException) as exc:
        orders_commands.update_order_by_folio("missing", OrderUpdate(status="PAID"))
    assert exc.value.status_code == 404


def test_delete_order_missing(fake_transaction):
    fake_transaction(orders_commands, [result(None)])
    with pytest.raises(HTTPException) as exc:
        orders_commands.delete_order(uuid.uuid4())
    assert exc.value.status_code == 404


def test_expire_stale_orders_reports_folios(fake_transaction):
    fake_transaction(orders_commands, [{"columns": ["folio"], "rows": [("LKSNP-A",), ("LKSNP-B",)]}])
    assert orders_commands.expire_stale_orders() == {"expired": 2, "folios": ["LKSNP-A", "LKSNP-B"]}


def test_list_orders_expired_filter_includes_stale_pending(monkeypatch):
    captured = {}
    stale = make_order_row(
        status="PENDING", expires_at=datetime.now(timezone.utc) - timedelta(minutes=5)
    )

    def fake_fetch_all(sql, params=()):
        captured["sql"] = " ".join(sql.split())
        captured["params"] = params
        return [stale]

    monkeypatch.setattr(orders_queries, "fetch_all", fake_fetch_all)
    orders = orders_queries.list_orders(status="expired")

    assert "o.status = 'PENDING' AND o.expires_at <= now()" in captured["sql"]
    assert captured["params"] == ()
    assert [order["status"] for order in orders] == ["EXPIRED"]


def test_list_orders_pending_filter_skips_stale(monkeypatch):
    captured = {}

    def fake_fetch_all(sql, params=()):
        captured["sql"] = " ".join(sql.split())
        captured["params"] = params
        return []

    raffle_id = uuid.uuid4()
    monkeypatch.setattr(orders_queries, "fetch_all", fake_fetch_all)
    orders_queries.list_orders(status="PENDING", raffle_id=raffle_id)

    assert "o.status = 'PENDING' AND o.expires_at > now()" in captured["sql"]
    assert captured["params"] == (raffle_id,)
