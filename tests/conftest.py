from datetime import datetime, timedelta, timezone
from decimal import Decimal
import uuid

import pytest


class FakeCursor:
    """Replays scripted results, one entry per ``execute`` call.

    Each entry is ``None`` (statement without rows) or a dict with optional
    ``columns``, ``rows`` and ``rowcount`` keys.
    """

    def __init__(self, results=()):
        self.results = list(results)
        self.executed = []
        self.description = None
        self.rowcount = -1
        self._rows = []

    def execute(self, sql, params=()):
        self.executed.append((" ".join(sql.split()), params))
        result = self.results.pop(0) if self.results else None
        result = result or {}
        columns = result.get("columns", [])
        self.description = [(column,) for column in columns]
        self._rows = list(result.get("rows", []))
        self.rowcount = result.get("rowcount", len(self._rows))

    def fetchone(self):
        return self._rows.pop(0) if self._rows else None

    def fetchall(self):
        rows, self._rows = self._rows, []
        return rows

    def close(self):
        pass

    def statements(self):
        return [sql for sql, _ in self.executed]


class FakeConn:
    def __init__(self, cursor):
        self._cursor = cursor

    def cursor(self):
        return self._cursor

    def commit(self):
        pass


def result(row: dict = None, rows: list = None, rowcount: int = None) -> dict:
    """Build a FakeCursor entry from dict rows."""
    dict_rows = rows if rows is not None else ([row] if row is not None else [])
    columns = list(dict_rows[0].keys()) if dict_rows else ["id"]
    entry = {"columns": columns, "rows": [tuple(item[c] for c in columns) for item in dict_rows]}
    if rowcount is not None:
        entry["rowcount"] = rowcount
    return entry


def make_order_row(**overrides) -> dict:
    now = datetime.now(timezone.utc)
    row = {
        "id": uuid.uuid4(),
        "folio": "LKSNP-TEST-AAAA1111",
        "raffle_id": uuid.uuid4(),
        "customer_id": uuid.uuid4(),
        "customer_name": "Ana Torres",
        "customer_phone": "5512345678",
        "customer_email": "ana@example.com",
        "customer_district": "Centro",
        "tickets": [5, 10, 15],
        "total_amount": Decimal("150.00"),
        "status": "PENDING",
        "payment_method": "transfer",
        "notes": None,
        "created_at": now,
        "expires_at": now + timedelta(hours=24),
        "updated_at": now,
        "raffle_title": "Camioneta 4x4",
    }
    row.update(overrides)
    return row


@pytest.fixture
def fake_transaction(monkeypatch):
    """Route ``run_transaction`` of a command module through a FakeCursor."""

    def _install(module, results):
        cursor = FakeCursor(results)
        monkeypatch.setattr(module, "run_transaction", lambda handler: handler(FakeConn(cursor)))
        return cursor

    return _install
