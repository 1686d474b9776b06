from __future__ import annotations

import uuid

from fastapi import HTTPException

from luckysnap.db.connection import fetch_all, fetch_one
from luckysnap.services.serializers import customer_out

_CUSTOMER_SELECT = """
    SELECT c.id, c.name, c.phone, c.email, c.district, c.created_at, c.updated_at,
           COUNT(o.id) AS order_count
    FROM customers c
    LEFT JOIN orders o ON o.customer_id = c.id
"""


def list_customers() -> list[dict]:
    rows = fetch_all(_CUSTOMER_SELECT + " GROUP BY c.id ORDER BY c.created_at DESC")
    return [customer_out(row) for row in rows]


def get_customer(customer_id: uuid.UUID) -> dict:
    row = fetch_one(_CUSTOMER_SELECT + " WHERE c.id = %s GROUP BY c.id", (customer_id,))
    if not row:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer_out(row)
