from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
import uuid

from fastapi import HTTPException

from luckysnap.db.connection import fetch_all, fetch_one
from luckysnap.services.folio import normalize_folio
from luckysnap.services.serializers import ORDER_COLUMNS, order_out

_ORDER_SELECT = f"""
    SELECT {ORDER_COLUMNS}, r.title AS raffle_title
    FROM orders o
    JOIN raffles r ON r.id = o.raffle_id
"""


def get_order_by_folio(folio: str) -> dict:
    normalized = normalize_folio(folio)
    row = fetch_one(_ORDER_SELECT + " WHERE o.folio = %s", (normalized,))
    if not row:
        raise HTTPException(status_code=404, detail=f"Order with folio {normalized} not found")
    return order_out(row, datetime.now(timezone.utc))


def get_order(order_id: uuid.UUID) -> dict:
    row = fetch_one(_ORDER_SELECT + " WHERE o.id = %s", (order_id,))
    if not row:
        raise HTTPException(status_code=404, detail="Order not found")
    return order_out(row, datetime.now(timezone.utc))


def list_orders(status: Optional[str] = None, raffle_id: Optional[uuid.UUID] = None) -> list[dict]:
    clauses = []
    params: list = []
    if status:
        status = status.upper().strip()
        if status == "EXPIRED":
            clauses.append("(o.status = 'EXPIRED' OR (o.status = 'PENDING' AND o.expires_at <= now()))")
        elif status == "PENDING":
            clauses.append("o.status = 'PENDING' AND o.expires_at > now()")
        else:
            clauses.append("o.status = %s")
            params.append(status)
    if raffle_id:
        clauses.append("o.raffle_id = %s")
        params.append(raffle_id)
    sql = _ORDER_SELECT
    if clauses:
        sql += " WHERE " + " AND ".join(clauses)
    sql += " ORDER BY o.created_at DESC"
    now = datetime.now(timezone.utc)
    return [order_out(row, now) for row in fetch_all(sql, tuple(params))]
