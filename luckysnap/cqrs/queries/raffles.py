from __future__ import annotations

from datetime import datetime, timezone
import uuid
from typing import Optional

from fastapi import HTTPException

from luckysnap.db.connection import fetch_all, fetch_one
from luckysnap.services.inventory import occupied_tickets
from luckysnap.services.serializers import RAFFLE_COLUMNS, raffle_out

_RAFFLE_SELECT = f"""
    SELECT {RAFFLE_COLUMNS},
           COALESCE(s.sold, 0) AS sold_count
    FROM raffles r
    LEFT JOIN (
        SELECT ot.raffle_id, COUNT(*) AS sold
        FROM order_tickets ot
        JOIN orders o ON o.id = ot.order_id
        WHERE o.status <> 'PENDING' OR o.expires_at > now()
        GROUP BY ot.raffle_id
    ) s ON s.raffle_id = r.id
"""


def _normalize_status(status: Optional[str]) -> Optional[str]:
    if not status:
        return None
    normalized = status.lower().strip()
    if normalized in ("open", "published"):
        return "active"
    if normalized in ("closed", "drawn"):
        return "finished"
    return normalized


def list_raffles(status: Optional[str] = None) -> list[dict]:
    normalized = _normalize_status(status)
    sql = _RAFFLE_SELECT
    params: tuple = ()
    if normalized:
        sql += " WHERE r.status = %s"
        params = (normalized,)
    sql += " ORDER BY r.created_at DESC"
    rows = fetch_all(sql, params)
    return [raffle_out(row) for row in rows]


def get_raffle(raffle_id: uuid.UUID) -> dict:
    row = fetch_one(_RAFFLE_SELECT + " WHERE r.id = %s", (raffle_id,))
    if not row:
        raise HTTPException(status_code=404, detail="Raffle not found")
    return raffle_out(row)


def get_raffle_by_slug(slug: str) -> dict:
    row = fetch_one(_RAFFLE_SELECT + " WHERE r.slug = %s", (slug.strip().lower(),))
    if not row:
        raise HTTPException(status_code=404, detail=f"Raffle with slug {slug} not found")
    return raffle_out(row)


def get_occupied_tickets(raffle_id: uuid.UUID) -> list[int]:
    if not fetch_one("SELECT id FROM raffles WHERE id = %s", (raffle_id,)):
        raise HTTPException(status_code=404, detail="Raffle not found")
    orders = fetch_all(
        """
        SELECT tickets, status, expires_at
        FROM orders
        WHERE raffle_id = %s AND status IN ('PENDING', 'PAID', 'COMPLETED')
        """,
        (raffle_id,),
    )
    return occupied_tickets(orders, datetime.now(timezone.utc))
