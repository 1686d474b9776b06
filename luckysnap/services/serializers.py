from __future__ import annotations

from datetime import datetime
import json
from typing import Any, Optional

from luckysnap.services.inventory import effective_status

RAFFLE_COLUMNS = """
    r.id, r.title, r.slug, r.description, r.hero_image, r.gallery, r.ticket_price,
    r.ticket_count, r.draw_date, r.packs, r.bonuses, r.status, r.created_at, r.updated_at
"""

ORDER_COLUMNS = """
    o.id, o.folio, o.raffle_id, o.customer_id, o.customer_name, o.customer_phone,
    o.customer_email, o.customer_district, o.tickets, o.total_amount, o.status,
    o.payment_method, o.notes, o.created_at, o.expires_at, o.updated_at
"""

WINNER_COLUMNS = """
    id, raffle_id, order_id, customer_id, ticket_number, name, prize, image_url,
    raffle_title, draw_date, created_at
"""


def json_value(value: Any, default: Any) -> Any:
    if value is None:
        return default
    if isinstance(value, (bytes, str)):
        return json.loads(value)
    return value


def int_list(value: Any) -> list[int]:
    if value is None:
        return []
    if isinstance(value, str):
        raw = value.strip("{}")
        return [int(item) for item in raw.split(",") if item]
    return [int(item) for item in value]


def _str_or_none(value: Any) -> Optional[str]:
    return str(value) if value else None


def raffle_out(row: dict) -> dict:
    return {
        "id": str(row["id"]),
        "title": row["title"],
        "slug": row["slug"],
        "description": row.get("description"),
        "hero_image": row.get("hero_image"),
        "gallery": json_value(row.get("gallery"), []),
        "price": row["ticket_price"],
        "ticket_count": row["ticket_count"],
        "sold_count": row.get("sold_count", 0) or 0,
        "draw_date": row.get("draw_date"),
        "packs": json_value(row.get("packs"), []),
        "bonuses": json_value(row.get("bonuses"), []),
        "status": row["status"],
        "created_at": row["created_at"],
        "updated_at": row["updated_at"],
    }


def order_out(row: dict, now: Optional[datetime] = None) -> dict:
    tickets = int_list(row.get("tickets"))
    status = row["status"] if now is None else effective_status(
        {"status": row["status"], "expires_at": row["expires_at"]}, now
    )
    return {
        "id": str(row["id"]),
        "folio": row["folio"],
        "raffle_id": str(row["raffle_id"]),
        "raffle_title": row.get("raffle_title"),
        "customer": {
            "id": _str_or_none(row.get("customer_id")),
            "name": row["customer_name"],
            "phone": row["customer_phone"],
            "email": row.get("customer_email"),
            "district": row.get("customer_district"),
        },
        "tickets": sorted(tickets),
        "total_amount": row["total_amount"],
        "status": status,
        "payment_method": row.get("payment_method"),
        "notes": row.get("notes"),
        "created_at": row["created_at"],
        "expires_at": row["expires_at"],
        "updated_at": row["updated_at"],
    }


def winner_out(row: dict) -> dict:
    return {
        "id": str(row["id"]),
        "raffle_id": str(row["raffle_id"]),
        "order_id": _str_or_none(row.get("order_id")),
        "customer_id": _str_or_none(row.get("customer_id")),
        "ticket_number": row.get("ticket_number"),
        "name": row["name"],
        "prize": row["prize"],
        "image_url": row.get("image_url"),
        "raffle_title": row["raffle_title"],
        "draw_date": row.get("draw_date"),
        "created_at": row["created_at"],
    }


def customer_out(row: dict) -> dict:
    return {
        "id": str(row["id"]),
        "name": row["name"],
        "phone": row["phone"],
        "email": row.get("email"),
        "district": row.get("district"),
        "order_count": row.get("order_count", 0) or 0,
        "created_at": row["created_at"],
        "updated_at": row["updated_at"],
    }


def admin_user_out(row: dict) -> dict:
    return {
        "id": str(row["id"]),
        "name": row["name"],
        "username": row["username"],
        "role": row["role"],
        "created_at": row["created_at"],
    }
