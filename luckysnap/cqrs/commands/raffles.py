from __future__ import annotations

from datetime import datetime, timezone
import logging
import uuid

from fastapi import HTTPException

from luckysnap.db.connection import jsonb, row_dict, run_transaction
from luckysnap.models.schemas import RaffleCreate, RaffleUpdate
from luckysnap.services.serializers import RAFFLE_COLUMNS, raffle_out
from luckysnap.services.slugs import unique_slug

logger = logging.getLogger(__name__)

_JSON_FIELDS = ("gallery", "packs", "bonuses")
_UPDATABLE = (
    "title",
    "description",
    "hero_image",
    "gallery",
    "price",
    "ticket_count",
    "draw_date",
    "packs",
    "bonuses",
    "status",
)
_COLUMN_FOR_FIELD = {"price": "ticket_price"}


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _select_raffle(cur, raffle_id: uuid.UUID) -> dict:
    cur.execute(
        f"""
        SELECT {RAFFLE_COLUMNS},
               (
                   SELECT COUNT(*)
                   FROM order_tickets ot
                   JOIN orders o ON o.id = ot.order_id
                   WHERE ot.raffle_id = r.id
                     AND (o.status <> 'PENDING' OR o.expires_at > now())
               ) AS sold_count
        FROM raffles r
        WHERE r.id = %s
        """,
        (raffle_id,),
    )
    return row_dict(cur)


def create_raffle(payload: RaffleCreate) -> dict:
    draw_date = _as_utc(payload.draw_date)
    if draw_date <= datetime.now(timezone.utc):
        raise HTTPException(status_code=400, detail="Draw date must be in the future")

    def _handler(conn):
        cur = conn.cursor()
        slug = unique_slug(cur, payload.slug or payload.title)
        raffle_id = uuid.uuid4()
        cur.execute(
            """
            INSERT INTO raffles (
                id, title, slug, description, hero_image, gallery, ticket_price,
                ticket_count, draw_date, packs, bonuses, status
            ) VALUES (%s, %s, %s, %s, %s, %s::jsonb, %s, %s, %s, %s::jsonb, %s::jsonb, %s)
            """,
            (
                raffle_id,
                payload.title.strip(),
                slug,
                payload.description,
                payload.hero_image,
                jsonb(payload.gallery),
                payload.price,
                payload.ticket_count,
                draw_date,
                jsonb([pack.model_dump(mode="json") for pack in payload.packs]),
                jsonb(payload.bonuses),
                payload.status,
            ),
        )
        row = _select_raffle(cur, raffle_id)
        cur.close()
        return row

    row = run_transaction(_handler)
    logger.info("Raffle created: %s (%s)", row["title"], row["id"])
    return raffle_out(row)


def update_raffle(raffle_id: uuid.UUID, payload: RaffleUpdate) -> dict:
    data = payload.model_dump(exclude_unset=True)
    if not data:
        raise HTTPException(status_code=400, detail="No fields to update")
    for field in ("title", "price", "ticket_count", "draw_date", "status", "gallery", "packs", "bonuses"):
        if field in data and data[field] is None:
            raise HTTPException(status_code=400, detail=f"{field} cannot be null")

    def _handler(conn):
        cur = conn.cursor()
        cur.execute("SELECT id FROM raffles WHERE id = %s FOR UPDATE", (raffle_id,))
        if not cur.fetchone():
            cur.close()
            raise HTTPException(status_code=404, detail="Raffle not found")
        if "ticket_count" in data:
            cur.execute(
                "SELECT COALESCE(MAX(number), 0) FROM order_tickets WHERE raffle_id = %s",
                (raffle_id,),
            )
            highest = cur.fetchone()[0]
            if data["ticket_count"] < highest:
                cur.close()
                raise HTTPException(
                    status_code=400,
                    detail=f"Ticket count cannot be lower than reserved ticket {highest}",
                )

        set_clauses = []
        params: list = []
        if data.get("slug"):
            set_clauses.append("slug = %s")
            params.append(unique_slug(cur, data["slug"], exclude_id=raffle_id))
        for field in _UPDATABLE:
            if field not in data:
                continue
            column = _COLUMN_FOR_FIELD.get(field, field)
            if field in _JSON_FIELDS:
                set_clauses.append(f"{column} = %s::jsonb")
                params.append(jsonb(data[field]))
            elif field == "draw_date":
                set_clauses.append(f"{column} = %s")
                params.append(_as_utc(data[field]))
            else:
                set_clauses.append(f"{column} = %s")
                params.append(data[field])
        set_clauses.append("updated_at = now()")
        params.append(raffle_id)
        cur.execute(f"UPDATE raffles SET {', '.join(set_clauses)} WHERE id = %s", params)
        row = _select_raffle(cur, raffle_id)
        cur.close()
        return row

    row = run_transaction(_handler)
    logger.info("Raffle %s updated (%s)", raffle_id, ", ".join(sorted(data)))
    return raffle_out(row)


def delete_raffle(raffle_id: uuid.UUID) -> dict:
    def _handler(conn):
        cur = conn.cursor()
        cur.execute("DELETE FROM raffles WHERE id = %s RETURNING id", (raffle_id,))
        row = cur.fetchone()
        cur.close()
        if not row:
            raise HTTPException(status_code=404, detail="Raffle not found")
        return {"success": True, "id": str(row[0])}

    result = run_transaction(_handler)
    logger.info("Raffle %s deleted", raffle_id)
    return result
