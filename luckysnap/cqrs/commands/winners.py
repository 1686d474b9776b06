from __future__ import annotations

from datetime import datetime, timezone
import logging
import uuid

from fastapi import HTTPException

from luckysnap.db.connection import fetch_all, fetch_one, row_dict, run_transaction
from luckysnap.models.schemas import WinnerCreate
from luckysnap.services.draw import pick_winner
from luckysnap.services.inventory import is_holding
from luckysnap.services.serializers import ORDER_COLUMNS, WINNER_COLUMNS, order_out, winner_out

logger = logging.getLogger(__name__)


def draw_winner(raffle_id: uuid.UUID, paid_only: bool = False) -> dict:
    """Pick a random occupied ticket of a finished raffle.

    Nothing is persisted: the admin confirms the result through ``save_winner``
    and may draw again before doing so.
    """
    raffle = fetch_one("SELECT id, title, status FROM raffles WHERE id = %s", (raffle_id,))
    if not raffle:
        raise HTTPException(status_code=404, detail="Raffle not found")
    if raffle["status"] != "finished":
        raise HTTPException(status_code=400, detail="Raffle must be finished before drawing")
    orders = fetch_all(
        f"""
        SELECT {ORDER_COLUMNS}, r.title AS raffle_title
        FROM orders o
        JOIN raffles r ON r.id = o.raffle_id
        WHERE o.raffle_id = %s AND o.status IN ('PENDING', 'PAID', 'COMPLETED')
        """,
        (raffle_id,),
    )
    now = datetime.now(timezone.utc)
    picked = pick_winner(orders, now, paid_only=paid_only)
    if picked is None:
        raise HTTPException(status_code=400, detail="No tickets sold for this raffle")
    number, order = picked
    logger.info("Drew ticket %s (order %s) for raffle %s", number, order["folio"], raffle_id)
    return {
        "raffle_id": str(raffle_id),
        "ticket_number": number,
        "order": order_out(order, now),
    }


def save_winner(payload: WinnerCreate) -> dict:
    def _handler(conn):
        cur = conn.cursor()
        try:
            cur.execute(
                "SELECT id, title, draw_date FROM raffles WHERE id = %s",
                (payload.raffle_id,),
            )
            raffle = row_dict(cur)
            if not raffle:
                raise HTTPException(status_code=404, detail="Raffle not found")
            order_id = None
            customer_id = None
            name = payload.name
            if payload.ticket_number is not None:
                cur.execute(
                    """
                    SELECT o.id, o.customer_id, o.customer_name, o.status, o.expires_at
                    FROM order_tickets ot
                    JOIN orders o ON o.id = ot.order_id
                    WHERE ot.raffle_id = %s AND ot.number = %s
                    """,
                    (payload.raffle_id, payload.ticket_number),
                )
                order = row_dict(cur)
                if not order or not is_holding(order, datetime.now(timezone.utc)):
                    raise HTTPException(
                        status_code=400,
                        detail=f"Ticket {payload.ticket_number} is not held by any order",
                    )
                order_id = order["id"]
                customer_id = order.get("customer_id")
                name = name or order["customer_name"]
            if not name:
                raise HTTPException(status_code=400, detail="Winner name is required")
            cur.execute(
                f"""
                INSERT INTO winners (
                    id, raffle_id, order_id, customer_id, ticket_number, name, prize,
                    image_url, raffle_title, draw_date
                ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                RETURNING {WINNER_COLUMNS}
                """,
                (
                    uuid.uuid4(),
                    payload.raffle_id,
                    order_id,
                    customer_id,
                    payload.ticket_number,
                    name.strip(),
                    payload.prize,
                    payload.image_url,
                    payload.raffle_title or raffle["title"],
                    payload.draw_date or raffle.get("draw_date"),
                ),
            )
            return row_dict(cur)
        finally:
            cur.close()

    row = run_transaction(_handler)
    logger.info("Winner saved for raffle %s: %s", row["raffle_id"], row["name"])
    return winner_out(row)


def delete_winner(winner_id: uuid.UUID) -> dict:
    def _handler(conn):
        cur = conn.cursor()
        cur.execute("DELETE FROM winners WHERE id = %s RETURNING id", (winner_id,))
        row = cur.fetchone()
        cur.close()
        if not row:
            raise HTTPException(status_code=404, detail="Winner not found")
        return {"success": True, "id": str(row[0])}

    return run_transaction(_handler)
