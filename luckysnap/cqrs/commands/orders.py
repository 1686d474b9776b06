from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Optional
import uuid

from fastapi import HTTPException

from luckysnap.core.config import settings
from luckysnap.db.connection import fetch_one, row_dict, run_transaction
from luckysnap.models.schemas import OrderCreate, OrderUpdate
from luckysnap.services.customers import get_customer, get_or_create_customer, normalize_phone
from luckysnap.services.folio import generate_folio, normalize_folio
from luckysnap.services.inventory import RELEASED_STATUSES, effective_status, validate_ticket_numbers
from luckysnap.services.lifecycle import check_transition
from luckysnap.services.pricing import order_total
from luckysnap.services.serializers import ORDER_COLUMNS, int_list, json_value, order_out

logger = logging.getLogger(__name__)


def _expire_stale(cur, raffle_id: Optional[uuid.UUID] = None) -> list[str]:
    cur.execute(
        """
        WITH stale AS (
            UPDATE orders
            SET status = 'EXPIRED', updated_at = now()
            WHERE status = 'PENDING'
              AND expires_at <= now()
              AND (%s::uuid IS NULL OR raffle_id = %s::uuid)
            RETURNING id, folio
        ), released AS (
            DELETE FROM order_tickets ot
            USING stale
            WHERE ot.order_id = stale.id
            RETURNING ot.order_id
        )
        SELECT folio FROM stale ORDER BY folio
        """,
        (raffle_id, raffle_id),
    )
    return [row[0] for row in cur.fetchall()]


def _reserve(cur, raffle_id: uuid.UUID, order_id: uuid.UUID, numbers: list[int]) -> list[int]:
    conflicts: list[int] = []
    for number in sorted(numbers):
        cur.execute(
            """
            INSERT INTO order_tickets (raffle_id, number, order_id)
            VALUES (%s, %s, %s)
            ON CONFLICT DO NOTHING
            """,
            (raffle_id, number, order_id),
        )
        if cur.rowcount != 1:
            conflicts.append(number)
    return conflicts


def _select_order(cur, order_id: uuid.UUID, lock: bool = False) -> Optional[dict]:
    lock_clause = "FOR UPDATE OF o" if lock else ""
    cur.execute(
        f"""
        SELECT {ORDER_COLUMNS}, r.title AS raffle_title
        FROM orders o
        JOIN raffles r ON r.id = o.raffle_id
        WHERE o.id = %s
        {lock_clause}
        """,
        (order_id,),
    )
    return row_dict(cur)


def create_order(payload: OrderCreate) -> dict:
    if not payload.tickets:
        raise HTTPException(status_code=400, detail="At least one ticket must be selected")
    if payload.customer is None and payload.user_id is None:
        raise HTTPException(status_code=400, detail="Customer data is required")
    numbers = list(payload.tickets)

    def _handler(conn):
        cur = conn.cursor()
        try:
            cur.execute(
                """
                SELECT id, title, status, ticket_count, ticket_price, packs
                FROM raffles
                WHERE id = %s
                FOR UPDATE
                """,
                (payload.raffle_id,),
            )
            raffle = row_dict(cur)
            if not raffle:
                raise HTTPException(status_code=400, detail="Raffle not found")
            if raffle["status"] != "active":
                raise HTTPException(status_code=400, detail="Raffle is not open for orders")
            validate_ticket_numbers(numbers, raffle["ticket_count"])
            expired = _expire_stale(cur, payload.raffle_id)
            if expired:
                logger.info("Expired %s stale orders for raffle %s", len(expired), payload.raffle_id)

            if payload.user_id:
                customer = get_customer(cur, payload.user_id)
                contact = customer
            else:
                customer = get_or_create_customer(cur, payload.customer)
                # The order keeps the contact the buyer submitted, even when
                # the customer record was matched on email with another phone.
                contact = {
                    "name": payload.customer.name.strip(),
                    "phone": normalize_phone(payload.customer.phone),
                    "email": payload.customer.email.lower() if payload.customer.email else None,
                    "district": payload.customer.district or customer.get("district"),
                }

            total = order_total(raffle["ticket_price"], json_value(raffle["packs"], []), len(numbers))
            if payload.total is not None and payload.total != total:
                logger.warning(
                    "Client total %s differs from computed total %s for raffle %s",
                    payload.total,
                    total,
                    payload.raffle_id,
                )
            order_id = uuid.uuid4()
            expires_at = datetime.now(timezone.utc) + settings.order_ttl
            cur.execute(
                f"""
                INSERT INTO orders AS o (
                    id, folio, raffle_id, customer_id, customer_name, customer_phone,
                    customer_email, customer_district, tickets, total_amount, status,
                    payment_method, notes, expires_at
                ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, 'PENDING', %s, %s, %s)
                RETURNING {ORDER_COLUMNS}
                """,
                (
                    order_id,
                    generate_folio(),
                    payload.raffle_id,
                    customer["id"],
                    contact["name"],
                    contact["phone"],
                    contact.get("email"),
                    contact.get("district"),
                    sorted(numbers),
                    total,
                    payload.payment_method,
                    payload.notes,
                    expires_at,
                ),
            )
            row = row_dict(cur)
            conflicts = _reserve(cur, payload.raffle_id, order_id, numbers)
            if conflicts:
                raise HTTPException(
                    status_code=400,
                    detail={
                        "message": "Some tickets are no longer available",
                        "numbers": conflicts,
                    },
                )
            row["raffle_title"] = raffle["title"]
            return row
        finally:
            cur.close()

    row = run_transaction(_handler)
    logger.info(
        "Order %s created for raffle %s: %s tickets, total %s",
        row["folio"],
        row["raffle_id"],
        len(row["tickets"]),
        row["total_amount"],
    )
    return order_out(row)


def update_order(order_id: uuid.UUID, payload: OrderUpdate) -> dict:
    data = payload.model_dump(exclude_unset=True)
    if not data:
        raise HTTPException(status_code=400, detail="No fields to update")
    if "status" in data and data["status"] is None:
        raise HTTPException(status_code=400, detail="status cannot be null")

    def _handler(conn):
        cur = conn.cursor()
        try:
            # Raffle before order, the same lock order as create_order.
            cur.execute(
                """
                SELECT id, status, ticket_count
                FROM raffles
                WHERE id = (SELECT raffle_id FROM orders WHERE id = %s)
                FOR UPDATE
                """,
                (order_id,),
            )
            raffle = row_dict(cur)
            if not raffle:
                raise HTTPException(status_code=404, detail="Order not found")
            row = _select_order(cur, order_id, lock=True)
            if not row:
                raise HTTPException(status_code=404, detail="Order not found")
            now = datetime.now(timezone.utc)
            current = effective_status(row, now)
            if current != row["status"]:
                cur.execute("DELETE FROM order_tickets WHERE order_id = %s", (order_id,))
            new_status = data.get("status", current)
            check_transition(current, new_status)

            set_clauses = ["status = %s"]
            params: list = [new_status]
            if new_status != current:
                if new_status in RELEASED_STATUSES:
                    cur.execute("DELETE FROM order_tickets WHERE order_id = %s", (order_id,))
                elif current in RELEASED_STATUSES:
                    if raffle["status"] != "active":
                        raise HTTPException(status_code=400, detail="Raffle is not open for orders")
                    tickets = int_list(row["tickets"])
                    validate_ticket_numbers(tickets, raffle["ticket_count"])
                    _expire_stale(cur, row["raffle_id"])
                    conflicts = _reserve(cur, row["raffle_id"], order_id, tickets)
                    if conflicts:
                        raise HTTPException(
                            status_code=409,
                            detail={
                                "message": "Tickets were taken by another order",
                                "numbers": conflicts,
                            },
                        )
                    if new_status == "PENDING":
                        set_clauses.append("expires_at = %s")
                        params.append(now + settings.order_ttl)
            for field in ("payment_method", "notes"):
                if field in data:
                    set_clauses.append(f"{field} = %s")
                    params.append(data[field])
            set_clauses.append("updated_at = now()")
            params.append(order_id)
            cur.execute(f"UPDATE orders SET {', '.join(set_clauses)} WHERE id = %s", params)
            updated = _select_order(cur, order_id)
            return current, updated
        finally:
            cur.close()

    previous, row = run_transaction(_handler)
    if previous != row["status"]:
        logger.info("Order %s moved from %s to %s", row["folio"], previous, row["status"])
    return order_out(row)


def update_order_by_folio(folio: str, payload: OrderUpdate) -> dict:
    normalized = normalize_folio(folio)
    row = fetch_one("SELECT id FROM orders WHERE folio = %s", (normalized,))
    if not row:
        raise HTTPException(status_code=404, detail=f"Order with folio {normalized} not found")
    return update_order(row["id"], payload)


def delete_order(order_id: uuid.UUID) -> dict:
    def _handler(conn):
        cur = conn.cursor()
        cur.execute("DELETE FROM orders WHERE id = %s RETURNING id, folio", (order_id,))
        row = cur.fetchone()
        cur.close()
        if not row:
            raise HTTPException(status_code=404, detail="Order not found")
        return row

    order_id_value, folio = run_transaction(_handler)
    logger.info("Order %s deleted", folio)
    return {"success": True, "id": str(order_id_value)}


def expire_stale_orders(raffle_id: Optional[uuid.UUID] = None) -> dict:
    def _handler(conn):
        cur = conn.cursor()
        folios = _expire_stale(cur, raffle_id)
        cur.close()
        return folios

    folios = run_transaction(_handler)
    if folios:
        logger.info("Expired %s stale orders", len(folios))
    return {"expired": len(folios), "folios": folios}
