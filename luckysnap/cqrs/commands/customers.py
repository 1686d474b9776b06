from __future__ import annotations

import logging
from typing import Optional
import uuid

from fastapi import HTTPException

from luckysnap.db.connection import row_dict, run_transaction
from luckysnap.models.schemas import CustomerIn, CustomerUpdate
from luckysnap.services.customers import normalize_phone
from luckysnap.services.serializers import customer_out

logger = logging.getLogger(__name__)

_RETURNING = "id, name, phone, email, district, created_at, updated_at"


def _ensure_unique(cur, phone: Optional[str], email: Optional[str], exclude_id: Optional[uuid.UUID] = None) -> None:
    if phone:
        cur.execute(
            "SELECT 1 FROM customers WHERE phone = %s AND id IS DISTINCT FROM %s::uuid",
            (phone, exclude_id),
        )
        if cur.fetchone():
            raise HTTPException(status_code=409, detail="Phone already registered")
    if email:
        cur.execute(
            "SELECT 1 FROM customers WHERE email = %s AND id IS DISTINCT FROM %s::uuid",
            (email, exclude_id),
        )
        if cur.fetchone():
            raise HTTPException(status_code=409, detail="Email already registered")


def create_customer(payload: CustomerIn) -> dict:
    phone = normalize_phone(payload.phone)
    email = payload.email.lower() if payload.email else None

    def _handler(conn):
        cur = conn.cursor()
        try:
            _ensure_unique(cur, phone, email)
            cur.execute(
                f"""
                INSERT INTO customers (id, name, phone, email, district)
                VALUES (%s, %s, %s, %s, %s)
                RETURNING {_RETURNING}
                """,
                (uuid.uuid4(), payload.name.strip(), phone, email, payload.district),
            )
            return row_dict(cur)
        finally:
            cur.close()

    row = run_transaction(_handler)
    logger.info("Customer created: %s (%s)", row["phone"], row["id"])
    return customer_out(row)


def update_customer(customer_id: uuid.UUID, payload: CustomerUpdate) -> dict:
    data = payload.model_dump(exclude_unset=True)
    if not data:
        raise HTTPException(status_code=400, detail="No fields to update")
    if data.get("phone"):
        data["phone"] = normalize_phone(data["phone"])
    elif "phone" in data:
        raise HTTPException(status_code=400, detail="phone cannot be empty")
    if data.get("email"):
        data["email"] = data["email"].lower()

    def _handler(conn):
        cur = conn.cursor()
        try:
            cur.execute("SELECT id FROM customers WHERE id = %s FOR UPDATE", (customer_id,))
            if not cur.fetchone():
                raise HTTPException(status_code=404, detail="Customer not found")
            _ensure_unique(cur, data.get("phone"), data.get("email"), exclude_id=customer_id)
            set_clauses = []
            params: list = []
            for field in ("name", "phone", "email", "district"):
                if field in data:
                    set_clauses.append(f"{field} = %s")
                    params.append(data[field])
            set_clauses.append("updated_at = now()")
            params.append(customer_id)
            cur.execute(
                f"UPDATE customers SET {', '.join(set_clauses)} WHERE id = %s RETURNING {_RETURNING}",
                params,
            )
            row = row_dict(cur)
            cur.execute("SELECT COUNT(*) FROM orders WHERE customer_id = %s", (customer_id,))
            row["order_count"] = cur.fetchone()[0]
            return row
        finally:
            cur.close()

    return customer_out(run_transaction(_handler))


def delete_customer(customer_id: uuid.UUID) -> dict:
    def _handler(conn):
        cur = conn.cursor()
        cur.execute("DELETE FROM customers WHERE id = %s RETURNING id", (customer_id,))
        row = cur.fetchone()
        cur.close()
        if not row:
            raise HTTPException(status_code=404, detail="Customer not found")
        return {"success": True, "id": str(row[0])}

    result = run_transaction(_handler)
    logger.info("Customer %s deleted", customer_id)
    return result
