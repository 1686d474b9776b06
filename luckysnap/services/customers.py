from __future__ import annotations

import uuid

from fastapi import HTTPException

from luckysnap.db.connection import row_dict
from luckysnap.models.schemas import CustomerIn

_CUSTOMER_FIELDS = "id, name, phone, email, district"


def normalize_phone(phone: str) -> str:
    digits = "".join(ch for ch in phone if ch.isdigit())
    if phone.strip().startswith("+"):
        return f"+{digits}"
    return digits


def get_customer(cur, customer_id: uuid.UUID) -> dict:
    cur.execute(f"SELECT {_CUSTOMER_FIELDS} FROM customers WHERE id = %s", (customer_id,))
    row = row_dict(cur)
    if not row:
        raise HTTPException(status_code=400, detail="Customer not found")
    return row


def get_or_create_customer(cur, customer: CustomerIn) -> dict:
    phone = normalize_phone(customer.phone)
    email = customer.email.lower() if customer.email else None
    cur.execute(f"SELECT {_CUSTOMER_FIELDS} FROM customers WHERE phone = %s", (phone,))
    row = row_dict(cur)
    if row is None and email:
        cur.execute(f"SELECT {_CUSTOMER_FIELDS} FROM customers WHERE email = %s", (email,))
        row = row_dict(cur)
    if row:
        cur.execute(
            f"""
            UPDATE customers
            SET name = %s,
                district = COALESCE(%s, district),
                updated_at = now()
            WHERE id = %s
            RETURNING {_CUSTOMER_FIELDS}
            """,
            (customer.name.strip(), customer.district, row["id"]),
        )
        return row_dict(cur)
    # A concurrent first order with the same phone may insert between the
    # lookup and here; the upsert turns that race into an update.
    cur.execute(
        f"""
        INSERT INTO customers (id, name, phone, email, district)
        VALUES (%s, %s, %s, %s, %s)
        ON CONFLICT (phone) DO UPDATE
        SET name = EXCLUDED.name,
            district = COALESCE(EXCLUDED.district, customers.district),
            updated_at = now()
        RETURNING {_CUSTOMER_FIELDS}
        """,
        (uuid.uuid4(), customer.name.strip(), phone, email, customer.district),
    )
    return row_dict(cur)
