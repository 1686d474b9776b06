from __future__ import annotations

from datetime import datetime, timedelta, timezone
import logging
import secrets
import uuid

from fastapi import HTTPException

from luckysnap.core.config import settings
from luckysnap.core.security import hash_password, new_session_token, verify_password
from luckysnap.db.connection import row_dict, run_transaction
from luckysnap.models.schemas import AdminLogin, AdminUserCreate, AdminUserUpdate
from luckysnap.services.serializers import admin_user_out

logger = logging.getLogger(__name__)

_RETURNING = "id, name, username, role, created_at"


def create_admin_user(payload: AdminUserCreate) -> dict:
    username = payload.username.strip().lower()

    def _handler(conn):
        cur = conn.cursor()
        cur.execute("SELECT id FROM admin_users WHERE username = %s", (username,))
        if cur.fetchone():
            cur.close()
            raise HTTPException(status_code=409, detail="Username already registered")
        salt = secrets.token_bytes(16)
        cur.execute(
            f"""
            INSERT INTO admin_users (id, name, username, role, password_hash, password_salt)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING {_RETURNING}
            """,
            (
                uuid.uuid4(),
                payload.name.strip(),
                username,
                payload.role,
                hash_password(payload.password, salt),
                salt.hex(),
            ),
        )
        row = row_dict(cur)
        cur.close()
        return row

    row = run_transaction(_handler)
    logger.info("Admin account %s created with role %s", row["username"], row["role"])
    return admin_user_out(row)


def update_admin_user(user_id: uuid.UUID, payload: AdminUserUpdate) -> dict:
    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    if not data:
        raise HTTPException(status_code=400, detail="No fields to update")

    def _handler(conn):
        cur = conn.cursor()
        set_clauses = []
        params: list = []
        for field in ("name", "role"):
            if field in data:
                set_clauses.append(f"{field} = %s")
                params.append(data[field])
        if "password" in data:
            salt = secrets.token_bytes(16)
            set_clauses.extend(["password_hash = %s", "password_salt = %s"])
            params.extend([hash_password(data["password"], salt), salt.hex()])
        params.append(user_id)
        cur.execute(
            f"UPDATE admin_users SET {', '.join(set_clauses)} WHERE id = %s RETURNING {_RETURNING}",
            params,
        )
        row = row_dict(cur)
        if row and "password" in data:
            cur.execute("DELETE FROM admin_sessions WHERE admin_user_id = %s", (user_id,))
        cur.close()
        if not row:
            raise HTTPException(status_code=404, detail="Admin account not found")
        return row

    return admin_user_out(run_transaction(_handler))


def delete_admin_user(user_id: uuid.UUID) -> dict:
    def _handler(conn):
        cur = conn.cursor()
        cur.execute("DELETE FROM admin_users WHERE id = %s RETURNING id", (user_id,))
        row = cur.fetchone()
        cur.close()
        if not row:
            raise HTTPException(status_code=404, detail="Admin account not found")
        return {"success": True, "id": str(row[0])}

    return run_transaction(_handler)


def login(payload: AdminLogin) -> dict:
    username = payload.username.strip().lower()

    def _handler(conn):
        cur = conn.cursor()
        cur.execute(
            f"SELECT {_RETURNING}, password_hash, password_salt FROM admin_users WHERE username = %s",
            (username,),
        )
        row = row_dict(cur)
        if not row or not verify_password(payload.password, row["password_salt"], row["password_hash"]):
            cur.close()
            raise HTTPException(status_code=401, detail="Invalid credentials")
        token = new_session_token()
        expires_at = datetime.now(timezone.utc) + timedelta(hours=settings.admin_session_hours)
        cur.execute("DELETE FROM admin_sessions WHERE expires_at <= now()")
        cur.execute(
            "INSERT INTO admin_sessions (token, admin_user_id, expires_at) VALUES (%s, %s, %s)",
            (token, row["id"], expires_at),
        )
        cur.close()
        return {"token": token, "expires_at": expires_at, "user": admin_user_out(row)}

    session = run_transaction(_handler)
    logger.info("Admin %s logged in", username)
    return session


def logout(token: str) -> dict:
    def _handler(conn):
        cur = conn.cursor()
        cur.execute("DELETE FROM admin_sessions WHERE token = %s", (token,))
        released = cur.rowcount
        cur.close()
        return {"status": "logged_out", "released": released}

    return run_transaction(_handler)
