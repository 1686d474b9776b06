from __future__ import annotations

from typing import Optional

from luckysnap.db.connection import fetch_all, fetch_one
from luckysnap.services.serializers import admin_user_out


def list_admin_users() -> list[dict]:
    rows = fetch_all(
        "SELECT id, name, username, role, created_at FROM admin_users ORDER BY created_at ASC"
    )
    return [admin_user_out(row) for row in rows]


def get_session_user(token: str) -> Optional[dict]:
    row = fetch_one(
        """
        SELECT u.id, u.name, u.username, u.role, u.created_at
        FROM admin_sessions s
        JOIN admin_users u ON u.id = s.admin_user_id
        WHERE s.token = %s AND s.expires_at > now()
        """,
        (token,),
    )
    if not row:
        return None
    return admin_user_out(row)
