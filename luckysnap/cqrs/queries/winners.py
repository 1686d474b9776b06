from __future__ import annotations

from typing import Optional
import uuid

from luckysnap.db.connection import fetch_all
from luckysnap.services.serializers import WINNER_COLUMNS, winner_out


def list_winners(raffle_id: Optional[uuid.UUID] = None) -> list[dict]:
    sql = f"SELECT {WINNER_COLUMNS} FROM winners"
    params: tuple = ()
    if raffle_id:
        sql += " WHERE raffle_id = %s"
        params = (raffle_id,)
    sql += " ORDER BY created_at DESC"
    return [winner_out(row) for row in fetch_all(sql, params)]
