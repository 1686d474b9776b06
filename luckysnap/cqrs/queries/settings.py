from __future__ import annotations

from luckysnap.db.connection import fetch_one
from luckysnap.services.serializers import json_value
from luckysnap.services.site_settings import SETTINGS_ID, default_document, settings_out


def get_settings() -> dict:
    row = fetch_one(
        "SELECT document, version, updated_at FROM settings WHERE id = %s",
        (SETTINGS_ID,),
    )
    if not row:
        return settings_out(default_document(), 0, None)
    return settings_out(json_value(row["document"], {}), row["version"], row["updated_at"])
