from __future__ import annotations

import logging

from fastapi import HTTPException

from luckysnap.db.connection import jsonb, row_dict, run_transaction
from luckysnap.models.schemas import SettingsUpdate
from luckysnap.services.serializers import json_value
from luckysnap.services.site_settings import SETTINGS_ID, merge_settings, settings_out

logger = logging.getLogger(__name__)


def update_settings(payload: SettingsUpdate) -> dict:
    changes = payload.model_dump(mode="json", by_alias=True, exclude_unset=True, exclude={"version"})

    def _handler(conn):
        cur = conn.cursor()
        try:
            cur.execute(
                "SELECT document, version, updated_at FROM settings WHERE id = %s FOR UPDATE",
                (SETTINGS_ID,),
            )
            row = row_dict(cur)
            current = json_value(row["document"], {}) if row else {}
            version = row["version"] if row else 0
            if payload.version is not None and payload.version != version:
                raise HTTPException(
                    status_code=409,
                    detail={
                        "message": "Settings were changed by someone else",
                        "currentVersion": version,
                    },
                )
            merged = merge_settings(current, changes)
            if row and merged == merge_settings(current, {}):
                return merged, version, row["updated_at"], False
            cur.execute(
                """
                INSERT INTO settings (id, document, version, updated_at)
                VALUES (%s, %s::jsonb, 1, now())
                ON CONFLICT (id) DO UPDATE
                SET document = EXCLUDED.document,
                    version = settings.version + 1,
                    updated_at = now()
                RETURNING version, updated_at
                """,
                (SETTINGS_ID, jsonb(merged)),
            )
            new_version, updated_at = cur.fetchone()
            return merged, new_version, updated_at, True
        finally:
            cur.close()

    document, version, updated_at, changed = run_transaction(_handler)
    if changed:
        logger.info("Settings updated to version %s (%s)", version, ", ".join(sorted(changes)) or "no sections")
    return settings_out(document, version, updated_at)
