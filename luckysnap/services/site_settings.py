from __future__ import annotations

import copy
from datetime import datetime
from typing import Any, Optional

SETTINGS_ID = "main_settings"

DEFAULT_SETTINGS: dict[str, Any] = {
    "appearance": {
        "siteName": "Lucky Snap",
        "logoUrl": None,
        "logoAnimation": "rotate",
        "colors": {
            "backgroundPrimary": "#111827",
            "backgroundSecondary": "#1f2937",
            "accent": "#ec4899",
            "action": "#0ea5e9",
        },
    },
    "contactInfo": {
        "whatsapp": "5215512345678",
        "email": "contacto@luckysnap.com",
    },
    "socialLinks": {
        "facebookUrl": "https://facebook.com",
        "instagramUrl": "https://instagram.com",
        "twitterUrl": "https://twitter.com",
    },
    "paymentAccounts": [],
    "faqs": [],
}


def default_document() -> dict[str, Any]:
    return copy.deepcopy(DEFAULT_SETTINGS)


def merge_settings(current: dict[str, Any], changes: dict[str, Any]) -> dict[str, Any]:
    """Shallow merge: each section present in ``changes`` replaces the stored one."""
    merged = default_document()
    merged.update(current or {})
    merged.update({key: value for key, value in changes.items() if value is not None})
    return merged


def settings_out(document: dict[str, Any], version: int, updated_at: Optional[datetime]) -> dict:
    merged = merge_settings(document, {})
    return {"id": SETTINGS_ID, **merged, "version": version, "updated_at": updated_at}
