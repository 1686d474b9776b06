from __future__ import annotations

import re
import unicodedata
from typing import Optional
import uuid

from fastapi import HTTPException


def slugify(value: str) -> str:
    ascii_value = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"\s+", "-", ascii_value.strip().lower())
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    return re.sub(r"-{2,}", "-", slug).strip("-")


def unique_slug(cur, source: str, exclude_id: Optional[uuid.UUID] = None) -> str:
    base = slugify(source)
    if not base:
        raise HTTPException(status_code=400, detail="Slug cannot be empty")
    cur.execute(
        "SELECT slug FROM raffles WHERE (slug = %s OR slug LIKE %s) AND id IS DISTINCT FROM %s::uuid",
        (base, f"{base}-%", exclude_id),
    )
    taken = {row[0] for row in cur.fetchall()}
    if base not in taken:
        return base
    suffix = 2
    while f"{base}-{suffix}" in taken:
        suffix += 1
    return f"{base}-{suffix}"
