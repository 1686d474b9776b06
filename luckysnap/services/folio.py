from __future__ import annotations

import secrets
import time
from typing import Optional

from luckysnap.core.config import settings

_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
RANDOM_CHARS = 8


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_ALPHABET[rem])
    return "".join(reversed(digits))


def generate_folio(prefix: Optional[str] = None, now_ms: Optional[int] = None) -> str:
    """Build a shareable order code like ``LKSNP-MH2K8Q1C-7Q4ZK0XA``.

    The timestamp part keeps folios roughly sortable; the random part comes
    from ``secrets`` so folios minted in the same millisecond still differ.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    random_part = "".join(secrets.choice(_ALPHABET) for _ in range(RANDOM_CHARS))
    return f"{prefix or settings.folio_prefix}-{_base36(now_ms)}-{random_part}".upper()


def normalize_folio(folio: str) -> str:
    return folio.strip().upper()
