from __future__ import annotations

from datetime import datetime
import random
from typing import Iterable, Optional

from luckysnap.services.inventory import PAID_STATUSES, effective_status, is_holding

_SYSTEM_RANDOM = random.SystemRandom()


def ticket_pool(orders: Iterable[dict], now: datetime, paid_only: bool = False) -> list[tuple[int, dict]]:
    pool: list[tuple[int, dict]] = []
    for order in orders:
        if paid_only:
            if effective_status(order, now) not in PAID_STATUSES:
                continue
        elif not is_holding(order, now):
            continue
        for number in order.get("tickets") or []:
            pool.append((number, order))
    pool.sort(key=lambda item: item[0])
    return pool


def pick_winner(
    orders: Iterable[dict],
    now: datetime,
    paid_only: bool = False,
    rng: Optional[random.Random] = None,
) -> Optional[tuple[int, dict]]:
    pool = ticket_pool(orders, now, paid_only=paid_only)
    if not pool:
        return None
    return (rng or _SYSTEM_RANDOM).choice(pool)
