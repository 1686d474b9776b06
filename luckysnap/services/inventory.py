"""Ticket availability derived from orders.

An order *holds* its ticket numbers while it is PAID or COMPLETED, or while it
is PENDING and its expiry has not passed. Everything else (CANCELLED, EXPIRED,
stale PENDING) frees the numbers again.
"""
from __future__ import annotations

from datetime import datetime
from typing import Iterable

from fastapi import HTTPException

HOLDING_STATUSES = ("PENDING", "PAID", "COMPLETED")
RELEASED_STATUSES = ("CANCELLED", "EXPIRED")
PAID_STATUSES = ("PAID", "COMPLETED")


def effective_status(order: dict, now: datetime) -> str:
    status = order["status"]
    expires_at = order.get("expires_at")
    if status == "PENDING" and expires_at is not None and expires_at <= now:
        return "EXPIRED"
    return status


def is_holding(order: dict, now: datetime) -> bool:
    return effective_status(order, now) in HOLDING_STATUSES


def occupied_tickets(orders: Iterable[dict], now: datetime) -> list[int]:
    occupied: set[int] = set()
    for order in orders:
        if is_holding(order, now):
            occupied.update(order.get("tickets") or [])
    return sorted(occupied)


def validate_ticket_numbers(numbers: list[int], ticket_count: int) -> None:
    if not numbers:
        raise HTTPException(status_code=400, detail="At least one ticket must be selected")
    if len(set(numbers)) != len(numbers):
        raise HTTPException(status_code=400, detail="Duplicate ticket numbers are not allowed")
    out_of_range = sorted(n for n in numbers if n < 1 or n > ticket_count)
    if out_of_range:
        raise HTTPException(
            status_code=400,
            detail={
                "message": f"Ticket numbers must be between 1 and {ticket_count}",
                "numbers": out_of_range,
            },
        )
