from __future__ import annotations

from fastapi import HTTPException

ALLOWED_TRANSITIONS: dict[str, tuple[str, ...]] = {
    "PENDING": ("PAID", "COMPLETED", "CANCELLED", "EXPIRED"),
    "PAID": ("COMPLETED", "CANCELLED"),
    "COMPLETED": ("CANCELLED",),
    "CANCELLED": ("PENDING",),
    "EXPIRED": ("PENDING",),
}


def check_transition(current: str, new: str) -> None:
    if new == current:
        return
    if new not in ALLOWED_TRANSITIONS.get(current, ()):
        raise HTTPException(
            status_code=400,
            detail=f"Cannot move order from {current} to {new}",
        )
