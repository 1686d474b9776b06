import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query

from luckysnap.api.dependencies import require_admin, require_db
from luckysnap.cqrs.commands import winners as winners_commands
from luckysnap.cqrs.queries import winners as winners_queries
from luckysnap.models.schemas import DeleteResponse, DrawRequest, DrawResponse, WinnerCreate, WinnerOut

router = APIRouter(prefix="/admin/winners", tags=["admin-winners"], dependencies=[Depends(require_admin)])


@router.get("", response_model=list[WinnerOut])
def list_winners(raffle_id: Optional[uuid.UUID] = Query(None, alias="raffleId")):
    require_db()
    return winners_queries.list_winners(raffle_id)


@router.post("/draw", response_model=DrawResponse)
def draw_winner(payload: DrawRequest):
    require_db()
    return winners_commands.draw_winner(payload.raffle_id, paid_only=payload.paid_only)


@router.post("", response_model=WinnerOut, status_code=201)
def save_winner(payload: WinnerCreate):
    require_db()
    return winners_commands.save_winner(payload)


@router.delete("/{winner_id}", response_model=DeleteResponse)
def delete_winner(winner_id: uuid.UUID):
    require_db()
    return winners_commands.delete_winner(winner_id)
