import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query

from luckysnap.api.dependencies import require_admin, require_db
from luckysnap.cqrs.commands import raffles as raffles_commands
from luckysnap.cqrs.queries import raffles as raffles_queries
from luckysnap.models.schemas import DeleteResponse, RaffleCreate, RaffleOut, RaffleUpdate

router = APIRouter(
    prefix="/admin/raffles",
    tags=["admin-raffles"],
    dependencies=[Depends(require_admin)],
)


@router.get("", response_model=list[RaffleOut])
def list_raffles(status: Optional[str] = Query(None, description="Filter by status")):
    require_db()
    return raffles_queries.list_raffles(status)


@router.get("/finished", response_model=list[RaffleOut])
def list_finished_raffles():
    require_db()
    return raffles_queries.list_raffles("finished")


@router.get("/{raffle_id}", response_model=RaffleOut)
def get_raffle(raffle_id: uuid.UUID):
    require_db()
    return raffles_queries.get_raffle(raffle_id)


@router.post("", response_model=RaffleOut, status_code=201)
def create_raffle(payload: RaffleCreate):
    require_db()
    return raffles_commands.create_raffle(payload)


@router.patch("/{raffle_id}", response_model=RaffleOut)
def update_raffle(raffle_id: uuid.UUID, payload: RaffleUpdate):
    require_db()
    return raffles_commands.update_raffle(raffle_id, payload)


@router.delete("/{raffle_id}", response_model=DeleteResponse)
def delete_raffle(raffle_id: uuid.UUID):
    require_db()
    return raffles_commands.delete_raffle(raffle_id)
