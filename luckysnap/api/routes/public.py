import uuid

from fastapi import APIRouter

from luckysnap.api.dependencies import require_db
from luckysnap.cqrs.commands import orders as orders_commands
from luckysnap.cqrs.queries import orders as orders_queries
from luckysnap.cqrs.queries import raffles as raffles_queries
from luckysnap.cqrs.queries import settings as settings_queries
from luckysnap.cqrs.queries import winners as winners_queries
from luckysnap.models.schemas import OrderCreate, OrderOut, RaffleOut, SettingsOut, WinnerOut

router = APIRouter(prefix="/public", tags=["public"])


@router.get("/raffles/active", response_model=list[RaffleOut])
def list_active_raffles():
    require_db()
    return raffles_queries.list_raffles("active")


@router.get("/raffles/slug/{slug}", response_model=RaffleOut)
def get_raffle_by_slug(slug: str):
    require_db()
    return raffles_queries.get_raffle_by_slug(slug)


@router.get("/raffles/{raffle_id}", response_model=RaffleOut)
def get_raffle(raffle_id: uuid.UUID):
    require_db()
    return raffles_queries.get_raffle(raffle_id)


@router.get("/raffles/{raffle_id}/occupied-tickets", response_model=list[int])
def get_occupied_tickets(raffle_id: uuid.UUID):
    require_db()
    return raffles_queries.get_occupied_tickets(raffle_id)


@router.post("/orders", response_model=OrderOut, status_code=201)
def create_order(payload: OrderCreate):
    require_db()
    return orders_commands.create_order(payload)


@router.get("/orders/folio/{folio}", response_model=OrderOut)
def get_order_by_folio(folio: str):
    require_db()
    return orders_queries.get_order_by_folio(folio)


@router.get("/winners", response_model=list[WinnerOut])
def list_winners():
    require_db()
    return winners_queries.list_winners()


@router.get("/settings", response_model=SettingsOut)
def get_settings():
    require_db()
    return settings_queries.get_settings()
