import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query

from luckysnap.api.dependencies import require_admin, require_db
from luckysnap.cqrs.commands import orders as orders_commands
from luckysnap.cqrs.queries import orders as orders_queries
from luckysnap.cqrs.queries import stats as stats_queries
from luckysnap.models.schemas import DeleteResponse, ExpireResponse, OrderOut, OrderUpdate, StatsOut

router = APIRouter(prefix="/admin", tags=["admin-orders"], dependencies=[Depends(require_admin)])


@router.get("/stats", response_model=StatsOut)
def dashboard_stats():
    require_db()
    return stats_queries.dashboard_stats()


@router.get("/orders", response_model=list[OrderOut])
def list_orders(
    status: Optional[str] = Query(None, description="Filter by status"),
    raffle_id: Optional[uuid.UUID] = Query(None, alias="raffleId"),
):
    require_db()
    return orders_queries.list_orders(status=status, raffle_id=raffle_id)


@router.post("/orders/expire", response_model=ExpireResponse)
def expire_orders(raffle_id: Optional[uuid.UUID] = Query(None, alias="raffleId")):
    require_db()
    return orders_commands.expire_stale_orders(raffle_id)


@router.patch("/orders/folio/{folio}/status", response_model=OrderOut)
def update_order_status_by_folio(folio: str, payload: OrderUpdate):
    require_db()
    return orders_commands.update_order_by_folio(folio, payload)


@router.get("/orders/{order_id}", response_model=OrderOut)
def get_order(order_id: uuid.UUID):
    require_db()
    return orders_queries.get_order(order_id)


@router.patch("/orders/{order_id}", response_model=OrderOut)
def update_order(order_id: uuid.UUID, payload: OrderUpdate):
    require_db()
    return orders_commands.update_order(order_id, payload)


@router.delete("/orders/{order_id}", response_model=DeleteResponse)
def delete_order(order_id: uuid.UUID):
    require_db()
    return orders_commands.delete_order(order_id)
