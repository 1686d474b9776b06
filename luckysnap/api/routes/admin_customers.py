import uuid

from fastapi import APIRouter, Depends

from luckysnap.api.dependencies import require_admin, require_db
from luckysnap.cqrs.commands import customers as customers_commands
from luckysnap.cqrs.queries import customers as customers_queries
from luckysnap.models.schemas import CustomerIn, CustomerOut, CustomerUpdate, DeleteResponse

router = APIRouter(prefix="/admin/users", tags=["admin-customers"], dependencies=[Depends(require_admin)])


@router.get("", response_model=list[CustomerOut])
def list_customers():
    require_db()
    return customers_queries.list_customers()


@router.get("/{customer_id}", response_model=CustomerOut)
def get_customer(customer_id: uuid.UUID):
    require_db()
    return customers_queries.get_customer(customer_id)


@router.post("", response_model=CustomerOut, status_code=201)
def create_customer(payload: CustomerIn):
    require_db()
    return customers_commands.create_customer(payload)


@router.patch("/{customer_id}", response_model=CustomerOut)
def update_customer(customer_id: uuid.UUID, payload: CustomerUpdate):
    require_db()
    return customers_commands.update_customer(customer_id, payload)


@router.delete("/{customer_id}", response_model=DeleteResponse)
def delete_customer(customer_id: uuid.UUID):
    require_db()
    return customers_commands.delete_customer(customer_id)
