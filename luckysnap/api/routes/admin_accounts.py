import uuid

from fastapi import APIRouter, Depends

from luckysnap.api.dependencies import require_administrator, require_db
from luckysnap.cqrs.commands import auth as auth_commands
from luckysnap.cqrs.queries import auth as auth_queries
from luckysnap.models.schemas import AdminUserCreate, AdminUserOut, AdminUserUpdate, DeleteResponse

router = APIRouter(
    prefix="/admin/accounts",
    tags=["admin-accounts"],
    dependencies=[Depends(require_administrator)],
)


@router.get("", response_model=list[AdminUserOut])
def list_accounts():
    require_db()
    return auth_queries.list_admin_users()


@router.post("", response_model=AdminUserOut, status_code=201)
def create_account(payload: AdminUserCreate):
    require_db()
    return auth_commands.create_admin_user(payload)


@router.patch("/{user_id}", response_model=AdminUserOut)
def update_account(user_id: uuid.UUID, payload: AdminUserUpdate):
    require_db()
    return auth_commands.update_admin_user(user_id, payload)


@router.delete("/{user_id}", response_model=DeleteResponse)
def delete_account(user_id: uuid.UUID):
    require_db()
    return auth_commands.delete_admin_user(user_id)
