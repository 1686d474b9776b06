from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from luckysnap.api.dependencies import admin_token, require_db
from luckysnap.cqrs.commands import auth as auth_commands
from luckysnap.models.schemas import AdminLogin, SessionOut

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=SessionOut)
def login(payload: AdminLogin):
    require_db()
    return auth_commands.login(payload)


@router.post("/logout")
def logout(token: Optional[str] = Depends(admin_token)):
    require_db()
    if not token:
        raise HTTPException(status_code=401, detail="Admin token required")
    return auth_commands.logout(token)
