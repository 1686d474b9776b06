from typing import Optional

from fastapi import Depends, Header, HTTPException

from luckysnap.core.config import db_configured, settings
from luckysnap.core.security import tokens_match
from luckysnap.cqrs.queries import auth as auth_queries

API_KEY_IDENTITY = {"id": None, "name": "API key", "username": "api-key", "role": "Administrator"}


def require_db() -> None:
    if not db_configured():
        raise HTTPException(status_code=500, detail="Database is not configured")


def admin_token(
    x_admin_token: Optional[str] = Header(None),
    authorization: Optional[str] = Header(None),
) -> Optional[str]:
    if x_admin_token:
        return x_admin_token.strip()
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip()
    return None


def require_admin(token: Optional[str] = Depends(admin_token)) -> dict:
    if not token:
        raise HTTPException(status_code=401, detail="Admin token required")
    if tokens_match(token, settings.admin_api_key):
        return API_KEY_IDENTITY
    if not db_configured():
        raise HTTPException(status_code=401, detail="Invalid admin token")
    user = auth_queries.get_session_user(token)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid admin token")
    return user


def require_administrator(admin: dict = Depends(require_admin)) -> dict:
    if admin.get("role") != "Administrator":
        raise HTTPException(status_code=403, detail="Administrator role required")
    return admin
