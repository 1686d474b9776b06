from datetime import datetime, timezone

from fastapi import APIRouter

from luckysnap.core.config import db_configured
from luckysnap.models.schemas import HealthResponse

router = APIRouter(tags=["meta"])

VERSION = "1.0.0"


@router.get("/")
def root():
    return {"ok": True, "service": "Lucky Snap API"}


@router.get("/health", response_model=HealthResponse)
def health():
    return {
        "status": "ok",
        "time": datetime.now(timezone.utc),
        "database": "configured" if db_configured() else "unconfigured",
    }


@router.get("/version")
def version():
    return {"version": VERSION}
