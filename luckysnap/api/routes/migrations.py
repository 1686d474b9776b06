from fastapi import APIRouter, Depends

from luckysnap.api.dependencies import require_administrator, require_db
from luckysnap.cqrs.commands import migrations
from luckysnap.models.schemas import MigrationRunResponse

router = APIRouter(
    prefix="/admin/migrations",
    tags=["migrations"],
    dependencies=[Depends(require_administrator)],
)


@router.post("/run", response_model=MigrationRunResponse)
def run_migrations():
    require_db()
    return migrations.run_migrations()
