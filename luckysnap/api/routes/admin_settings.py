from fastapi import APIRouter, Depends

from luckysnap.api.dependencies import require_admin, require_db
from luckysnap.cqrs.commands import settings as settings_commands
from luckysnap.models.schemas import SettingsOut, SettingsUpdate

router = APIRouter(prefix="/admin/settings", tags=["admin-settings"], dependencies=[Depends(require_admin)])


@router.post("", response_model=SettingsOut)
@router.put("", response_model=SettingsOut)
def update_settings(payload: SettingsUpdate):
    require_db()
    return settings_commands.update_settings(payload)
