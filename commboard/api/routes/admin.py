import logging

from fastapi import APIRouter, Depends

from commboard.api.deps import Services, admin_actor, get_services
from commboard.core.access import Actor
from commboard.core.limits import settings_schema
from commboard.schemas.setting import SettingsRead, SettingUpdate, SettingUpdated

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/settings", response_model=SettingsRead)
async def get_settings(
    actor: Actor = Depends(admin_actor),
    services: Services = Depends(get_services),
):
    """Stored settings plus the allowed range of every editable key."""
    stored = await services.limits.get_settings()
    return SettingsRead(settings=stored, schema=settings_schema())


@router.put("/settings", response_model=SettingUpdated)
async def update_setting(
    body: SettingUpdate,
    actor: Actor = Depends(admin_actor),
    services: Services = Depends(get_services),
):
    key = body.key if isinstance(body.key, str) else None
    value = await services.limits.update_setting(key, body.value)
    logger.info(f"Admin {actor.id} set {key}={value}")
    return SettingUpdated(key=key, value=value)
