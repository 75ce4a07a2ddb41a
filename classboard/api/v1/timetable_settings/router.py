from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from classboard.api.deps import get_actor_id, get_today
from classboard.db.session import get_db

from .schemas import SettingsUpdateResult, TimetableSettingsResponse, TimetableSettingsUpdate
from . import service

router = APIRouter(prefix="/api/v1/classes/{class_id}/timetable/settings", tags=["timetable-settings"])


@router.get("", response_model=TimetableSettingsResponse)
async def get_settings(
    class_id: str,
    db: AsyncSession = Depends(get_db),
):
    return await service.get_settings(db, class_id)


@router.patch("", response_model=SettingsUpdateResult)
async def update_settings(
    payload: TimetableSettingsUpdate,
    class_id: str,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_actor_id),
    today=Depends(get_today),
):
    """Change periods/day or active weekdays. Grows or shrinks the fixed timetable to match."""
    return await service.update_settings(db, class_id, payload, today, actor_id=actor_id)
