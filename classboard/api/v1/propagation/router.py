from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from classboard.api.deps import get_actor_id, get_today
from classboard.db.session import get_db

from .schemas import PropagationReport
from . import service

router = APIRouter(prefix="/api/v1/classes/{class_id}/timetable", tags=["propagation"])


@router.post("/propagate", response_model=PropagationReport)
async def apply_fixed_timetable_for_future(
    class_id: str,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_actor_id),
    today=Depends(get_today),
):
    """Re-sync future days with the template. Manually cleared or annotated slots are skipped."""
    return await service.apply_fixed_timetable_for_future(db, class_id, today, actor_id=actor_id)


@router.post("/daily/reset-future", response_model=PropagationReport)
async def reset_future_daily_announcements(
    class_id: str,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_actor_id),
    today=Depends(get_today),
):
    """Overwrite every future day in the window with the template. Cannot be undone."""
    return await service.reset_future_daily_announcements(db, class_id, today, actor_id=actor_id)
