from typing import List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from classboard.api.deps import get_actor_id, get_today
from classboard.core.enums import DayOfWeek
from classboard.db.session import get_db

from .schemas import FixedSlotIn, FixedSlotResponse, FixedSlotUpdate, FixedTimetableBatch, FixedTimetableWriteResult
from . import service

router = APIRouter(prefix="/api/v1/classes/{class_id}/timetable/fixed", tags=["fixed-timetable"])


@router.get("", response_model=List[FixedSlotResponse])
async def get_fixed_timetable(
    class_id: str,
    db: AsyncSession = Depends(get_db),
):
    return await service.get_fixed_timetable(db, class_id)


@router.put("", response_model=FixedTimetableWriteResult)
async def batch_update_fixed_timetable(
    payload: FixedTimetableBatch,
    class_id: str,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_actor_id),
    today=Depends(get_today),
):
    """Save the whole grid. Only changed slots are written; unchanged input is a no-op."""
    return await service.batch_update_fixed_timetable(db, class_id, payload.slots, today, actor_id=actor_id)


@router.put("/{day}/{period}", response_model=FixedTimetableWriteResult)
async def update_fixed_slot(
    payload: FixedSlotUpdate,
    class_id: str,
    day: DayOfWeek,
    period: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_actor_id),
    today=Depends(get_today),
):
    slot = FixedSlotIn(day=day, period=period, subject_id=payload.subject_id)
    return await service.update_fixed_slot(db, class_id, slot, today, actor_id=actor_id)


@router.post("/reset", response_model=FixedTimetableWriteResult)
async def reset_fixed_timetable(
    class_id: str,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_actor_id),
    today=Depends(get_today),
):
    """Remove every subject from the template. Manual edits on future days are kept."""
    return await service.reset_fixed_timetable(db, class_id, today, actor_id=actor_id)
