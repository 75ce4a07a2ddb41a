from datetime import date, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from classboard.api.deps import get_actor_id, get_today
from classboard.api.v1.events import service as events_service
from classboard.db.session import get_db

from .schemas import CalendarResponse, DailyOverrideResponse, DailyOverrideUpsert, ResolvedDayResponse
from . import service

router = APIRouter(prefix="/api/v1/classes/{class_id}/timetable", tags=["daily-overrides"])


@router.get("/daily/{for_date}", response_model=List[DailyOverrideResponse])
async def get_daily_overrides(
    class_id: str,
    for_date: date,
    db: AsyncSession = Depends(get_db),
):
    return await service.get_daily_overrides(db, class_id, for_date)


@router.get("/daily/{for_date}/resolved", response_model=ResolvedDayResponse)
async def get_resolved_day(
    class_id: str,
    for_date: date,
    db: AsyncSession = Depends(get_db),
):
    """Subject and note each period shows on this date, after applying overrides to the template."""
    return await service.get_resolved_day(db, class_id, for_date)


@router.put("/daily", response_model=DailyOverrideResponse)
async def upsert_daily_override(
    payload: DailyOverrideUpsert,
    class_id: str,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_actor_id),
):
    return await service.upsert_daily_override(db, class_id, payload, actor_id=actor_id)


@router.post("/daily/{for_date}/{period}/clear", response_model=DailyOverrideResponse)
async def clear_daily_override(
    class_id: str,
    for_date: date,
    period: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_actor_id),
):
    """Back to the template for this date/period; later propagation leaves it alone."""
    return await service.clear_daily_override(db, class_id, for_date, period, actor_id=actor_id)


@router.post("/daily/{for_date}/{period}/revert", response_model=DailyOverrideResponse)
async def revert_daily_override(
    class_id: str,
    for_date: date,
    period: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_actor_id),
):
    return await service.revert_daily_override(db, class_id, for_date, period, actor_id=actor_id)


@router.delete("/daily/{for_date}/{period}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_daily_override(
    class_id: str,
    for_date: date,
    period: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_actor_id),
):
    await service.delete_daily_override(db, class_id, for_date, period, actor_id=actor_id)


@router.get("/calendar", response_model=CalendarResponse)
async def get_calendar(
    class_id: str,
    start: Optional[date] = Query(None, description="Defaults to today"),
    end: Optional[date] = Query(None, description="Defaults to 41 days after start"),
    db: AsyncSession = Depends(get_db),
    today: date = Depends(get_today),
):
    """Events and flagged notices for a month view."""
    start = start or today
    end = end or start + timedelta(days=41)
    notices = await service.get_calendar_notices(db, class_id, start, end)
    events = await events_service.list_events(db, class_id, start, end)
    return CalendarResponse(start=start, end=end, events=events, notices=notices)
