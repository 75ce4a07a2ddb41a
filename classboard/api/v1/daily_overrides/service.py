import logging
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from classboard.api.v1.audit_logs.service import log_action
from classboard.api.v1.fixed_timetable import service as fixed_service
from classboard.api.v1.timetable_settings import service as settings_service
from classboard.core.enums import DayOfWeek
from classboard.core.exceptions import NotFoundError, ServiceError, StoreUnavailableError, ValidationFailedError
from classboard.core.grid import MAX_PERIODS, shape_of
from classboard.core.keys import OverrideKey
from classboard.core.models import DailyOverride, FixedTimeSlot
from classboard.core.selection import SubjectSelection
from classboard.db.errors import store_errors
from classboard.realtime.feed import change_feed, daily_topic, snapshot_cache

from .resolver import has_calendar_notice, resolve, resolve_day
from .schemas import (
    CalendarNotice,
    DailyOverrideResponse,
    DailyOverrideUpsert,
    ResolvedDayResponse,
    ResolvedSlotResponse,
)

logger = logging.getLogger(__name__)


def _to_response(o: DailyOverride) -> DailyOverrideResponse:
    return DailyOverrideResponse.model_validate(o)


def _snapshot(o: Optional[DailyOverride]) -> Optional[dict]:
    if o is None:
        return None
    return _to_response(o).model_dump(exclude={"updated_at"})


def _validate_key(d: date, period: int) -> OverrideKey:
    if d is None:
        raise ValidationFailedError("date is required")
    if isinstance(period, bool) or not isinstance(period, int) or not 1 <= period <= MAX_PERIODS:
        raise ValidationFailedError(f"period must be between 1 and {MAX_PERIODS}")
    return OverrideKey(d, period)


async def _get_row(db: AsyncSession, class_id: str, key: OverrideKey) -> Optional[DailyOverride]:
    return await db.get(DailyOverride, (class_id, key.date, key.period))


async def load_daily_overrides(db: AsyncSession, class_id: str, d: date) -> List[DailyOverrideResponse]:
    """Override records for one date, by period. Raises when the store is offline."""
    with store_errors("reading daily overrides"):
        result = await db.execute(
            select(DailyOverride)
            .where(DailyOverride.class_id == class_id, DailyOverride.date == d)
            .order_by(DailyOverride.period)
        )
        overrides = [_to_response(o) for o in result.scalars().all()]
    return snapshot_cache.remember(daily_topic(class_id, d.isoformat()), overrides)


async def get_daily_overrides(db: AsyncSession, class_id: str, d: date) -> List[DailyOverrideResponse]:
    """Offline: last known records for the date, else empty."""
    try:
        return await load_daily_overrides(db, class_id, d)
    except StoreUnavailableError:
        await db.rollback()
        logger.warning("Store offline; serving cached daily overrides for %s on %s", class_id, d)
        return snapshot_cache.get(daily_topic(class_id, d.isoformat()), [])


async def upsert_daily_override(
    db: AsyncSession,
    class_id: str,
    payload: DailyOverrideUpsert,
    *,
    actor_id: str = "anonymous",
) -> DailyOverrideResponse:
    """Save a user's edit of one date/period. Lifts any manual-clear guard on that slot."""
    key = _validate_key(payload.date, payload.period)
    try:
        selection = payload.to_selection()
    except ValueError as exc:
        raise ValidationFailedError(str(exc)) from exc
    text = payload.text or ""

    try:
        with store_errors("saving a daily override"):
            row = await _get_row(db, class_id, key)
            before = _snapshot(row)
            if row is None:
                row = DailyOverride(class_id=class_id, date=key.date, period=key.period)
                db.add(row)
            row.selection = selection
            row.text = text
            row.show_on_calendar = payload.show_on_calendar
            row.is_manually_cleared = False
            row.updated_at = datetime.utcnow()
            after = _snapshot(row)
            if before is None or before != after:
                await log_action(db, class_id, "upsert_daily_override", actor_id=actor_id, before=before, after=after)
            await db.commit()
            response = _to_response(row)
    except ServiceError:
        await db.rollback()
        raise

    await change_feed.publish(daily_topic(class_id, key.date.isoformat()))
    return response


async def _reset_to_template(
    db: AsyncSession,
    class_id: str,
    d: date,
    period: int,
    action: str,
    actor_id: str,
) -> DailyOverrideResponse:
    key = _validate_key(d, period)
    try:
        with store_errors("clearing a daily override"):
            slot_key = key.slot_key
            fixed = await db.get(FixedTimeSlot, (class_id, slot_key.day.value, slot_key.period))
            row = await _get_row(db, class_id, key)
            before = _snapshot(row)
            if row is None:
                row = DailyOverride(class_id=class_id, date=key.date, period=key.period)
                db.add(row)
            row.selection = SubjectSelection.mirror(fixed.subject_id if fixed is not None else None)
            row.text = ""
            row.show_on_calendar = False
            row.is_manually_cleared = True
            row.updated_at = datetime.utcnow()
            await log_action(db, class_id, action, actor_id=actor_id, before=before, after=_snapshot(row))
            await db.commit()
            response = _to_response(row)
    except ServiceError:
        await db.rollback()
        raise

    await change_feed.publish(daily_topic(class_id, key.date.isoformat()))
    return response


async def clear_daily_override(
    db: AsyncSession,
    class_id: str,
    d: date,
    period: int,
    *,
    actor_id: str = "anonymous",
) -> DailyOverrideResponse:
    """Reset the slot to the template and keep propagation away from it until a forced resync."""
    return await _reset_to_template(db, class_id, d, period, "clear_daily_override", actor_id)


async def revert_daily_override(
    db: AsyncSession,
    class_id: str,
    d: date,
    period: int,
    *,
    actor_id: str = "anonymous",
) -> DailyOverrideResponse:
    """Undo a user's override. Same stored result as clear_daily_override."""
    return await _reset_to_template(db, class_id, d, period, "revert_daily_override", actor_id)


async def delete_daily_override(
    db: AsyncSession,
    class_id: str,
    d: date,
    period: int,
    *,
    actor_id: str = "anonymous",
) -> None:
    """Low-level removal of the record, guard included. Normal flows clear instead."""
    key = _validate_key(d, period)
    try:
        with store_errors("deleting a daily override"):
            row = await _get_row(db, class_id, key)
            if row is None:
                raise NotFoundError(f"No daily override {key.doc_id}")
            before = _snapshot(row)
            await db.delete(row)
            await log_action(db, class_id, "delete_daily_override", actor_id=actor_id, before=before, after=None)
            await db.commit()
    except ServiceError:
        await db.rollback()
        raise
    await change_feed.publish(daily_topic(class_id, key.date.isoformat()))


async def get_resolved_day(db: AsyncSession, class_id: str, d: date) -> ResolvedDayResponse:
    """What each period of `d` displays. Built from reads that fall back to cached data offline."""
    settings = await settings_service.get_settings(db, class_id)
    fixed = await fixed_service.get_fixed_timetable(db, class_id)
    overrides = await get_daily_overrides(db, class_id, d)
    shape = shape_of(settings.number_of_periods, settings.active_days)
    slots = [
        ResolvedSlotResponse(
            period=period,
            fixed_subject_id=fixed_slot.subject_id if fixed_slot is not None else None,
            subject_id=resolved.subject_id,
            text=resolved.text,
            changed_from_fixed=resolved.changed_from_fixed,
            show_on_calendar=bool(override is not None and has_calendar_notice(override)),
            is_manually_cleared=bool(override is not None and override.is_manually_cleared),
            override=override,
        )
        for period, fixed_slot, override, resolved in resolve_day(d, shape, fixed, overrides)
    ]
    weekday = DayOfWeek.of(d)
    return ResolvedDayResponse(
        class_id=class_id,
        date=d,
        weekday=weekday,
        is_active_day=weekday in shape.active_days,
        slots=slots,
    )


async def get_calendar_notices(db: AsyncSession, class_id: str, start: date, end: date) -> List[CalendarNotice]:
    """Overrides flagged for the monthly calendar between start and end (inclusive)."""
    if end < start:
        raise ValidationFailedError("end must not be before start")
    fixed = {(s.day, s.period): s for s in await fixed_service.get_fixed_timetable(db, class_id)}
    try:
        with store_errors("reading calendar notices"):
            result = await db.execute(
                select(DailyOverride)
                .where(
                    DailyOverride.class_id == class_id,
                    DailyOverride.date >= start,
                    DailyOverride.date <= end,
                    DailyOverride.show_on_calendar.is_(True),
                )
                .order_by(DailyOverride.date, DailyOverride.period)
            )
            rows = [o for o in result.scalars().all() if has_calendar_notice(o)]
    except StoreUnavailableError:
        await db.rollback()
        logger.warning("Store offline; no calendar notices for %s", class_id)
        return []
    notices = []
    for o in rows:
        resolved = resolve(fixed.get((DayOfWeek.of(o.date), o.period)), o)
        notices.append(CalendarNotice(date=o.date, period=o.period, subject_id=resolved.subject_id, text=resolved.text))
    return notices
