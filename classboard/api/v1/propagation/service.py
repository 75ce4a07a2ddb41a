"""
Propagation of the fixed timetable into the rolling window of future daily overrides.

apply_fixed_timetable_for_future keeps synthetic mirror records in line with the
template and never touches a slot that was manually cleared or carries a note.
reset_future_daily_announcements rewrites every slot in the window, including those.
"""

import logging
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from classboard.api.v1.audit_logs.service import log_action
from classboard.core.config import settings
from classboard.core.enums import DayOfWeek, SelectionMode
from classboard.core.exceptions import ServiceError
from classboard.core.grid import DEFAULT_SHAPE, GridShape, shape_of, window_dates
from classboard.core.keys import SlotKey
from classboard.core.models import DailyOverride, FixedTimeSlot, TimetableSettings
from classboard.core.selection import SubjectSelection
from classboard.db.errors import store_errors
from classboard.realtime.feed import change_feed, daily_topic

from .schemas import PropagationReport

logger = logging.getLogger(__name__)

PROPAGATION_WINDOW_DAYS = settings.propagation_window_days


async def _load_template(db: AsyncSession, class_id: str) -> Tuple[GridShape, Dict[SlotKey, Optional[str]]]:
    row = await db.get(TimetableSettings, class_id)
    shape = shape_of(row.number_of_periods, row.active_days) if row else DEFAULT_SHAPE
    result = await db.execute(select(FixedTimeSlot).where(FixedTimeSlot.class_id == class_id))
    fixed = {slot.key: slot.subject_id for slot in result.scalars().all()}
    return shape, fixed


async def _overrides_on(db: AsyncSession, class_id: str, d: date) -> Dict[int, DailyOverride]:
    result = await db.execute(
        select(DailyOverride).where(DailyOverride.class_id == class_id, DailyOverride.date == d)
    )
    return {o.period: o for o in result.scalars().all()}


def needs_mirror(existing: Optional[DailyOverride], mirror: SubjectSelection) -> bool:
    """Whether propagation should (re)write the synthetic mirror for a slot."""
    if existing is None:
        return True
    if existing.is_manually_cleared:
        return False
    if existing.text or existing.show_on_calendar:
        return False
    # Mirrors are never "explicit none"; that mode only comes from a user edit.
    if existing.selection.mode is SelectionMode.NONE:
        return False
    return existing.selection != mirror


def write_mirror(
    db: AsyncSession,
    class_id: str,
    d: date,
    period: int,
    mirror: SubjectSelection,
    existing: Optional[DailyOverride],
    now: datetime,
) -> DailyOverride:
    """Make `existing` (or a new record) a clean copy of the template slot."""
    row = existing
    if row is None:
        row = DailyOverride(class_id=class_id, date=d, period=period)
        db.add(row)
    row.selection = mirror
    row.text = ""
    row.show_on_calendar = False
    row.is_manually_cleared = False
    row.updated_at = now
    return row


async def _walk_window(
    db: AsyncSession,
    class_id: str,
    today: date,
    window_days: int,
    *,
    force: bool,
) -> Tuple[PropagationReport, List[date]]:
    shape, fixed = await _load_template(db, class_id)
    window = window_dates(today, window_days)
    now = datetime.utcnow()
    report = PropagationReport(window_start=window[0], window_end=window[-1], irreversible=force)
    touched: List[date] = []

    for d in window:
        weekday = DayOfWeek.of(d)
        if weekday not in shape.active_days:
            continue
        report.days_scanned += 1
        existing = await _overrides_on(db, class_id, d)
        written = 0
        for period in range(1, shape.number_of_periods + 1):
            key = SlotKey(weekday, period)
            if key not in fixed:
                continue
            subject_id = fixed[key]
            row = existing.get(period)
            mirror = SubjectSelection.mirror(subject_id)
            if force:
                # A missing record on an empty slot already resolves to nothing.
                if row is None and subject_id is None:
                    continue
            elif not needs_mirror(row, mirror) or (row is None and subject_id is None):
                continue
            write_mirror(db, class_id, d, period, mirror, row, now)
            written += 1
        if written:
            touched.append(d)
            report.slots_written += written
    report.days_touched = len(touched)
    return report, touched


async def _commit_window(
    db: AsyncSession,
    class_id: str,
    action: str,
    actor_id: str,
    report: PropagationReport,
    touched: List[date],
) -> None:
    await log_action(
        db,
        class_id,
        action,
        actor_id=actor_id,
        meta=report.model_dump(),
    )
    await db.commit()
    await change_feed.publish(*(daily_topic(class_id, d.isoformat()) for d in touched))


async def apply_fixed_timetable_for_future(
    db: AsyncSession,
    class_id: str,
    today: date,
    *,
    actor_id: str = "system",
    window_days: int = PROPAGATION_WINDOW_DAYS,
) -> PropagationReport:
    """Mirror the fixed timetable into the next `window_days` days, skipping customized slots."""
    try:
        with store_errors("propagating the fixed timetable"):
            report, touched = await _walk_window(db, class_id, today, window_days, force=False)
            if not touched:
                logger.debug("Propagation for %s: window already consistent", class_id)
                return report
            await _commit_window(db, class_id, "apply_fixed_timetable_future", actor_id, report, touched)
    except ServiceError:
        await db.rollback()
        raise
    logger.info(
        "Propagation for %s wrote %d slot(s) on %d day(s)", class_id, report.slots_written, report.days_touched
    )
    return report


async def reset_future_daily_announcements(
    db: AsyncSession,
    class_id: str,
    today: date,
    *,
    actor_id: str = "anonymous",
    window_days: int = PROPAGATION_WINDOW_DAYS,
) -> PropagationReport:
    """Force every slot in the window back to the template. Discards manual clears and notes."""
    try:
        with store_errors("resetting future daily overrides"):
            report, touched = await _walk_window(db, class_id, today, window_days, force=True)
            if not touched:
                return report
            await _commit_window(db, class_id, "reset_future_daily_announcements", actor_id, report, touched)
    except ServiceError:
        await db.rollback()
        raise
    logger.warning(
        "Forced resync for %s overwrote %d slot(s) on %d day(s)", class_id, report.slots_written, report.days_touched
    )
    return report


async def propagate_after_mutation(
    db: AsyncSession,
    class_id: str,
    today: date,
    *,
    actor_id: str,
) -> Tuple[Optional[PropagationReport], Optional[str]]:
    """Run propagation after a committed template change.

    Failure is logged, audited when possible and returned as a warning; the
    triggering change stays committed either way.
    """
    try:
        return await apply_fixed_timetable_for_future(db, class_id, today, actor_id=actor_id), None
    except (ServiceError, SQLAlchemyError) as exc:
        await db.rollback()
        message = getattr(exc, "message", None) or str(exc)
        logger.warning("Propagation after template change for %s failed: %s", class_id, message)
        try:
            await log_action(db, class_id, "propagation_failed", actor_id=actor_id, meta={"error": message})
            await db.commit()
        except SQLAlchemyError:
            await db.rollback()
            logger.warning("Could not audit propagation failure for %s", class_id, exc_info=True)
        return None, f"Saved, but future days were not updated: {message}"
