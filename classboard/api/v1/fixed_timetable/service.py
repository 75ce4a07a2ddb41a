import logging
from datetime import date
from typing import Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from classboard.api.v1.audit_logs.service import log_action
from classboard.api.v1.propagation import service as propagation_service
from classboard.core.enums import DayOfWeek
from classboard.core.exceptions import ServiceError, StoreUnavailableError, ValidationFailedError
from classboard.core.grid import DEFAULT_SHAPE, GridShape, shape_of
from classboard.core.keys import SlotKey
from classboard.core.models import FixedTimeSlot, TimetableSettings
from classboard.db.errors import store_errors
from classboard.realtime.feed import change_feed, fixed_topic, snapshot_cache

from .schemas import FixedSlotIn, FixedSlotResponse, FixedTimetableWriteResult

logger = logging.getLogger(__name__)


def _to_response(slot: FixedTimeSlot) -> FixedSlotResponse:
    return FixedSlotResponse(id=slot.id, day=DayOfWeek(slot.day), period=slot.period, subject_id=slot.subject_id)


def _sort_key(slot: FixedTimeSlot) -> tuple:
    return DayOfWeek(slot.day).position, slot.period


async def _load_slots(db: AsyncSession, class_id: str) -> Dict[SlotKey, FixedTimeSlot]:
    result = await db.execute(select(FixedTimeSlot).where(FixedTimeSlot.class_id == class_id))
    return {slot.key: slot for slot in result.scalars().all()}


async def _load_shape(db: AsyncSession, class_id: str) -> GridShape:
    row = await db.get(TimetableSettings, class_id)
    return shape_of(row.number_of_periods, row.active_days) if row else DEFAULT_SHAPE


async def load_fixed_timetable(db: AsyncSession, class_id: str) -> List[FixedSlotResponse]:
    """All fixed slots ordered by weekday then period. Raises when the store is offline."""
    with store_errors("reading the fixed timetable"):
        slots = sorted((await _load_slots(db, class_id)).values(), key=_sort_key)
        response = [_to_response(s) for s in slots]
    return snapshot_cache.remember(fixed_topic(class_id), response)


async def get_fixed_timetable(db: AsyncSession, class_id: str) -> List[FixedSlotResponse]:
    """Offline: the last known grid, else empty."""
    try:
        return await load_fixed_timetable(db, class_id)
    except StoreUnavailableError:
        await db.rollback()
        logger.warning("Store offline; serving cached fixed timetable for %s", class_id)
        return snapshot_cache.get(fixed_topic(class_id), [])


async def batch_update_fixed_timetable(
    db: AsyncSession,
    class_id: str,
    slots: List[FixedSlotIn],
    today: date,
    *,
    actor_id: str = "anonymous",
) -> FixedTimetableWriteResult:
    """Write only the slots whose subject differs from what is stored, then propagate.

    Re-sending an unchanged grid performs no writes and no propagation.
    """
    try:
        with store_errors("saving the fixed timetable"):
            shape = await _load_shape(db, class_id)
            outside = [f"{s.day.value}_{s.period}" for s in slots if not shape.contains(SlotKey(s.day, s.period))]
            if outside:
                raise ValidationFailedError(f"Slots outside the timetable grid: {', '.join(outside)}")

            existing = await _load_slots(db, class_id)
            changes = []
            for incoming in slots:
                key = SlotKey(incoming.day, incoming.period)
                current = existing.get(key)
                if current is not None and current.subject_id == incoming.subject_id:
                    continue
                before = current.subject_id if current is not None else None
                if current is None:
                    current = FixedTimeSlot(class_id=class_id, day=key.day.value, period=key.period)
                    db.add(current)
                    existing[key] = current
                current.subject_id = incoming.subject_id
                changes.append({"id": key.doc_id, "before": before, "after": incoming.subject_id})

            if not changes:
                logger.debug("No changes detected in fixed timetable for %s", class_id)
                return FixedTimetableWriteResult(changed=False, slots_written=0)

            await log_action(
                db,
                class_id,
                "batch_update_fixed_timetable",
                actor_id=actor_id,
                before=[{"id": c["id"], "subject_id": c["before"]} for c in changes],
                after=[{"id": c["id"], "subject_id": c["after"]} for c in changes],
                meta={"requested": len(slots), "written": len(changes)},
            )
            await db.commit()
    except ServiceError:
        await db.rollback()
        raise

    await change_feed.publish(fixed_topic(class_id))
    logger.info("Fixed timetable for %s: %d slot(s) changed", class_id, len(changes))
    report, warning = await propagation_service.propagate_after_mutation(db, class_id, today, actor_id=actor_id)
    return FixedTimetableWriteResult(
        slots_written=len(changes),
        propagation=report,
        propagation_warning=warning,
    )


async def update_fixed_slot(
    db: AsyncSession,
    class_id: str,
    slot: FixedSlotIn,
    today: date,
    *,
    actor_id: str = "anonymous",
) -> FixedTimetableWriteResult:
    return await batch_update_fixed_timetable(db, class_id, [slot], today, actor_id=actor_id)


async def reset_fixed_timetable(
    db: AsyncSession,
    class_id: str,
    today: date,
    *,
    actor_id: str = "anonymous",
) -> FixedTimetableWriteResult:
    """Set every assigned fixed slot to no subject. Daily overrides keep their manual edits."""
    try:
        with store_errors("resetting the fixed timetable"):
            assigned = [s for s in (await _load_slots(db, class_id)).values() if s.subject_id is not None]
            if not assigned:
                return FixedTimetableWriteResult(changed=False, slots_written=0)
            before = [{"id": s.id, "subject_id": s.subject_id} for s in sorted(assigned, key=_sort_key)]
            for s in assigned:
                s.subject_id = None
            await log_action(db, class_id, "reset_fixed_timetable", actor_id=actor_id, before=before, after=None)
            await db.commit()
    except ServiceError:
        await db.rollback()
        raise

    await change_feed.publish(fixed_topic(class_id))
    logger.info("Fixed timetable for %s reset (%d slot(s) cleared)", class_id, len(assigned))
    report, warning = await propagation_service.propagate_after_mutation(db, class_id, today, actor_id=actor_id)
    return FixedTimetableWriteResult(slots_written=len(assigned), propagation=report, propagation_warning=warning)
