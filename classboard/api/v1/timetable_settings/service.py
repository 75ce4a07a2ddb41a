import logging
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from classboard.api.v1.audit_logs.service import log_action
from classboard.api.v1.propagation import service as propagation_service
from classboard.core.exceptions import ServiceError, StoreUnavailableError
from classboard.core.grid import (
    DEFAULT_SHAPE,
    GridShape,
    shape_of,
    validate_active_days,
    validate_number_of_periods,
)
from classboard.core.models import FixedTimeSlot, TimetableSettings
from classboard.db.errors import store_errors
from classboard.realtime.feed import change_feed, fixed_topic, settings_topic, snapshot_cache

from .schemas import SettingsUpdateResult, TimetableSettingsResponse, TimetableSettingsUpdate

logger = logging.getLogger(__name__)


def _to_response(class_id: str, shape: GridShape) -> TimetableSettingsResponse:
    return TimetableSettingsResponse(
        class_id=class_id,
        number_of_periods=shape.number_of_periods,
        active_days=list(shape.active_days),
    )


def _shape_of_row(row: TimetableSettings) -> GridShape:
    return shape_of(row.number_of_periods, row.active_days)


def _store_shape(row: TimetableSettings, shape: GridShape) -> None:
    row.number_of_periods = shape.number_of_periods
    row.active_days = [d.value for d in shape.active_days]


async def _reshape_grid(db: AsyncSession, class_id: str, shape: GridShape) -> tuple[int, int]:
    """Add empty fixed slots the grid now covers and delete the ones it no longer does."""
    result = await db.execute(select(FixedTimeSlot).where(FixedTimeSlot.class_id == class_id))
    existing = {slot.key: slot for slot in result.scalars().all()}
    wanted = set(shape.keys())
    created = 0
    for key in shape.keys():
        if key not in existing:
            db.add(FixedTimeSlot(class_id=class_id, day=key.day.value, period=key.period, subject_id=None))
            created += 1
    deleted = 0
    for key, slot in existing.items():
        if key not in wanted:
            await db.delete(slot)
            deleted += 1
    return created, deleted


async def _seed_defaults(db: AsyncSession, class_id: str) -> TimetableSettings:
    row = TimetableSettings(class_id=class_id)
    _store_shape(row, DEFAULT_SHAPE)
    db.add(row)
    await _reshape_grid(db, class_id, DEFAULT_SHAPE)
    await log_action(db, class_id, "initialize_settings", actor_id="system", after=_to_response(class_id, DEFAULT_SHAPE).model_dump())
    await db.commit()
    logger.info("Initialized default timetable settings for class %s", class_id)
    await change_feed.publish(settings_topic(class_id), fixed_topic(class_id))
    return row


async def load_settings(db: AsyncSession, class_id: str) -> TimetableSettingsResponse:
    """Read settings, seeding the defaults on first use. Raises when the store is offline."""
    try:
        with store_errors("reading timetable settings"):
            row = await db.get(TimetableSettings, class_id)
            if row is None:
                try:
                    row = await _seed_defaults(db, class_id)
                except IntegrityError:
                    # Another request seeded the class first.
                    await db.rollback()
                    row = await db.get(TimetableSettings, class_id)
            response = _to_response(class_id, _shape_of_row(row))
    except ServiceError:
        await db.rollback()
        raise
    return snapshot_cache.remember(settings_topic(class_id), response)


async def get_settings(db: AsyncSession, class_id: str) -> TimetableSettingsResponse:
    """Like load_settings, but offline it returns the last known settings (or the defaults)."""
    try:
        return await load_settings(db, class_id)
    except StoreUnavailableError:
        logger.warning("Store offline; serving cached timetable settings for %s", class_id)
        return snapshot_cache.get(settings_topic(class_id), _to_response(class_id, DEFAULT_SHAPE))


async def update_settings(
    db: AsyncSession,
    class_id: str,
    payload: TimetableSettingsUpdate,
    today: date,
    *,
    actor_id: str = "anonymous",
) -> SettingsUpdateResult:
    if payload.number_of_periods is not None:
        validate_number_of_periods(payload.number_of_periods)
    if payload.active_days is not None:
        validate_active_days(payload.active_days)

    try:
        with store_errors("updating timetable settings"):
            row: Optional[TimetableSettings] = await db.get(TimetableSettings, class_id)
            current = _shape_of_row(row) if row is not None else DEFAULT_SHAPE
            new_shape = GridShape(
                payload.number_of_periods if payload.number_of_periods is not None else current.number_of_periods,
                validate_active_days(payload.active_days) if payload.active_days is not None else current.active_days,
            )
            if row is None:
                row = TimetableSettings(class_id=class_id)
                db.add(row)
            _store_shape(row, new_shape)
            created, deleted = await _reshape_grid(db, class_id, new_shape)
            before = _to_response(class_id, current).model_dump()
            after = _to_response(class_id, new_shape)
            await log_action(
                db,
                class_id,
                "update_settings",
                actor_id=actor_id,
                before=before,
                after=after.model_dump(),
                meta={"slots_created": created, "slots_deleted": deleted},
            )
            await db.commit()
    except ServiceError:
        await db.rollback()
        raise

    snapshot_cache.remember(settings_topic(class_id), after)
    await change_feed.publish(settings_topic(class_id), fixed_topic(class_id))
    logger.info(
        "Settings for %s now %d period(s) on %s (+%d/-%d slots)",
        class_id,
        new_shape.number_of_periods,
        ",".join(d.value for d in new_shape.active_days),
        created,
        deleted,
    )

    report, warning = await propagation_service.propagate_after_mutation(db, class_id, today, actor_id=actor_id)
    return SettingsUpdateResult(
        settings=after,
        slots_created=created,
        slots_deleted=deleted,
        propagation=report,
        propagation_warning=warning,
    )
