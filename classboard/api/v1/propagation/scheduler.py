"""Periodic re-run of propagation so the rolling window keeps moving forward."""

import asyncio
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from classboard.core.clock import Clock, get_clock
from classboard.core.config import settings
from classboard.core.exceptions import ServiceError
from classboard.core.models import TimetableSettings

from . import service

logger = logging.getLogger(__name__)


async def run_once(session_factory: async_sessionmaker, clock: Optional[Clock] = None) -> int:
    """Propagate for every class that has settings. Returns how many classes succeeded."""
    today = (clock or get_clock()).today()
    async with session_factory() as db:
        class_ids = (await db.execute(select(TimetableSettings.class_id))).scalars().all()

    succeeded = 0
    for class_id in class_ids:
        async with session_factory() as db:
            try:
                await service.apply_fixed_timetable_for_future(db, class_id, today, actor_id="scheduler")
                succeeded += 1
            except (ServiceError, SQLAlchemyError) as exc:
                logger.warning("Scheduled propagation for %s failed: %s", class_id, exc)
    return succeeded


async def run_forever(session_factory: async_sessionmaker, interval_minutes: int = settings.propagation_interval_minutes) -> None:
    logger.info("Scheduled propagation every %d minute(s)", interval_minutes)
    while True:
        try:
            count = await run_once(session_factory)
            logger.info("Scheduled propagation done for %d class(es)", count)
        except (ServiceError, SQLAlchemyError) as exc:
            logger.warning("Scheduled propagation could not list classes: %s", exc)
        await asyncio.sleep(interval_minutes * 60)
