import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from classboard.core.exceptions import StoreUnavailableError, ValidationFailedError
from classboard.core.models import SchoolEvent
from classboard.db.errors import store_errors

from .schemas import SchoolEventResponse

logger = logging.getLogger(__name__)


async def list_events(
    db: AsyncSession,
    class_id: str,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[SchoolEventResponse]:
    """Events overlapping [start, end]; a missing end_date means a single-day event."""
    if start is not None and end is not None and end < start:
        raise ValidationFailedError("end must not be before start")
    stmt = select(SchoolEvent).where(SchoolEvent.class_id == class_id)
    if end is not None:
        stmt = stmt.where(SchoolEvent.start_date <= end)
    if start is not None:
        stmt = stmt.where(func.coalesce(SchoolEvent.end_date, SchoolEvent.start_date) >= start)
    stmt = stmt.order_by(SchoolEvent.start_date, SchoolEvent.title)
    try:
        with store_errors("listing school events"):
            result = await db.execute(stmt)
            return [SchoolEventResponse.model_validate(e) for e in result.scalars().all()]
    except StoreUnavailableError:
        await db.rollback()
        logger.warning("Store offline; returning no school events for %s", class_id)
        return []
