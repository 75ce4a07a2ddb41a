import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from classboard.core.exceptions import StoreUnavailableError
from classboard.core.models import Subject
from classboard.db.errors import store_errors
from classboard.realtime.feed import snapshot_cache, topic

from .schemas import SubjectResponse

logger = logging.getLogger(__name__)


async def list_subjects(db: AsyncSession, class_id: str) -> List[SubjectResponse]:
    name = topic(class_id, "subjects")
    try:
        with store_errors("listing subjects"):
            result = await db.execute(select(Subject).where(Subject.class_id == class_id).order_by(Subject.name))
            subjects = [SubjectResponse.model_validate(s) for s in result.scalars().all()]
    except StoreUnavailableError:
        await db.rollback()
        logger.warning("Store offline; serving cached subjects for %s", class_id)
        return snapshot_cache.get(name, [])
    return snapshot_cache.remember(name, subjects)
