from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from classboard.db.session import get_db

from .schemas import SchoolEventResponse
from . import service

router = APIRouter(prefix="/api/v1/classes/{class_id}/events", tags=["events"])


@router.get("", response_model=List[SchoolEventResponse])
async def list_events(
    class_id: str,
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Events overlapping [start, end]."""
    return await service.list_events(db, class_id, start, end)
