from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from classboard.core.exceptions import StoreUnavailableError
from classboard.db.session import get_db

from .schemas import AuditLogResponse
from . import service

router = APIRouter(prefix="/api/v1/classes/{class_id}/logs", tags=["audit-logs"])


@router.get("", response_model=List[AuditLogResponse])
async def list_logs(
    class_id: str,
    limit: int = Query(50, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await service.list_logs(db, class_id, limit=limit)
    except StoreUnavailableError:
        return []
