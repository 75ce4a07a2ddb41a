from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from classboard.db.session import get_db

from .schemas import SubjectResponse
from . import service

router = APIRouter(prefix="/api/v1/classes/{class_id}/subjects", tags=["subjects"])


@router.get("", response_model=List[SubjectResponse])
async def list_subjects(
    class_id: str,
    db: AsyncSession = Depends(get_db),
):
    return await service.list_subjects(db, class_id)
