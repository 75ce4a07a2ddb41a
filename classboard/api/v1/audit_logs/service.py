"""
Audit logging for timetable mutations. Call on every state change.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from classboard.core.models import AuditLog
from classboard.db.errors import store_errors

from .schemas import AuditLogResponse


def to_log_value(value: Any) -> Any:
    """Make a snapshot JSON-safe: dates become ISO strings, enums their values."""
    if isinstance(value, dict):
        return {str(k): to_log_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [to_log_value(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


async def log_action(
    db: AsyncSession,
    class_id: str,
    action: str,
    *,
    actor_id: str = "anonymous",
    before: Any = None,
    after: Any = None,
    meta: Optional[dict] = None,
) -> AuditLog:
    """Append one audit log entry. Caller must commit."""
    details = {"before": to_log_value(before), "after": to_log_value(after)}
    if meta:
        details["meta"] = to_log_value(meta)
    entry = AuditLog(
        class_id=class_id,
        actor_id=actor_id or "anonymous",
        action=action,
        details=details,
        timestamp=datetime.utcnow(),
    )
    db.add(entry)
    return entry


async def list_logs(db: AsyncSession, class_id: str, limit: int = 50) -> List[AuditLogResponse]:
    with store_errors("listing audit logs"):
        result = await db.execute(
            select(AuditLog)
            .where(AuditLog.class_id == class_id)
            .order_by(AuditLog.timestamp.desc())
            .limit(limit)
        )
        return [AuditLogResponse.model_validate(e) for e in result.scalars().all()]
