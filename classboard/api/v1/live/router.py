import asyncio
import logging
from datetime import date
from typing import Awaitable, Callable, Optional, Tuple

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder
from sqlalchemy.ext.asyncio import async_sessionmaker

from classboard.api.v1.daily_overrides import service as daily_service
from classboard.api.v1.fixed_timetable import service as fixed_service
from classboard.api.v1.timetable_settings import service as settings_service
from classboard.db.session import get_session_factory
from classboard.realtime.feed import daily_topic, fixed_topic, settings_topic
from classboard.realtime.live_query import LiveQuery

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/classes/{class_id}/live", tags=["live"])

RESOURCES = ("settings", "fixed", "daily")


def _resolve_resource(
    class_id: str,
    resource: str,
    on: Optional[str],
    session_factory: async_sessionmaker,
) -> Tuple[str, Callable[[], Awaitable], object]:
    """Topic, fetch function and offline default for a subscribable resource."""
    if resource == "settings":
        loader, name, default = (lambda db: settings_service.load_settings(db, class_id)), settings_topic(class_id), None
    elif resource == "fixed":
        loader, name, default = (lambda db: fixed_service.load_fixed_timetable(db, class_id)), fixed_topic(class_id), []
    elif resource == "daily":
        if not on:
            raise ValueError("daily requires a date query parameter")
        day = date.fromisoformat(on)
        loader, name, default = (
            (lambda db: daily_service.load_daily_overrides(db, class_id, day)),
            daily_topic(class_id, day.isoformat()),
            [],
        )
    else:
        raise ValueError(f"resource must be one of {', '.join(RESOURCES)}")

    async def fetch():
        # Fresh session per read so re-fetches never see a stale identity map.
        async with session_factory() as db:
            try:
                return await loader(db)
            except Exception:
                await db.rollback()
                raise

    return name, fetch, default


@router.websocket("/{resource}")
async def live_resource(
    websocket: WebSocket,
    class_id: str,
    resource: str,
    session_factory: async_sessionmaker = Depends(get_session_factory),
) -> None:
    """Stream the current value of a resource, then a new value after every change.

    Messages: {"event": "snapshot" | "change", "data": ...} and {"event": "offline", "detail": ...}
    while the store cannot be read. Sending "ping" gets {"event": "pong"}.
    """
    try:
        name, fetch, default = _resolve_resource(class_id, resource, websocket.query_params.get("date"), session_factory)
    except ValueError as exc:
        logger.info("Rejected live subscription %s/%s: %s", class_id, resource, exc)
        await websocket.close(code=1008)
        return

    await websocket.accept()
    errors = []

    async def send(event: str, value) -> None:
        await websocket.send_json({"event": event, "resource": resource, "data": jsonable_encoder(value)})
        while errors:
            exc = errors.pop(0)
            await websocket.send_json({"event": "offline", "detail": getattr(exc, "message", str(exc))})

    async def receive_loop() -> None:
        while True:
            message = await websocket.receive_text()
            if message.strip().lower() == "ping":
                await websocket.send_json({"event": "pong"})

    receiver = asyncio.create_task(receive_loop())
    try:
        async with LiveQuery(name, fetch, default=default, on_error=errors.append) as live:
            await send("snapshot", live.value)
            while True:
                change = asyncio.create_task(live.next_change())
                done, _ = await asyncio.wait({change, receiver}, return_when=asyncio.FIRST_COMPLETED)
                if receiver in done:
                    change.cancel()
                    receiver.result()
                    break
                await send("change", change.result())
    except WebSocketDisconnect:
        pass
    finally:
        receiver.cancel()
        logger.debug("Live subscription %s closed", name)
