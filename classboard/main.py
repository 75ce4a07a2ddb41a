import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from classboard.api.v1.audit_logs.router import router as audit_logs_router
from classboard.api.v1.daily_overrides.router import router as daily_overrides_router
from classboard.api.v1.events.router import router as events_router
from classboard.api.v1.fixed_timetable.router import router as fixed_timetable_router
from classboard.api.v1.live.router import router as live_router
from classboard.api.v1.propagation import scheduler
from classboard.api.v1.propagation.router import router as propagation_router
from classboard.api.v1.subjects.router import router as subjects_router
from classboard.api.v1.timetable_settings.router import router as timetable_settings_router
from classboard.core.config import settings
from classboard.core.exceptions import ServiceError
from classboard.db.session import AsyncSessionLocal, create_all

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    await create_all()
    task = None
    if settings.propagation_interval_minutes > 0:
        task = asyncio.create_task(scheduler.run_forever(AsyncSessionLocal, settings.propagation_interval_minutes))
    yield
    if task is not None:
        task.cancel()


async def service_error_handler(request: Request, exc: ServiceError):
    """One place that turns ServiceError into a response, so routes need no try/except.

    The body carries `code` next to `detail` so clients can tell offline from validation failures.
    """
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "code": exc.code})


def create_app() -> FastAPI:
    logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    app = FastAPI(title=settings.project_name, lifespan=lifespan)
    app.add_exception_handler(ServiceError, service_error_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(timetable_settings_router)
    app.include_router(fixed_timetable_router)
    app.include_router(propagation_router)
    app.include_router(daily_overrides_router)
    app.include_router(subjects_router)
    app.include_router(events_router)
    app.include_router(audit_logs_router)
    app.include_router(live_router)

    return app


app = create_app()
