import asyncio
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from calbook.api.routes import appointments, settings as settings_routes, slots
from calbook.core.config import settings, _ENV_FILE
from calbook.core.errors import BookingError
from calbook.services.calendar_service import CalendarService
from calbook.services.schedule_cache import ScheduleCache

if os.getenv("ENV") != "production":
    logging.basicConfig(level=logging.DEBUG)
else:
    logging.basicConfig(
        level=logging.INFO,
        format='{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s"}',
    )
logger = logging.getLogger(__name__)


async def _schedule_refresh_loop(cache: ScheduleCache, calendar: CalendarService) -> None:
    while True:
        await asyncio.sleep(settings.schedule_refresh_interval_seconds)
        await cache.refresh(calendar)


def _startup_log() -> None:
    logger.info("Loading .env from: %s (exists: %s)", _ENV_FILE, _ENV_FILE.exists())
    logger.info(
        "Timezone: %s, schedule refresh every %ss",
        settings.timezone,
        settings.schedule_refresh_interval_seconds,
    )
    if not settings.calendar_id or not settings.google_credentials_json:
        logger.warning(
            "Google Calendar: NOT configured. Set CALENDAR_ID and GOOGLE_CREDENTIALS_JSON in %s",
            _ENV_FILE,
        )
    if not settings.email_enabled:
        logger.warning("Email: NOT configured. Set EMAIL_USER and EMAIL_PASS in %s", _ENV_FILE)


@asynccontextmanager
async def lifespan(app: FastAPI):
    _startup_log()
    calendar = CalendarService(settings)
    cache = ScheduleCache(default_duration=settings.default_duration_minutes)
    app.state.calendar = calendar
    app.state.schedule_cache = cache
    # Startup: serve nothing until the first fetch settles (defaults if it failed)
    await cache.refresh(calendar)
    task = None
    if settings.schedule_refresh_interval_seconds > 0:
        task = asyncio.create_task(_schedule_refresh_loop(cache, calendar))
    yield
    if task is not None:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass


app = FastAPI(
    title="Calbook API",
    description="Appointment booking on top of Google Calendar",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

app.include_router(settings_routes.router, prefix="/api")
app.include_router(slots.router, prefix="/api")
app.include_router(appointments.router, prefix="/api")


def _cors_headers(origin: str | None) -> dict[str, str]:
    """Add CORS headers to error responses so the browser doesn't block them."""
    headers = {
        "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
    }
    origins = settings.cors_origins_list
    if "*" in origins:
        headers["Access-Control-Allow-Origin"] = "*"
    elif origin and origin in origins:
        headers["Access-Control-Allow-Origin"] = origin
    elif origins:
        headers["Access-Control-Allow-Origin"] = origins[0]
    return headers


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc.__cause__ or exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
        headers=_cors_headers(request.headers.get("origin")),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = ", ".join(str(err["loc"][-1]) for err in exc.errors())
    return JSONResponse(
        status_code=400,
        content={"detail": f"Invalid request: {fields}"},
        headers=_cors_headers(request.headers.get("origin")),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the real error; callers only see a generic message."""
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
        headers=_cors_headers(request.headers.get("origin")),
    )


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}
