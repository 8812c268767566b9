import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from voice_agent.api.deps import container_dep
from voice_agent.api.routes import appointments, collateral, knowledge, slots
from voice_agent.core.config import _ENV_FILE, settings
from voice_agent.core.container import Container, get_container
from voice_agent.mcp_server import mcp

if os.getenv("ENV") != "production":
    logging.basicConfig(level=logging.DEBUG)
else:
    logging.basicConfig(
        level=logging.INFO,
        format='{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s"}',
    )
logger = logging.getLogger(__name__)


def _log_configuration() -> None:
    logger.info("Loading .env from: %s (exists: %s)", _ENV_FILE, _ENV_FILE.exists())
    logger.info(
        "Home time zone: %s (UTC%s), business hours %02d:00-%02d:00",
        settings.time_zone_name,
        settings.home_utc_offset,
        settings.business_start_hour,
        settings.business_end_hour,
    )
    if not settings.calendar_id:
        logger.warning("CALENDAR_ID not set; calendar tools will report errors")


@asynccontextmanager
async def lifespan(app: FastAPI):
    _log_configuration()
    container = get_container()
    logger.info("Delivery channels: %s", ", ".join(c.value for c in container.delivery.channels))
    await container.corpus.reload()
    yield
    await container.aclose()


Path(settings.static_dir).mkdir(parents=True, exist_ok=True)

app = FastAPI(
    title="Voice Agent Tools",
    description="Calendar availability, booking, document search and collateral tools for a voice agent",
    version="5.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

app.include_router(slots.router, prefix="/api/v1")
app.include_router(appointments.router, prefix="/api/v1")
app.include_router(knowledge.router, prefix="/api/v1")
app.include_router(collateral.router, prefix="/api/v1")
app.mount("/static", StaticFiles(directory=settings.static_dir), name="static")
app.mount("/mcp", mcp.sse_app())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return the error as JSON instead of letting it escape."""
    if isinstance(exc, HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(status_code=500, content={"detail": f"{type(exc).__name__}: {exc}"})


@app.get("/health")
async def health(container: Container = Depends(container_dep)) -> dict:
    return {"status": "ok", "documents": len(container.corpus.current)}


def run() -> None:
    import uvicorn

    uvicorn.run("voice_agent.main:app", host="0.0.0.0", port=settings.port)
