import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from .core.config import get_settings
from .core.error_handlers import register_error_handlers
from .core.observability import setup_logging
from .routers import api_router          # all sub-routers live here
from .services.database import ensure_indexes, get_client, get_db

log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    await ensure_indexes(get_db())
    log.info("Task tracker API started (%s)", settings.environment)
    yield
    get_client().close()


app = FastAPI(title="Task Tracker API", lifespan=lifespan)

# ⚠️  no global "/api" prefix – the reverse proxy strips it
app.include_router(api_router)
register_error_handlers(app)


def run() -> None:
    """Console entry point – `tasktracker`."""
    settings = get_settings()
    uvicorn.run("tasktracker.main:app", host=settings.host, port=settings.port)
