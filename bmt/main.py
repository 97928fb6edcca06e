"""FastAPI application entry point."""

import logging
import platform
from contextlib import asynccontextmanager

from fastapi import FastAPI

from bmt import __version__
from bmt.config import get_settings
from bmt.db.database import init_db
from bmt.dependencies import CurrentSettings
from bmt.labels.router import router as labels_router
from bmt.sessions.router import router as sessions_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events.

    Args:
        app: FastAPI application instance.
    """
    init_db()
    yield


app = FastAPI(
    title=settings.app_name,
    description="Pumping session log with label printing",
    version=__version__,
    lifespan=lifespan,
    debug=settings.debug,
)

app.include_router(sessions_router, prefix="/api/sessions", tags=["sessions"])
app.include_router(labels_router, prefix="/api", tags=["printing"])


@app.get("/api/version")
async def version(current: CurrentSettings):
    """Report build and runtime versions."""
    return {
        "version": current.build_version,
        "commit": current.build_commit,
        "builtAt": current.build_time,
        "python": platform.python_version(),
    }
