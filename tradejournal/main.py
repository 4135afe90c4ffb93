"""Trade Journal Analytics: FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tradejournal import __version__
from tradejournal.api import analytics, milestones, preferences, tools
from tradejournal.config import settings
from tradejournal.services.preferences import get_preferences_store

logger = logging.getLogger(__name__)

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: select the preferences backend."""
    store = get_preferences_store()
    logger.info(
        "Trade journal analytics started (preferences=%s, calendar=%s)",
        type(store).__name__,
        settings.calendar_timezone or "local",
    )
    yield
    logger.info("Trade journal analytics stopped")


app = FastAPI(
    title="Trade Journal Analytics",
    description="Equity curve, drawdown, streaks, goals and milestones for a trading journal",
    version=__version__,
    lifespan=lifespan,
)

# CORS: restrict in production, allow the Vite dev server in development
_allowed_origins = (
    ["http://localhost:5173", "http://localhost:3000"]
    if settings.app_env == "development"
    else settings.allowed_hosts.split(",")
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT"],
    allow_headers=["Content-Type", "Authorization"],
)

app.include_router(analytics.router)
app.include_router(milestones.router)
app.include_router(preferences.router)
app.include_router(tools.router)


@app.get("/api/health")
async def health_check():
    return {
        "name": "tradejournal",
        "version": __version__,
        "status": "ok",
        "preferences_backend": settings.preferences_backend,
    }
