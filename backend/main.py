"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import auth, calendar, concerts, messages, oauth, preferences, sports, weather
from config import settings
from database import init_db
from logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create hosted-tier tables on startup when a database is configured."""
    try:
        init_db()
    except Exception:
        logger.warning(
            "Hosted preferences store unavailable on startup, using the JSON file tier",
            exc_info=True,
        )
    yield


app = FastAPI(
    title="Dad Dashboard",
    description="Personal dashboard: preferences store and upstream API proxies",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS configuration for the dashboard frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.DASHBOARD_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(preferences.router)
app.include_router(auth.router)
app.include_router(messages.router)
app.include_router(sports.router)
app.include_router(concerts.router)
app.include_router(calendar.router)
app.include_router(oauth.router)
app.include_router(weather.router)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
