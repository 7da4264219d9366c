"""
The portal's ASGI application.

On startup the lifespan hook creates any missing tables. Requests from the
frontend origin (`settings.FRONTEND_URL`) pass CORS, every router is mounted
under `/api`, failures are rendered as `{"message": ...}` bodies and files
saved to `settings.UPLOAD_DIR` are served back under `/uploads`.

Run with `uvicorn portal.main:app`.
"""

import logging
import os
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from portal.api import (
    auth_routes,
    community_routes,
    moderation_routes,
    post_routes,
    project_routes,
    uploads,
    user_routes,
)
from portal.api.handlers import register_exception_handlers
from portal.database.config.config import settings
from portal.database.config.connection_engine import create_tables

logger = logging.getLogger("uvicorn")
"""Request and startup messages go to the Uvicorn logger."""

os.makedirs(settings.UPLOAD_DIR, exist_ok=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables before serving; nothing is held open afterwards."""
    create_tables()
    logger.info("Database tables ready")
    yield
    logger.info("Knowledge portal shutting down")


app = FastAPI(title="Knowledge Portal", lifespan=lifespan)
"""The portal application; `lifespan` prepares the schema before the first request."""

# -----------------------
# CORS configuration
# -----------------------
url = settings.FRONTEND_URL
"""Origin of the web frontend, the only one CORS lets through."""

app.add_middleware(
    CORSMiddleware,
    allow_origins=[url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)")
    return response


# -----------------------
# API routes
# -----------------------
for module in (auth_routes, post_routes, user_routes, community_routes, project_routes, moderation_routes, uploads):
    app.include_router(module.router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok"}


# -----------------------
# Uploaded files
# -----------------------
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")
