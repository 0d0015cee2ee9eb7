# src/linkup/main.py
"""Main entry point for the Linkup application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from linkup.api.v1 import (
    connections_router,
    messages_router,
    posts_router,
    stories_router,
    users_router,
)
from linkup.core.errors import LinkupError
from linkup.core.settings import settings
from linkup.db.session import create_tables
from linkup.services.events import EventTrigger, build_event_trigger
from linkup.services.realtime import DeliveryHub

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Linkup API",
    description="Social graph, feed and realtime messaging API",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Include API routers
app.include_router(users_router, prefix="/api/v1")
app.include_router(connections_router, prefix="/api/v1")
app.include_router(posts_router, prefix="/api/v1")
app.include_router(stories_router, prefix="/api/v1")
app.include_router(messages_router, prefix="/api/v1")


@app.exception_handler(LinkupError)
async def linkup_error_handler(request: Request, exc: LinkupError) -> JSONResponse:
    """Report domain errors as structured JSON failures."""
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)


@app.on_event("startup")
async def on_startup() -> None:
    logging.basicConfig(level=settings.log_level.upper())
    if settings.create_tables_on_startup:
        create_tables()
    hub = DeliveryHub()
    hub.start()
    app.state.delivery_hub = hub
    app.state.event_trigger = build_event_trigger()
    logger.info("%s %s started", settings.app_name, settings.app_version)


@app.on_event("shutdown")
async def on_shutdown() -> None:
    hub: DeliveryHub | None = getattr(app.state, "delivery_hub", None)
    if hub:
        hub.stop()
    trigger: EventTrigger | None = getattr(app.state, "event_trigger", None)
    if trigger:
        trigger.close()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": "Linkup API",
        "version": settings.app_version,
        "description": "Social graph, feed and realtime messaging API",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("linkup.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
