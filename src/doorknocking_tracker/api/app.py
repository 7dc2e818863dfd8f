from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from doorknocking_tracker.api.deps import ensure_services
from doorknocking_tracker.api.routes.activities import router as activities_router
from doorknocking_tracker.api.routes.location import router as location_router
from doorknocking_tracker.api.routes.properties import router as properties_router
from doorknocking_tracker.api.routes.session import router as session_router
from doorknocking_tracker.errors import TrackerError
from doorknocking_tracker.services import TrackerServices

logger = logging.getLogger("dkt.api")


def health():
    return {"status": "ok"}


def create_app(services: Optional[TrackerServices] = None) -> FastAPI:
    """Build the API; ``services`` defaults to ones built from the environment."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        running = ensure_services(app)
        if not running.started:
            running.started = True
            await running.session.start()
            logger.info(
                "startup: %s properties loaded from %s",
                len(running.directory),
                running.directory.source,
            )
        yield
        running.close()

    app = FastAPI(title="Doorknocking Tracker", lifespan=lifespan)
    app.state.services = services

    app.include_router(session_router, prefix="/api")
    app.include_router(location_router, prefix="/api")
    app.include_router(properties_router, prefix="/api")
    app.include_router(activities_router, prefix="/api")

    @app.exception_handler(TrackerError)
    async def _tracker_error(request: Request, exc: TrackerError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        else:
            logger.info("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.code)
        return JSONResponse(
            status_code=exc.status_code,
            content={"ok": False, "error": exc.to_dict()},
        )

    @app.get("/health")
    def health_route():
        return health()

    return app


app = create_app()
