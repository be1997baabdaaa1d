"""
Main entrypoint for the Catalog API.

This module assembles the FastAPI application: it sets up logging, builds
the item store and service, registers error handlers and middleware and
includes the versioned routers.  The ``create_app`` function builds and
configures the app, which is then instantiated at module import time as
``app``, so it can be served with::

    uvicorn catalog_api.app.main:app --reload

The application title and version are provided via ``Settings`` from
``core.config``.
"""

import logging
import time
import uuid
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from .api.v1.endpoints import health
from .api.v1.router import router as v1_router
from .core.config import Settings, get_data_path, settings
from .core.errors import PersistenceError
from .core.logging_config import request_id_var, setup_logging
from .core.store import ItemStore
from .services.item_service import ItemService


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    app_settings : Optional[Settings]
        Settings to use instead of the module-level ``settings``.  Tests
        pass an instance pointing at a temporary data file.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.  The store has already
        loaded the data file; the file watcher starts with the application.
    """
    app_settings = app_settings or settings

    # Initialise logging before anything else so the store can log the
    # outcome of the initial load.
    setup_logging(app_settings.log_level, app_settings.log_file, app_settings.environment)
    logger = logging.getLogger(__name__)

    app = FastAPI(title=app_settings.project_name, version=app_settings.api_version, debug=app_settings.debug)

    store = ItemStore(get_data_path(app_settings), poll_interval=app_settings.watch_interval)
    app.state.settings = app_settings
    app.state.store = store
    app.state.item_service = ItemService(store)
    app.state.started_at = time.monotonic()

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(PersistenceError)
    async def persistence_error_handler(request: Request, exc: PersistenceError) -> JSONResponse:
        logger.error("Persistence failure on %s %s (path=%s)", request.method, request.url.path, exc.path)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": exc.message})

    app.include_router(health.router, prefix="/health", tags=["health"])
    app.include_router(v1_router, prefix="/api/v1")

    @app.on_event("startup")
    async def startup_event() -> None:
        # Watching is disabled in the test environment; the store is only
        # reloaded there through explicit calls.
        if app_settings.watch_enabled:
            store.start_watching()
        logger.info("%s %s started (%s)", app_settings.project_name, app_settings.api_version, app_settings.environment)

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        store.stop_watching()

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
