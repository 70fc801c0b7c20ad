"""FastAPI application factory.

Example:
    >>> from queryproxy.api import create_app
    >>> app = create_app(ProxyConfig.from_env())
"""

import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config.models import ProxyConfig
from ..database.dispatcher import Dispatcher
from ..logging import configure_logging, get_logger
from .routes import connection_router, health_router, query_router

REQUEST_ID_HEADER = "X-Request-ID"
TEST_CONNECTION_PATH = "/api/test-connection"

logger = get_logger(__name__)


def create_app(
    config: Optional[ProxyConfig] = None,
    *,
    dispatcher: Optional[Dispatcher] = None,
) -> FastAPI:
    """Build the application.

    Args:
        config: Proxy configuration; loaded from file or environment if omitted
        dispatcher: Dispatcher to serve requests with; built from ``config``
            if omitted
    """
    config = config or ProxyConfig.load()
    configure_logging(config.logging)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "QueryProxy starting",
            version=__version__,
            engines=app.state.dispatcher.registry.get_available_engines(),
        )
        yield
        logger.info("QueryProxy stopped")

    app = FastAPI(
        title="QueryProxy",
        description="Read-only SQL proxy and EXPLAIN normalizer",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.dispatcher = dispatcher or Dispatcher(
        timeouts=config.timeouts,
        limits=config.limits,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )

    @app.middleware("http")
    async def bind_request_id(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        with logger.context(correlation_id=request_id):
            response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    @app.exception_handler(RequestValidationError)
    async def malformed_body_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info("Malformed request body", path=request.url.path, errors=len(exc.errors()))
        key = "message" if request.url.path == TEST_CONNECTION_PATH else "error"
        return JSONResponse(
            status_code=400,
            content={"success": False, key: "Invalid request body"},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled request error",
            path=request.url.path,
            error_type=type(exc).__name__,
        )
        key = "message" if request.url.path == TEST_CONNECTION_PATH else "error"
        return JSONResponse(
            status_code=500,
            content={"success": False, key: "Internal server error"},
        )

    app.include_router(health_router)
    app.include_router(connection_router, prefix="/api")
    app.include_router(query_router, prefix="/api")

    return app
