"""
Sample App Frontend - Main Application
Serves the static page and greeting, proxies the backend service
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import Receive, Scope, Send

from sample_app_frontend import __version__
from sample_app_frontend.models import FrontendRuntime
from sample_app_frontend.routes import Handler, build_route_table

logger = structlog.get_logger(__name__)

NOT_FOUND_BODY = "Not found"


def request_target(request: Request) -> str:
    """
    Path plus query string exactly as sent by the client

    Uses the undecoded ``raw_path`` so that ``/%68ealth`` stays distinct from
    ``/health``. A bare trailing ``?`` with no query is dropped by the ASGI
    server before it reaches the application.
    """
    raw_path = request.scope.get("raw_path")
    if raw_path is None:
        raw_path = request.scope["path"].encode("utf-8")
    # Some servers leave the query on raw_path; query_string is authoritative
    raw_path = raw_path.split(b"?", 1)[0]
    query = request.scope.get("query_string", b"")
    target = raw_path + b"?" + query if query else raw_path
    return target.decode("latin-1")


def not_found_response() -> HTMLResponse:
    return HTMLResponse(content=NOT_FOUND_BODY, status_code=404)


class TargetDispatcher:
    """Dispatch on the exact request target, whatever the method"""

    def __init__(self, routes: Dict[str, Handler]):
        self.routes = routes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        handler = self.routes.get(request_target(request))
        if handler is None:
            raise StarletteHTTPException(status_code=404)
        response = await handler(request)
        await response(scope, receive, send)


def create_app(runtime: FrontendRuntime) -> FastAPI:
    """
    Create the FastAPI application for a loaded runtime

    Args:
        runtime: Startup state, shared read-only by every request

    Returns:
        FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Starting Sample App Frontend", environment=str(runtime.environment))
        yield
        logger.info("Sample App Frontend shutdown complete")

    app = FastAPI(
        title="Sample App Frontend",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        redirect_slashes=False,
        lifespan=lifespan,
    )
    app.state.runtime = runtime

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info(f"Got request: {request_target(request)}", method=request.method)
        return await call_next(request)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return not_found_response()
        return HTMLResponse(content=str(exc.detail), status_code=exc.status_code)

    # An ASGI endpoint with methods=None matches every HTTP method
    app.add_route(
        "/{target:path}",
        TargetDispatcher(build_route_table(runtime.context_path)),
        methods=None,
        include_in_schema=False,
    )

    return app
