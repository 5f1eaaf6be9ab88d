# backend/inkmatch/main.py
"""
inkmatch API application.

Mounts the profile discovery, specialty catalog and saved search routers,
installs the request-id middleware and the shared error envelope, and exposes
``/health`` and ``/metrics``.
"""

from contextlib import asynccontextmanager
import logging
import time
from typing import AsyncIterator, Awaitable, Callable

from fastapi import FastAPI, Request, Response

from .core.config import settings
from .core.constants import API_DESCRIPTION, API_TITLE, API_VERSION, REQUEST_ID_HEADER
from .core.request_context import attach_request_id_filter, bind_request_id, resolve_request_id
from .database import init_db
from .errors import register_error_handlers
from .monitoring.prometheus_metrics import prometheus_metrics
from .routes import profiles, saved_searches, specialties
from .schemas.base_responses import HealthResponse

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
)
attach_request_id_filter()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info("Starting %s %s (environment=%s)", API_TITLE, API_VERSION, settings.environment)
    if settings.is_sqlite:
        init_db()
    yield
    logger.info("Shutting down %s", API_TITLE)


def create_app() -> FastAPI:
    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=API_VERSION,
        lifespan=lifespan,
    )

    @app.middleware("http")
    async def request_id_middleware(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        started = time.perf_counter()
        with bind_request_id(request_id):
            response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id

        route = request.scope.get("route")
        endpoint = getattr(route, "path", None) or "unmatched"
        prometheus_metrics.record_http_request(
            request.method, endpoint, time.perf_counter() - started, response.status_code
        )
        return response

    register_error_handlers(app)

    app.include_router(profiles.router, prefix="/api/profiles")
    app.include_router(specialties.router, prefix="/api/specialties")
    app.include_router(saved_searches.router, prefix="/api/saved-searches")

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    def health() -> HealthResponse:
        return HealthResponse(status="healthy", version=API_VERSION)

    @app.get("/metrics", include_in_schema=False)
    def metrics() -> Response:
        return Response(
            content=prometheus_metrics.get_metrics(),
            media_type=prometheus_metrics.get_content_type(),
        )

    return app


app = create_app()
