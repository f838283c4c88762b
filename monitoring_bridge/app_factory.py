from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException

from monitoring_bridge.api.health import router as health_router
from monitoring_bridge.api.metrics_endpoint import router as metrics_router
from monitoring_bridge.api.prometheus import router as prometheus_router
from monitoring_bridge.api.responses import SERVICE_VERSION, not_found_handler
from monitoring_bridge.api.state import router as state_router
from monitoring_bridge.core.config import Settings
from monitoring_bridge.middleware.api_key import ApiKeyMiddleware
from monitoring_bridge.middleware.cors import CorsMiddleware
from monitoring_bridge.middleware.errors import ErrorEnvelopeMiddleware
from monitoring_bridge.middleware.metrics import MetricsMiddleware
from monitoring_bridge.middleware.path import LowercasePathMiddleware
from monitoring_bridge.middleware.request_context import RequestContextMiddleware
from monitoring_bridge.services.state_provider import (
    InstrumentedStateProvider,
    StateProvider,
    load_state_provider,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    yield
    # Shutdown: the listener is already closed; release the provider.
    app.state.state_provider.close()
    logger.info("State provider closed")


def create_app(
    settings: Settings,
    provider: StateProvider | None = None,
) -> FastAPI:
    """Build the bridge application.

    ``provider`` defaults to whatever the settings describe (see
    load_state_provider); tests and the CLI entrypoint pass their own.
    """
    if provider is None:
        provider = load_state_provider(settings)

    app = FastAPI(
        title="gt-monitoring-bridge",
        version=SERVICE_VERSION,
        lifespan=lifespan,
        # Paths are matched exactly; "/health/" is a 404, not a redirect.
        redirect_slashes=False,
        docs_url="/docs" if settings.is_dev else None,
        redoc_url="/redoc" if settings.is_dev else None,
        openapi_url="/openapi.json" if settings.is_dev else None,
    )
    app.state.settings = settings
    app.state.state_provider = InstrumentedStateProvider(provider)

    # Middleware execution order: last-added runs first (outermost layer).
    # LowercasePath → RequestContext → Metrics → ApiKey → Cors → ErrorEnvelope
    # → route handler.  A 401 therefore carries no CORS headers, and a 500
    # from a handler does.
    app.add_middleware(ErrorEnvelopeMiddleware)
    app.add_middleware(CorsMiddleware)
    app.add_middleware(ApiKeyMiddleware, api_key=settings.api_key)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(LowercasePathMiddleware)

    app.add_exception_handler(StarletteHTTPException, not_found_handler)  # type: ignore[arg-type]

    app.include_router(health_router)
    app.include_router(state_router)
    app.include_router(metrics_router)
    app.include_router(prometheus_router)

    return app
