"""
Name: FastAPI Application Entry Point

Responsibilities:
  - Initialize FastAPI application with metadata (title, version)
  - Configure middleware (CORS, request context)
  - Mount the provisioning router under /v1 plus the compatibility path
    /functions/v1/create-user
  - Expose health check and metrics endpoints

Collaborators:
  - FastAPI: ASGI web framework
  - CORSMiddleware: Cross-Origin Resource Sharing handler
  - RequestContextMiddleware: Request ID and logging context
  - interfaces.api.http.router: provisioning endpoints

Constraints:
  - CORS configurable via ALLOWED_ORIGINS env var (comma-separated, "*" by default)
  - Test environments (APP_ENV=test) never open a DB pool

Notes:
  - Middleware order matters: RequestContext → CORS → routes
  - /healthz follows Kubernetes health check convention
  - /metrics exposes Prometheus metrics
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from ..container import get_user_profile_repository
from ..crosscutting.config import get_settings
from ..crosscutting.logger import configure_from_settings, logger
from ..crosscutting.metrics import get_metrics_response
from ..crosscutting.middleware import REQUEST_ID_HEADER, RequestContextMiddleware
from ..infrastructure.db.pool import close_pool, init_pool_from_settings
from ..interfaces.api.http.router import router
from ..interfaces.api.http.routers import compat_router
from .exception_handlers import register_exception_handlers

CORS_ALLOWED_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle. Configures logging and initializes pool."""
    settings = get_settings()
    configure_from_settings(settings)

    if settings.is_test():
        logger.info("Provisioning API starting up (in-memory adapters)")
        yield
        return

    init_pool_from_settings(settings)

    try:
        logger.info(
            "Provisioning API starting up",
            extra={
                "lead_scope_rule": settings.lead_scope_rule,
                "require_caller_active": settings.require_caller_active,
                "pending_status": settings.pending_status,
                "db_pool_min": settings.db_pool_min_size,
                "db_pool_max": settings.db_pool_max_size,
            },
        )
        yield
    finally:
        close_pool()
        logger.info("Provisioning API shutting down")


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="Office Provisioning API",
        version="0.1.0",
        lifespan=lifespan,
        openapi_tags=[
            {
                "name": "users",
                "description": "Subordinate account creation (Bearer JWT)",
            },
        ],
    )

    # R: Middleware order (bottom = first to execute):
    # 1. CORSMiddleware - handles preflight
    # 2. RequestContextMiddleware - sets request_id
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_allowed_origins_list(),
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=CORS_ALLOWED_HEADERS,
        expose_headers=[REQUEST_ID_HEADER],
    )

    app.include_router(router, prefix="/v1")
    app.include_router(compat_router)

    register_exception_handlers(app)

    @app.get("/healthz")
    def healthz(request: Request):
        """
        R: Health check against the profile store.

        Returns:
            ok: True if the profile store answers
            db: "connected" or "disconnected"
            request_id: Correlation ID for this request
        """
        db_status = "disconnected"
        try:
            if get_user_profile_repository().ping():
                db_status = "connected"
        except Exception as e:
            logger.warning("Health check: DB unavailable", extra={"error": str(e)})

        return {
            "ok": db_status == "connected",
            "db": db_status,
            "request_id": getattr(request.state, "request_id", None),
        }

    @app.get("/metrics")
    def metrics():
        """R: Expose Prometheus metrics (text format)."""
        body, content_type = get_metrics_response()
        return Response(content=body, media_type=content_type)

    return app


app = create_app()
