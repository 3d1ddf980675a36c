"""
Prism Research Worker — FastAPI Application Factory

App creation, middleware (CORS, request ID logging), router registration.
Run with: python -m research_worker  (or uvicorn research_worker.main:app)
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from research_worker.api import research
from research_worker.config import ENGINE_NAME, ENGINE_VERSION, Settings, get_settings, log, utc_now_iso
from research_worker.models import HealthResponse, ServiceInfo


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Log the X-Request-Id header from every incoming request.

    The job store sends X-Request-Id with each dispatch so a failed job can be
    traced back to the call that started it.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-Id", "none")
        log(
            "INFO",
            "request received",
            method=request.method,
            path=request.url.path,
            request_id=request_id,
        )
        response = await call_next(request)
        return response


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Steps:
        1. Resolve settings (explicit argument wins, else environment)
        2. Create FastAPI instance with title, version, description
        3. Add CORS middleware (origins from settings.cors_origins)
        4. Add request ID logging middleware
        5. Register routers and the health/info endpoints
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=ENGINE_NAME,
        version=ENGINE_VERSION,
        description="Dual-phase deep market research powered by sonar-deep-research.",
    )
    app.state.settings = settings

    # CORS
    origins = [origin.strip() for origin in settings.cors_origins.split(",")]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request ID logging
    app.add_middleware(RequestIdMiddleware)

    # Routers
    app.include_router(research.router)

    @app.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """
        GET /health

        Returns: { "status": "ok", "engine", "version", "research_mode", "timestamp" }
        """
        return HealthResponse(
            status="ok",
            engine=ENGINE_NAME,
            version=ENGINE_VERSION,
            research_mode=settings.research_mode,
            timestamp=utc_now_iso(),
        )

    @app.get("/", response_model=ServiceInfo)
    async def service_info() -> ServiceInfo:
        return ServiceInfo(
            service=ENGINE_NAME,
            description=(
                "Dual-phase deep market research powered by sonar-deep-research"
                if settings.research_mode == "dual"
                else "Deep market research powered by sonar-deep-research"
            ),
            version=ENGINE_VERSION,
            endpoints=["/process-research", "/health"],
        )

    return app


app = create_app()
