"""FastAPI application entrypoint for the EduSphere accounts service."""
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import time
import uuid

from edusphere import __version__
from edusphere.api.deps import Services, build_services
from edusphere.api.errors import error_response, register_exception_handlers
from edusphere.api.routes import router
from edusphere.core.config import settings
from edusphere.core.logging import get_logger, setup_logging

# Initialize structured logging
setup_logging(level=settings.log_level, json_format=settings.is_production)
logger = get_logger(__name__)

APP_NAME = "EduSphere Accounts"


def create_app(services: Optional[Services] = None) -> FastAPI:
    """Build the application around a service container.

    Args:
        services: Pre-built container (tests); built from settings when None
    """
    app = FastAPI(
        title=APP_NAME,
        description="Signup, login and credential lifecycle for EduSphere",
        version=__version__,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
    )
    app.state.services = services or build_services(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log every request with timing and status code."""
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        request_logger = get_logger(__name__, {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
        })

        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.time() - start_time) * 1000
            request_logger.error(
                f"Request failed: {request.method} {request.url.path}",
                extra={"duration_ms": round(duration_ms, 2)},
                exc_info=True
            )
            response = error_response(500, "Internal server error", "server_error")
            response.headers["X-Request-ID"] = request_id
            return response

        duration_ms = (time.time() - start_time) * 1000
        request_logger.info(
            f"Request completed: {request.method} {request.url.path}",
            extra={
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            }
        )

        response.headers["X-Request-ID"] = request_id
        return response

    register_exception_handlers(app)
    app.include_router(router, prefix=settings.api_prefix)

    @app.get("/")
    def root():
        """Root endpoint with basic service info."""
        return {
            "service": APP_NAME,
            "version": __version__,
            "status": "running",
            "environment": settings.environment
        }

    @app.get("/health")
    def health_check():
        """Liveness probe."""
        return {"status": "healthy", "version": __version__}

    @app.get("/ready")
    def readiness_check():
        """Readiness probe: reports whether the token cache answers."""
        cache = app.state.services.cache
        ping = getattr(cache, "ping", None)
        cache_ok = bool(ping()) if ping else True
        return {
            "status": "ready" if cache_ok else "degraded",
            "checks": {"cache": type(cache).__name__ if cache_ok else "error"},
        }

    logger.info("Application configured", extra={"endpoint": settings.api_prefix})
    return app


app = create_app()
