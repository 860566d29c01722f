"""
FastAPI application entry point for the App Benchmark API.

This module configures logging, CORS, rate limiting and error handling,
registers the API routers, and loads the reference table once at startup.

Error mapping:
- ValidationError and malformed request bodies -> HTTP 400
- Rate limit exceeded -> HTTP 429
- ComputationError -> HTTP 500
All error bodies share the shape { success: false, error, message, details }.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from appbench import __version__
from appbench.api import api_router
from appbench.core.config import Settings, get_settings
from appbench.core.exceptions import BenchmarkError, ComputationError, ValidationError
from appbench.core.rate_limit import RateLimiter, get_client_ip
from appbench.models.schemas import ErrorResponse, FieldError, HealthResponse
from appbench.services.reference_data import load_reference_table


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)

# Paths throttled by the rate limiter
RATE_LIMITED_PREFIX = "/api/"


def error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[List[FieldError]] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    body = ErrorResponse(error=error, message=message, details=details or [])
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"), headers=headers)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI application startup and shutdown events.

    On startup:
        - Load the reference table (built-in or BENCHMARK_DATA_PATH)
        - Store it on app.state for read-only injection into handlers

    On shutdown:
        - Log shutdown message
    """
    settings: Settings = app.state.settings
    logger.info("App Benchmark API starting")
    try:
        app.state.reference_table = load_reference_table(settings.benchmark_data_path)
    except Exception as e:
        logger.error(f"Failed to load reference table: {e}")
        raise

    yield

    logger.info("App Benchmark API shutting down")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Explicit settings; defaults to the cached get_settings().
    """
    settings = settings or get_settings()

    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT)

    app = FastAPI(
        title="App Benchmark API",
        version=__version__,
        description=(
            "Compares subscription-app price, conversion rate, LTV and refund rate "
            "with industry benchmarks and returns rule-based recommendations."
        ),
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.rate_limiter = RateLimiter(
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_ms / 1000,
    )

    @app.middleware("http")
    async def rate_limit(request: Request, call_next):
        if request.method != "OPTIONS" and request.url.path.startswith(RATE_LIMITED_PREFIX):
            client_ip = get_client_ip(request, request.app.state.settings.trust_proxy_headers)
            allowed, retry_after = request.app.state.rate_limiter.is_allowed(client_ip)
            if not allowed:
                logger.warning(f"Rate limit exceeded for {client_ip} on {request.url.path}")
                return error_response(
                    429,
                    "RateLimitExceeded",
                    "Too many requests, please try again later",
                    headers={"Retry-After": str(retry_after)},
                )
        return await call_next(request)

    # Outermost: 429 responses also carry CORS headers.
    # Credentials cannot be combined with a wildcard origin.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return error_response(
            400,
            exc.error_code,
            exc.message,
            [FieldError(**detail) for detail in exc.details],
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = [
            FieldError(
                field=".".join(str(part) for part in err.get("loc", ())) or "body",
                message=err.get("msg", "invalid value"),
            )
            for err in exc.errors()
        ]
        logger.warning(f"{request.method} {request.url.path} rejected: malformed request")
        return error_response(400, ValidationError.error_code, "Malformed request", details)

    @app.exception_handler(ComputationError)
    async def handle_computation_error(request: Request, exc: ComputationError) -> JSONResponse:
        return error_response(500, exc.error_code, "Internal server error")

    @app.exception_handler(BenchmarkError)
    async def handle_benchmark_error(request: Request, exc: BenchmarkError) -> JSONResponse:
        logger.error(f"Unhandled {exc.error_code}: {exc.message}")
        return error_response(500, exc.error_code, "Internal server error")

    app.include_router(api_router, prefix="/api")

    @app.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """
        Health check endpoint for monitoring and load balancer probes.
        """
        return HealthResponse(status="ok", timestamp=datetime.now(timezone.utc))

    @app.get("/")
    async def root():
        """
        Root endpoint providing API information.
        """
        return {
            "name": "App Benchmark API",
            "version": __version__,
            "docs": "/docs",
            "openapi": "/openapi.json",
        }

    return app


app = create_app()


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "appbench.main:app",
        host="0.0.0.0",
        port=3001,
        reload=True,
    )
