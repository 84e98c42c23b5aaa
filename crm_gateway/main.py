import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from .config import Settings, get_settings
from .log import configure_logging
from .auth.exceptions import CRMGatewayError
from .auth.service import SessionAuthenticator
from .auth.router import router as auth_router
from .gateway.exceptions import DownstreamUnavailableError
from .gateway.router import router as gateway_router
from .directory.router import router as directory_router
from .health.router import router as health_router
from .ratelimit import RateLimitConfig, RateLimitExceededError, SlidingWindowRateLimiter
from .registry import ToolRegistry

logger = structlog.get_logger("app")


def create_app(settings: Settings | None = None, registry: ToolRegistry | None = None) -> FastAPI:
    """Build the gateway application.

    Args:
        settings: Settings override (defaults to environment settings).
        registry: Pre-built tool registry (defaults to the YAML catalog).
    """
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup: load the catalog and create the process-local state
        app.state.tool_registry = (
            registry if registry is not None else ToolRegistry.from_config(settings.TOOLS_CONFIG_PATH or None)
        )
        app.state.rate_limiter = SlidingWindowRateLimiter(RateLimitConfig(
            max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
            window_ms=settings.RATE_LIMIT_WINDOW_MS,
        ))

        # timeouts=None removes global default timeout, allowing per-request timeouts
        app.state.http_client = httpx.AsyncClient(timeout=None)
        logger.info("gateway_started", tools=len(app.state.tool_registry))

        yield

        # Shutdown: drop rate-limit windows and close the HTTP client
        app.state.rate_limiter.reset()
        await app.state.http_client.aclose()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        lifespan=lifespan,
        debug=settings.DEBUG,
    )
    app.state.settings = settings
    app.state.authenticator = SessionAuthenticator(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    # Global exception handlers
    @app.exception_handler(RateLimitExceededError)
    async def rate_limit_handler(request: Request, exc: RateLimitExceededError):
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_content(),
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(DownstreamUnavailableError)
    async def downstream_unavailable_handler(request: Request, exc: DownstreamUnavailableError):
        logger.error("downstream_unavailable", path=request.url.path, url=exc.url, reason=exc.reason)
        return JSONResponse(status_code=exc.status_code, content=exc.to_content())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={"error": "VALIDATION_ERROR", "message": "Invalid request", "errors": errors},
        )

    @app.exception_handler(CRMGatewayError)
    async def gateway_exception_handler(request: Request, exc: CRMGatewayError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_content())

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error("unhandled_exception", path=request.url.path, error=str(exc), exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"error": "INTERNAL_ERROR", "message": "Internal Server Error"},
        )

    @app.get("/")
    async def root():
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "description": "Gateway to the CRM platform's MCP tools",
            "endpoints": {
                "mcp": "/mcp",
                "auth": "/auth",
                "directory": "/directory",
                "health": "/health",
            },
        }

    # Include routers
    app.include_router(auth_router)
    app.include_router(gateway_router)
    app.include_router(directory_router)
    app.include_router(health_router)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run("crm_gateway.main:app", host="0.0.0.0", port=settings.PORT)
