import logging
import time
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.middleware.base import BaseHTTPMiddleware
from slowapi.errors import RateLimitExceeded
from prometheus_fastapi_instrumentator import Instrumentator

from app.core.config import settings
from app.api.routes import api_router
from app.db.session import check_db_connection
from app.core.logging_config import SERVICE_NAME, setup_logging, RequestLoggingMiddleware
from app.core.rate_limiter import limiter, rate_limit_exceeded_handler
from app.core.shutdown import lifespan_manager, RequestTrackingMiddleware

setup_logging()
logger = logging.getLogger("employees")

SERVICE_VERSION = "1.0.0"

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.update(SECURITY_HEADERS)
        return response


class ErrorResponse(BaseModel):
    """Body of every 500 the service returns."""
    error: str
    detail: str | None = None
    timestamp: str
    path: str | None = None


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    environment: str
    checks: dict[str, bool]


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="CRUD API for employee records with cached reads and a message publishing endpoint",
    version=SERVICE_VERSION,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan_manager,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Turn anything unhandled into a 500. Production responses carry only a
    reference id that matches the logged traceback.
    """
    now = datetime.now(timezone.utc)
    reference = now.strftime("%Y%m%d%H%M%S%f")
    logger.error(
        f"Unhandled {exc.__class__.__name__} [{reference}] on {request.method} {request.url.path}: {exc}",
        exc_info=exc,
    )

    if settings.IS_PRODUCTION:
        error, detail = "Internal server error", f"An unexpected error occurred. Reference ID: {reference}"
    else:
        error, detail = exc.__class__.__name__, str(exc)

    body = ErrorResponse(error=error, detail=detail, timestamp=now.isoformat(), path=request.url.path)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body.model_dump())


# Last added runs first: request logging wraps everything else
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestTrackingMiddleware)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router, prefix=settings.API_PREFIX)

Instrumentator(
    should_group_status_codes=False,
    should_ignore_untemplated=True,
    excluded_handlers=["/health", "/metrics"],
).instrument(app).expose(app, include_in_schema=False)


# Last cache probe result, reused for a short window
_health_cache: dict[str, dict] = {
    "cache": {"healthy": None, "timestamp": 0},
}
_HEALTH_CACHE_TTL = 15  # seconds


async def check_cache_connection() -> bool:
    now = time.time()
    last = _health_cache["cache"]
    if last["healthy"] is not None and now - last["timestamp"] < _HEALTH_CACHE_TTL:
        return last["healthy"]

    try:
        from app.core.cache import get_cache
        healthy = await (await get_cache()).ping()
    except Exception as e:
        logger.warning(f"Cache health check failed: {e}")
        healthy = False

    _health_cache["cache"] = {"healthy": healthy, "timestamp": now}
    return healthy


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Returns 503 when the database or the cache backend is unreachable.
    """
    checks = {
        "database": await check_db_connection(),
        "cache": await check_cache_connection(),
    }
    healthy = all(checks.values())
    report = HealthResponse(
        status="healthy" if healthy else "unhealthy",
        service=SERVICE_NAME,
        version=SERVICE_VERSION,
        environment=settings.ENVIRONMENT,
        checks=checks,
    )
    if healthy:
        return report

    logger.warning(f"Health check failed: {checks}")
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=report.model_dump())


@app.get("/")
async def root():
    return {"message": f"Welcome to the {settings.PROJECT_NAME} API"}
