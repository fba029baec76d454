import logging
import re
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog
from prometheus_fastapi_instrumentator import Instrumentator

from wander.api import chats, itinerary, share, users
from wander.core.ai import AIClient
from wander.core.errors import PersistenceError, UpstreamServiceError, WanderError
from wander.core.geocoding import Geocoder
from wander.core.rate_limit import limiter
from wander.core.settings import Settings, get_settings
from wander.db.session import DatabaseManager
from wander.middleware.logging import RequestLoggingMiddleware

API_VERSION = "1.0.0"

_BEARER_TOKEN = re.compile(r'(Bearer\s+)[A-Za-z0-9\-_.=]+', re.IGNORECASE)
_SECRET_QUERY_PARAM = re.compile(r'([?&](?:key|access_token)=)[^&\s]+')
_PROVIDER_KEY = re.compile(r'\b(?:gsk|sk)_[0-9A-Za-z]{16,}|\bsk-[0-9A-Za-z\-_]{16,}|AIza[0-9A-Za-z\-_]{35}')


def redact_secrets(logger, method_name, event_dict):
    """Scrub tokens and API keys from every string value before rendering"""

    def scrub(v):
        if isinstance(v, str):
            v = _BEARER_TOKEN.sub(r'\1REDACTED', v)
            v = _SECRET_QUERY_PARAM.sub(r'\1REDACTED', v)
            v = _PROVIDER_KEY.sub('REDACTED', v)
            return v
        if isinstance(v, list):
            return [scrub(x) for x in v]
        if isinstance(v, dict):
            return {k: scrub(vv) for k, vv in v.items()}
        return v

    for k, v in list(event_dict.items()):
        event_dict[k] = scrub(v)
    return event_dict


def configure_logging(settings: Settings) -> None:
    """Structured JSON logs to console and LOG_FILE"""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            redact_secrets,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handlers = [logging.StreamHandler()]
    if settings.LOG_FILE:
        handlers.append(logging.FileHandler(settings.LOG_FILE))

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format='%(message)s',  # structlog handles formatting
        handlers=handlers,
    )


settings = get_settings()
configure_logging(settings)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting application...")
    db_manager = DatabaseManager(settings)
    try:
        await db_manager.initialize()
        if settings.DB_AUTO_CREATE:
            await db_manager.init_db()
    except Exception:
        logger.exception("Failed to initialize database manager")
        raise

    app.state.db = db_manager
    app.state.ai = AIClient(settings)
    app.state.geocoder = Geocoder(settings)

    if not app.state.ai.configured:
        logger.warning("AI_API_KEY is not set; AI endpoints will return 503")
    if not app.state.geocoder.configured:
        logger.warning("MAPBOX_TOKEN is not set; AI itinerary endpoints will return 503")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    try:
        await app.state.ai.close()
        await db_manager.close()
        logger.info("Resources released")
    except Exception as e:
        logger.error(f"Error during shutdown: {e}")


app = FastAPI(
    title="Wander API",
    description="Map itineraries, AI trip drafts and travel assistant chat",
    version=API_VERSION,
    lifespan=lifespan
)

# Add rate limiter to app state
app.state.limiter = limiter

# Add request logging middleware
app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize Prometheus metrics instrumentation
Instrumentator().instrument(app).expose(app, endpoint="/metrics")


def error_body(message: str, code: str) -> dict:
    return {"error": message, "code": code}


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    logger.info("rate_limited", limit=exc.detail, path=request.url.path)
    response = JSONResponse(
        status_code=429,
        content=error_body(f"Rate limit exceeded: {exc.detail}", "rate_limited"),
    )
    return request.app.state.limiter._inject_headers(
        response, getattr(request.state, "view_rate_limit", None)
    )


@app.exception_handler(WanderError)
async def wander_error_handler(request: Request, exc: WanderError):
    if isinstance(exc, (PersistenceError, UpstreamServiceError)):
        logger.error(
            "request_failed",
            error=exc.message,
            code=exc.code,
            path=request.url.path,
            exc_info=exc,
        )
    else:
        logger.info("request_rejected", status_code=exc.status_code, code=exc.code)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, exc.code))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    if location:
        message = f"{location}: {message}"
    return JSONResponse(status_code=400, content=error_body(message, "invalid_request"))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail), "http_error"),
        headers=getattr(exc, "headers", None),
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
        exc_info=True
    )
    return JSONResponse(
        status_code=500,
        content=error_body("Internal server error", "internal_error")
    )


@app.get("/")
def root():
    return {"status": "API active", "version": API_VERSION}


@app.get("/health")
async def health_check_detailed(request: Request):
    """Detailed health check endpoint"""
    db_manager = getattr(request.app.state, "db", None)
    if db_manager is None:
        db_status = "unavailable"
    else:
        db_health = await db_manager.health_check()
        db_status = db_health["status"]

    return {
        "status": "healthy" if db_status == "healthy" else "degraded",
        "version": API_VERSION,
        "components": {
            "database": db_status,
            "ai": "configured" if getattr(request.app.state, "ai", None) and request.app.state.ai.configured else "not_configured",
            "geocoding": "configured" if getattr(request.app.state, "geocoder", None) and request.app.state.geocoder.configured else "not_configured",
            "api": "healthy"
        },
        "timestamp": datetime.now(timezone.utc).isoformat()
    }

prefix = "/api/v1"

# Include API routers
app.include_router(users.router, prefix=prefix)
app.include_router(itinerary.router, prefix=prefix)
app.include_router(share.router, prefix=prefix)
app.include_router(chats.router, prefix=prefix)
