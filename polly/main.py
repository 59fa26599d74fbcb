"""Main FastAPI application."""
from fastapi import FastAPI, Request, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi import HTTPException
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.orm import Session
from sqlalchemy import text

from polly.api.v1.router import api_router
from polly.api.deps import get_db
from polly.core.config import settings
from polly.core.rate_limit import limiter
from polly.core.logging_config import setup_logging, get_logger
from polly.core.cache import global_cache
from polly.core.errors import PollyError, RedirectRequired
from polly.middleware import LoggingMiddleware, SessionMiddleware

setup_logging(level=settings.LOG_LEVEL, json_logs=settings.ENVIRONMENT == "production")
logger = get_logger(__name__)

if settings.ENVIRONMENT == "production":
    settings.validate_production_config()

logger.info(
    "application_starting",
    app_title=settings.APP_TITLE,
    app_version=settings.APP_VERSION,
    environment=settings.ENVIRONMENT,
)

app = FastAPI(
    title=settings.APP_TITLE,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(RedirectRequired)
async def redirect_required_handler(request: Request, exc: RedirectRequired):
    """Page-level guard failures become a 303 to the location they name."""
    logger.info("guard_redirect", location=exc.location, reason=exc.reason)
    return RedirectResponse(url=exc.location, status_code=303)


@app.exception_handler(PollyError)
async def polly_error_handler(request: Request, exc: PollyError):
    """Guard errors that escape a page handler; services normally return them."""
    return JSONResponse(status_code=400, content={"error": exc.message})


# Added first so it runs innermost: cookie writes land before logging sees the response
app.add_middleware(SessionMiddleware)
app.add_middleware(LoggingMiddleware)


@app.middleware("http")
async def add_api_version_header(request: Request, call_next):
    """Add X-API-Version header to all responses for version tracking."""
    response = await call_next(request)
    response.headers["X-API-Version"] = settings.APP_VERSION
    return response

# CORS middleware - configured for cookie-based auth
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,  # Required for cookies
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "X-Request-ID"],
    expose_headers=["X-Request-ID", "X-API-Version"],
)

app.include_router(api_router)


@app.get("/health")
async def health_check(db: Session = Depends(get_db)):
    """
    Health check endpoint.

    Returns status, environment, view cache size and database reachability.
    Returns 503 if the database is unreachable.
    """
    stats = global_cache.get_stats()
    health_status = {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "cache": {key: stats[key] for key in ("size", "max_size", "hits", "misses", "hit_rate_percent")},
        "database": {"status": "connected"},
    }

    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        health_status["status"] = "unhealthy"
        health_status["database"]["status"] = "error"
        logger.error("health_check_failed", error=str(e))
        raise HTTPException(status_code=503, detail=health_status)

    return health_status
