from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from taskflow.core.exceptions import error_body, register_exception_handlers
from taskflow.core.logging import configure_logging, get_logger
from taskflow.core.middleware import RequestLoggingMiddleware
from taskflow.core.rate_limit import limiter
from taskflow.core.settings import settings
from taskflow.db import Base, engine, get_db, get_db_path
from taskflow.routers import auth, projects, stats, tasks

# Configure structured logging at module load
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.
    Handles startup and shutdown events.
    """
    # Startup
    import taskflow.models  # noqa: F401 - ensure models are imported for metadata

    logger.info("application_starting", environment=settings.environment)
    db_path = get_db_path()
    if db_path:
        logger.info("using_sqlite_database", path=db_path)
    else:
        logger.info("using_database", url=engine.url.render_as_string(hide_password=True))
    Base.metadata.create_all(bind=engine)
    logger.info("database_tables_created")

    yield  # Application is running

    # Shutdown
    logger.info("application_shutdown")


app = FastAPI(title="Taskflow Backend", version="0.1.0", lifespan=lifespan)

# ============================================================================
# CORS Middleware Configuration
# ============================================================================
# Разрешенные HTTP методы (явно)
ALLOWED_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"]

# Разрешенные заголовки (явно)
ALLOWED_HEADERS = ["Content-Type", "Authorization", "Accept", "Origin", "X-Request-ID"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=ALLOWED_METHODS,
    allow_headers=ALLOWED_HEADERS,
)

# ============================================================================
# Rate Limiting Middleware (SlowAPI)
# ============================================================================
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

# ============================================================================
# Request Logging Middleware (must be added after other middleware)
# ============================================================================
app.add_middleware(RequestLoggingMiddleware)

register_exception_handlers(app)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Обработчик ошибок rate limiting"""
    logger.info("rate_limit_exceeded", path=request.url.path, limit=str(exc.detail))
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=error_body(
            request, status.HTTP_429_TOO_MANY_REQUESTS, f"Rate limit exceeded. {exc.detail}", {}
        ),
    )


@app.get("/health")
def health_check():
    """Basic health check endpoint."""
    return {"status": "ok", "service": "taskflow-backend"}


@app.get("/health/ready")
def readiness_check(db=Depends(get_db)):
    """
    Readiness check - verifies database connectivity.
    Used by container orchestration for readiness probes.
    """
    try:
        # Simple query to verify DB connection
        db.execute(text("SELECT 1"))
        return {"status": "ready", "database": "connected"}
    except SQLAlchemyError as e:
        logger.warning("readiness_check_failed", error=str(e))
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "database": "disconnected", "error": str(e)},
        )


app.include_router(auth.router)
app.include_router(projects.router)
app.include_router(tasks.router)
app.include_router(stats.router)
