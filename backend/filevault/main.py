"""FastAPI application entry point"""
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi.errors import RateLimitExceeded

from filevault import __version__
from filevault.api import auth, files, health
from filevault.config import settings
from filevault.errors import FileVaultError, InfrastructureError
from filevault.middleware.rate_limit import limiter
from filevault.schemas.common import error_body
from filevault.utils.logger import logger, setup_logging

# Setup logging
setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    # Startup
    Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
    logger.info("FileVault backend starting up", extra={
        "version": __version__,
        "environment": settings.HOST,
        "log_level": settings.LOG_LEVEL,
        "rate_limiting": settings.RATE_LIMIT_ENABLED,
        "monitoring": settings.METRICS_ENABLED,
    })
    yield
    # Shutdown
    logger.info("FileVault backend shutting down")


# Create FastAPI app
app = FastAPI(
    title="FileVault",
    description="Per-device token sessions and owner-scoped file storage",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# ===== Middleware Setup =====

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Monitoring middleware
if settings.METRICS_ENABLED:
    from filevault.middleware.monitoring import MonitoringMiddleware
    app.add_middleware(MonitoringMiddleware)

    # Prometheus metrics
    instrumentator = Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        should_respect_env_var=True,
        should_instrument_requests_inprogress=True,
        excluded_handlers=[settings.METRICS_PATH, "/health", "/health/ready", "/health/live"],
        inprogress_name="filevault_requests_inprogress",
        inprogress_labels=True,
    )
    instrumentator.instrument(app)
    instrumentator.expose(app, endpoint=settings.METRICS_PATH, include_in_schema=False)

# Rate limiting (per-route decorators in api/auth.py)
app.state.limiter = limiter

# ===== Route Setup =====

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(files.router)


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "service": "FileVault",
        "version": __version__,
        "status": "operational",
        "docs": "/docs",
        "health": "/health",
        "metrics": settings.METRICS_PATH if settings.METRICS_ENABLED else None,
    }


# ===== Error Handlers =====

@app.exception_handler(FileVaultError)
async def filevault_error_handler(request: Request, exc: FileVaultError):
    """Map taxonomy errors onto the standard envelope"""
    message = exc.message
    if isinstance(exc, InfrastructureError):
        logger.error(
            f"Infrastructure failure: {type(exc).__name__}",
            extra={"path": request.url.path, "method": request.method},
            exc_info=exc,
        )
        # Never leak store details to clients
        message = InfrastructureError.message

    return JSONResponse(status_code=exc.status_code, content=error_body(message, code=exc.code))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies, params and path ids are 400s"""
    errors = [
        {"field": ".".join(str(part) for part in error.get("loc", ())), "message": error.get("msg")}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=jsonable_encoder(error_body("Validation failed", errors=errors)),
    )


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Handle rate limit exceeded errors"""
    logger.warning(
        "Rate limit exceeded",
        extra={
            "path": request.url.path,
            "method": request.method,
            "client": request.client.host if request.client else "unknown",
        },
    )
    return JSONResponse(
        status_code=429,
        content=error_body("Too many requests. Please try again later.", code="RATE_LIMITED"),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for uncaught errors"""
    logger.error(
        f"Unhandled exception: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
        },
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content=error_body("An unexpected error occurred"),
    )
