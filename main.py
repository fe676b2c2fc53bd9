"""FastAPI application entrypoint for Smart Learning Pathways.

Production-ready configuration for Google Cloud Run deployment.
"""
import sys

# Ensure UTF-8 encoding
if sys.stdout:
    sys.stdout.reconfigure(encoding='utf-8')

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
import time
import uuid

from pathways.api.routes import router
from pathways.core.logging import get_logger, setup_logging
from pathways.core.config import settings
from pathways.infrastructure.repositories import get_document_store
from pathways.infrastructure.store import InMemoryDocumentStore

# Initialize structured logging
log_format = settings.environment == "production"
setup_logging(level=settings.log_level, json_format=log_format)
logger = get_logger(__name__)

# Application metadata
APP_VERSION = "1.0.0"
APP_NAME = "Smart Learning Pathways"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up", extra={"operation": "startup"})
    yield
    logger.info("Application shutting down", extra={"operation": "shutdown"})


app = FastAPI(
    title=APP_NAME,
    description="Assessment analytics and AI learning recommendations for teachers",
    version=APP_VERSION,
    docs_url="/docs" if settings.environment != "production" else None,
    redoc_url="/redoc" if settings.environment != "production" else None,
    lifespan=lifespan,
)

cors_origins = settings.cors_origins.copy()
if settings.environment == "production":
    cors_origins.extend([
        "https://*.run.app",  # Cloud Run domains
    ])

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every request with timing and status code."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    logger.info(
        f"Request started: {request.method} {request.url.path}",
        extra={
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
        }
    )

    try:
        response = await call_next(request)
        duration_ms = (time.time() - start_time) * 1000

        logger.info(
            f"Request completed: {request.method} {request.url.path}",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            }
        )

        response.headers["X-Request-ID"] = request_id
        return response

    except Exception as e:
        duration_ms = (time.time() - start_time) * 1000
        logger.error(
            f"Request failed: {request.method} {request.url.path}",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "duration_ms": round(duration_ms, 2),
                "error_type": type(e).__name__,
            },
            exc_info=True
        )
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "request_id": request_id}
        )


app.include_router(router)


@app.get("/")
def root():
    """Root endpoint with basic service info."""
    return {
        "service": APP_NAME,
        "version": APP_VERSION,
        "status": "running",
        "environment": settings.environment
    }


@app.get("/health")
def health_check():
    """Liveness probe. Returns 200 while the process is serving requests."""
    return {
        "status": "healthy",
        "version": APP_VERSION,
        "checks": {
            "api": "ok",
            "ai": "ok" if settings.gemini_api_key or settings.ai_provider == "vertex" else "key_per_request"
        }
    }


@app.get("/ready")
def readiness_check():
    """Readiness probe: configuration is valid and the document store answers."""
    checks = {"storage_backend": settings.storage_backend}

    try:
        settings.validate_required_settings()
        checks["config"] = "ok"
    except ValueError as e:
        checks["config"] = f"error: {e}"

    store = get_document_store()
    if isinstance(store, InMemoryDocumentStore):
        checks["store"] = "memory" if settings.storage_backend == "memory" else "fallback_memory"
    else:
        try:
            store.redis.ping()
            checks["store"] = "ok"
        except Exception:
            checks["store"] = "unreachable"

    all_ok = checks["config"] == "ok" and checks["store"] in ("ok", "memory")

    return {
        "status": "ready" if all_ok else "degraded",
        "checks": checks
    }
