import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST, REGISTRY
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.db.mongodb import connect_to_mongo, close_mongo_connection
from app.core.exceptions import AppError
from app.core.logging_config import configure_logging
from app.api.v1.api import api_router
from app.core.setting import config
from app.modules.production.container import production_services

# Import Prometheus middleware
from app.core.monitoring.prometheus_middleware import PrometheusMiddleware

configure_logging(config.LOG_LEVEL, config.LOG_FORMAT)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    await connect_to_mongo()
    if config.SCHEDULER_ENABLED:
        production_services.scheduler.start()
    logger.info(f"{config.PROJECT_NAME} started ({config.ENVIRONMENT})")
    yield
    # Shutdown
    production_services.scheduler.shutdown()
    await close_mongo_connection()

app = FastAPI(
    title=config.PROJECT_NAME,
    version="1.0.0",
    openapi_url=f"{config.API_V1_STR}/openapi.json",
    lifespan=lifespan
)

# ============================================================================
# CORS Middleware
# ============================================================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================================
# Prometheus Middleware (Add BEFORE routes)
# ============================================================================
app.middleware("http")(PrometheusMiddleware())

# ============================================================================
# Exception Handlers
# ============================================================================
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Domain exceptions carry their own status code; routes never catch them."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        f"{'.'.join(str(part) for part in err['loc'] if part != 'body')}: {err['msg']}"
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={"success": False, "error": "; ".join(errors)},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error"},
    )

# ============================================================================
# Metrics Endpoint (Add BEFORE api_router to avoid conflicts)
# ============================================================================
@app.get("/metrics")
async def metrics():
    """
    Prometheus metrics endpoint
    This endpoint is scraped by Prometheus to collect metrics
    """
    return Response(
        content=generate_latest(REGISTRY),
        media_type=CONTENT_TYPE_LATEST
    )

# ============================================================================
# Health Check Endpoint
# ============================================================================
@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring
    """
    return {
        "status": "healthy",
        "service": config.PROJECT_NAME,
        "environment": config.ENVIRONMENT,
        "scheduler": production_services.scheduler.status()["initialized"],
    }

# ============================================================================
# API Router
# ============================================================================
app.include_router(api_router, prefix=config.API_V1_STR)

# ============================================================================
# Root Endpoint
# ============================================================================
@app.get("/")
async def root():
    return {
        "message": "Production Planning API",
        "docs": "/docs",
        "metrics": "/metrics",
        "health": "/health"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=config.PORT)
