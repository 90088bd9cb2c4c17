from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from meetbook.core.config import settings
from meetbook.core.errors import BookingError
from meetbook.api import router as api_router
from meetbook.core.db import create_tables
from meetbook.core import models as _models
import logging

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="meetbook",
    version="1.0.0",
    description="Appointment booking with verified email and race-safe slot reservation",
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=(
        settings.ALLOWED_ORIGINS.split(",") if settings.ALLOWED_ORIGINS else []
    ),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Missing or malformed input is a client error"""
    logger.warning(f"Validation error: {exc.errors()}")
    fields = sorted({".".join(str(p) for p in e["loc"][1:]) for e in exc.errors() if len(e["loc"]) > 1})
    message = "Missing or invalid fields"
    if fields:
        message = f"{message}: {', '.join(fields)}"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all handler for unexpected exceptions"""
    logger.error(f"Unexpected error: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


@app.on_event("startup")
async def startup_event():
    """Initialize application on startup"""
    logger.info("Starting meetbook")
    # In production, use Alembic migrations instead of create_tables
    if settings.ENVIRONMENT == "development":
        # models imported so metadata includes all tables
        _ = _models
        create_tables()


@app.get("/health")
async def health_check():
    """Liveness probe for load balancers"""
    return {"status": "healthy", "version": "1.0.0", "service": "meetbook-api"}


# Include API routes
app.include_router(api_router, prefix="/api/v1")
app.include_router(api_router, prefix="/api")
