"""
FastAPI application entry point.

Configures the API with all routes, middleware, and error handling.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .v1.router import router as v1_router
from .deps import get_services, close_services
from .responses import ApiResponse, HTTP_422, envelope, status_name_for

logger = logging.getLogger(__name__)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)

SERVICE_NAME = "ecom-auth-api"
API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan manager."""
    logger.info("Starting E-commerce Auth API...")

    # Initialize services on startup
    get_services()
    logger.info("Services initialized")

    yield

    logger.info("Shutting down...")
    close_services()


app = FastAPI(
    title="E-commerce Auth API",
    description="Customer registration, login and password reset",
    version=API_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        errors.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))

    return envelope(
        status_code=HTTP_422,
        status_name=status_name_for(HTTP_422),
        message="; ".join(errors) or "Invalid request"
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return envelope(
        status_code=exc.status_code,
        status_name=status_name_for(exc.status_code),
        message=str(exc.detail),
        headers=getattr(exc, "headers", None)
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return envelope(
        status_code=500,
        status_name="INTERNAL_SERVER_ERROR",
        message="Internal server error"
    )


# Health check
@app.get("/health", tags=["System"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": SERVICE_NAME}


# Include API v1 routes
app.include_router(v1_router)


# Root endpoint
@app.get("/", tags=["System"], response_model=ApiResponse)
async def root():
    """API root endpoint."""
    return {
        "status": "SUCCESS",
        "message": "E-commerce Auth API",
        "data": {"version": API_VERSION, "docs": "/docs"}
    }
