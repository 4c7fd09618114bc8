# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Print Render API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload --port 8080
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import (
    PrintOrderException,
    print_order_exception_handler,
    validation_exception_handler,
)
from app.routers import admin, assets, checkout, health, tasks, webhooks

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs on startup and shutdown:
    - Startup: Log configuration
    - Shutdown: Log shutdown
    """
    # Startup
    logger.info(f"Starting Print Render API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    logger.info(f"Storage bucket: {settings.STORAGE_BUCKET}, render dispatch: {settings.RENDER_DISPATCH}")
    if not settings.STRIPE_WEBHOOK_SECRET:
        logger.warning("STRIPE_WEBHOOK_SECRET is not set; webhooks will be rejected")
    if not settings.admin_configured:
        logger.warning("ADMIN_USER/ADMIN_PASS not set; admin endpoints are disabled")

    yield

    # Shutdown
    logger.info("Shutting down Print Render API")


# Create FastAPI application
app = FastAPI(
    title="Print Render API",
    description="""
## Print Order Rendering

Turns a customer's cropped photo into print-ready production files.

### How It Works

1. **Upload** - The storefront gets a signed URL and uploads the image to `raw/`
2. **Checkout** - A Stripe checkout carries size, crop and image info as metadata
3. **Render** - The payment webhook queues a render: crop, 300 dpi raster, bleed PDF
4. **Fan out** - Files land in `prod/` and the print station's `hotfolder/`

### Output Keys

| File | Key |
|------|-----|
| Raster | `prod/<ms>_<w>x<h>.jpg` |
| Print PDF | `prod/print_<ms>_<w>x<h>_bleed<b>.pdf` |
| Hotfolder PDF | `hotfolder/print_<ms>_<w>x<h>_bleed<b>.pdf` |
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Webhooks",
            "description": "Stripe events that trigger renders",
        },
        {
            "name": "Assets",
            "description": "Signed uploads for source images",
        },
        {
            "name": "Checkout",
            "description": "Stripe checkout sessions with render metadata",
        },
        {
            "name": "Admin",
            "description": "Browse and download rendered files (Basic auth)",
        },
        {
            "name": "Tasks",
            "description": "Track render task progress",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# CORS middleware - allows cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(PrintOrderException)
async def handle_print_order_exception(request: Request, exc: PrintOrderException):
    """Handle custom API exceptions."""
    return await print_order_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_exception(request: Request, exc: RequestValidationError):
    """Handle request body validation errors."""
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Health check endpoints
app.include_router(
    health.router,
    prefix="/api/v1",
    tags=["Health"]
)

# Stripe webhook (no API prefix; registered with Stripe as /webhooks/stripe)
app.include_router(
    webhooks.router,
    prefix="/webhooks",
    tags=["Webhooks"]
)

# Source image upload endpoints
app.include_router(
    assets.router,
    prefix="/api/v1/assets",
    tags=["Assets"]
)

# Checkout endpoints
app.include_router(
    checkout.router,
    prefix="/api/v1/checkout",
    tags=["Checkout"]
)

# Admin file browser
app.include_router(
    admin.router,
    prefix="/api/v1/admin",
    tags=["Admin"]
)

# Task status endpoints
app.include_router(
    tasks.router,
    prefix="/api/v1/tasks",
    tags=["Tasks"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "Print Render API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
