"""FastAPI application entry point.

Seller catalog edit service for the Roastah marketplace.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from roastah import __version__
from roastah.config import settings
from roastah.core.preferences import get_preference_store
from roastah.core.product_cache import get_product_cache
from roastah.errors import AuthenticationRequiredError, RoastahError
from roastah.infra.database import close_db_engine, get_db_session
from roastah.infra.logging import get_logger, setup_logging
from roastah.services.edit_surface import get_edit_surface

# Import routers
from roastah.api.routes.health import router as health_router
from roastah.api.routes.preferences import router as preferences_router
from roastah.api.routes.products import router as products_router

# Setup logging first
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler.

    Startup:
    - Load UI preferences into memory

    Shutdown:
    - Close the catalog client
    - Close database connections
    - Clear the product cache
    """
    logger.info(
        "Roastah edit service starting",
        environment=settings.environment,
        catalog_api_url=settings.catalog_api_url,
    )

    try:
        async with get_db_session() as session:
            await get_preference_store().load(session)
    except Exception as e:
        logger.warning("Failed to load UI preferences", error=str(e))

    yield

    logger.info("Roastah edit service shutting down")

    await get_edit_surface().close()
    await close_db_engine()
    await get_product_cache().clear()
    logger.info("Cleanup complete")


# Create FastAPI app
app = FastAPI(
    title="Roastah Edit Service",
    description="Seller product catalog editing for the Roastah marketplace",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if settings.environment == "dev" else None,
    redoc_url=None,
)

# CORS middleware (mainly for local development)
if settings.environment == "dev":
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# =============================================================================
# Exception Handlers
# =============================================================================


@app.exception_handler(AuthenticationRequiredError)
async def authentication_exception_handler(
    request: Request, exc: AuthenticationRequiredError
) -> JSONResponse:
    """Send the seller back to login instead of failing silently."""
    logger.info("Authentication required", path=request.url.path)

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.message,
            "error_type": type(exc).__name__,
            "detail": {"redirect_to": exc.login_url},
        },
    )


@app.exception_handler(RoastahError)
async def roastah_exception_handler(request: Request, exc: RoastahError) -> JSONResponse:
    """Translate per-action failures into user-visible error responses."""
    logger.warning(
        "Request failed",
        error=exc.message,
        error_type=type(exc).__name__,
        status_code=exc.status_code,
        path=request.url.path,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.message,
            "error_type": type(exc).__name__,
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions."""
    logger.error(
        "Unhandled exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        exc_info=True,
    )

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "error_type": type(exc).__name__,
        },
    )


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(health_router, tags=["Health"])
app.include_router(products_router, prefix="/seller/products", tags=["Products"])
app.include_router(preferences_router, prefix="/preferences", tags=["Preferences"])


# =============================================================================
# Root Endpoint
# =============================================================================


@app.get("/")
async def root() -> dict:
    """Root endpoint - basic service info."""
    return {
        "service": "Roastah Edit Service",
        "version": __version__,
        "environment": settings.environment,
    }
