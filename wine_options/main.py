"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import router
from .config import get_settings
from . import __version__

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - handles startup and shutdown."""
    # Startup
    logger.info("Starting Wine Options API...")
    settings = get_settings()

    if settings.vision_api_key:
        logger.info("Vision OCR configured")
    else:
        logger.warning("Vision OCR not configured - /ocr-label will fail, /rounds still works")
    logger.info(f"Catalog at {settings.catalog_url} (table '{settings.catalog_table}')")

    logger.info(f"API ready - Version {__version__}")

    yield

    # Shutdown
    logger.info("Shutting down Wine Options API...")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="""
## Wine Options - Label Quiz API

Turns a photographed wine label into a blind-tasting style quiz.

### Features
- **Label Hints**: Vintage / NV and grape variety inferred from OCR text
- **Candidate Match**: Best-effort lookup of the wine in the catalog
- **Questions**: World, Variety, Vintage, Country, Region and Sub-region
- **Scoring**: Exact-match scoring with optional points award

### Quick Start
1. Use `/health` to check API status
2. Use `/rounds` with pasted label text, or `/ocr-label` with a stored photo
3. Use `/score` to score the player's picks
        """,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Configure CORS - restrict to allowed frontend origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    # Include routes
    app.include_router(router, prefix="/api/v1")

    # Root redirect to docs
    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": "Wine Options API",
            "version": __version__,
            "docs": "/docs"
        }

    return app


# Create app instance
app = create_app()
