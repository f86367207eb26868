"""
App Catalog Service

FastAPI service exposing the developer's App Store catalog:
- App list via the iTunes Lookup API
- Screenshots scraped from App Store product pages (through CORS proxies)
- Recent favourable reviews from the per-country RSS feeds
- Full catalog build, optionally written to the front-end data file
"""

import logging
import os
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables
load_dotenv()

from app_catalog.catalog import AppCatalogBuilder, write_catalog
from app_catalog.config import Settings
from app_catalog.models.schemas import (
    AppCatalog,
    AppRecord,
    HealthResponse,
    ReviewRecord,
    ScrapedMedia,
)

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


# ============================================================================
# Configuration
# ============================================================================

settings = Settings()

# Service start time for uptime tracking
start_time = time.time()


def get_settings() -> Settings:
    return settings


async def get_builder(settings: Settings = Depends(get_settings)) -> AsyncIterator[AppCatalogBuilder]:
    """One builder (and HTTP client) per request."""
    async with AppCatalogBuilder(settings) as builder:
        yield builder


# ============================================================================
# Lifespan
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup resources."""
    logger.info(f"Starting App Catalog service for artist {settings.artist_id}...")
    yield
    logger.info("Shutting down App Catalog service...")


# ============================================================================
# FastAPI App
# ============================================================================

app = FastAPI(
    title="App Catalog Service",
    description="Developer app catalog with scraped screenshots and recent reviews",
    version=VERSION,
    lifespan=lifespan,
)

allowed_origins = os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        uptime_seconds=time.time() - start_time,
        version=VERSION,
    )


# ============================================================================
# App Endpoints
# ============================================================================

@app.get("/apps", response_model=list[AppRecord])
async def list_apps(language: str = "en", builder: AppCatalogBuilder = Depends(get_builder)):
    """List the developer's iOS apps for a UI language (no scraped details)."""
    logger.info(f"Listing apps for language {language}")
    return await builder.list_apps(language)


@app.get("/apps/{app_id}/screenshots", response_model=ScrapedMedia)
async def get_screenshots(
    app_id: int,
    country: Optional[str] = None,
    builder: AppCatalogBuilder = Depends(get_builder),
):
    """Screenshots and page rating scraped from the product page."""
    logger.info(f"Scraping screenshots for app {app_id}")
    return await builder.app_store.crawl_media(app_id, country)


@app.get("/apps/{app_id}/reviews", response_model=list[ReviewRecord], response_model_exclude_none=True)
async def get_reviews(app_id: int, builder: AppCatalogBuilder = Depends(get_builder)):
    """Most recent favourable reviews across the configured storefronts."""
    logger.info(f"Fetching reviews for app {app_id}")
    return await builder.reviews.crawl_reviews(app_id)


# ============================================================================
# Catalog Endpoints
# ============================================================================

@app.get("/catalog")
async def get_catalog(country: Optional[str] = None, builder: AppCatalogBuilder = Depends(get_builder)):
    """Build the full catalog without writing it."""
    logger.info("Building catalog")

    try:
        catalog: AppCatalog = await builder.build(country)
    except Exception as e:
        logger.exception("Error building catalog")
        raise HTTPException(status_code=500, detail=f"Failed to build catalog: {str(e)}")

    return catalog.to_json_dict()


@app.post("/catalog/refresh")
async def refresh_catalog(
    builder: AppCatalogBuilder = Depends(get_builder),
    settings: Settings = Depends(get_settings),
):
    """Build the catalog and write the front-end data file."""
    logger.info(f"Refreshing catalog file {settings.output_file}")

    try:
        catalog = await builder.build()
        path = write_catalog(catalog, settings.output_file)
    except Exception as e:
        logger.exception("Error refreshing catalog")
        raise HTTPException(status_code=500, detail=f"Failed to refresh catalog: {str(e)}")

    return {
        "output_file": str(path),
        "apps": len(catalog.apps),
        "reviews": len(catalog.reviews),
        "lastUpdated": catalog.last_updated,
    }


# ============================================================================
# Root
# ============================================================================

@app.get("/")
async def root():
    """Root endpoint with service info."""
    return {
        "service": "App Catalog Service",
        "version": VERSION,
        "status": "running",
        "artist_id": settings.artist_id,
        "endpoints": [
            "/health",
            "/apps",
            "/apps/{app_id}/screenshots",
            "/apps/{app_id}/reviews",
            "/catalog",
            "/catalog/refresh",
        ],
    }
