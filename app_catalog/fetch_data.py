"""
Data refresh job.

Builds the app catalog once and writes it to the JSON file the portfolio
front end reads at build time.

Usage:
    python -m app_catalog.fetch_data
"""

import asyncio
import logging
import sys
from typing import Optional

from dotenv import load_dotenv

from app_catalog.catalog import AppCatalogBuilder, write_catalog
from app_catalog.config import Settings

logger = logging.getLogger(__name__)


async def run(settings: Settings) -> int:
    """Build and write the catalog; returns the number of apps written."""
    async with AppCatalogBuilder(settings) as builder:
        catalog = await builder.build()

    path = write_catalog(catalog, settings.output_file)
    logger.info(f"Successfully saved {len(catalog.apps)} apps and {len(catalog.reviews)} reviews to {path}")
    return len(catalog.apps)


def main(settings: Optional[Settings] = None) -> int:
    load_dotenv()
    settings = settings or Settings()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    logger.info("Starting data fetch...")
    try:
        asyncio.run(run(settings))
    except Exception:
        logger.exception("Error in main fetch")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
