"""Assemble the developer's app catalog from the Lookup API, product pages and review feeds."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Iterable, Optional

from app_catalog.config import Settings
from app_catalog.crawlers.app_store import AppStoreCrawler
from app_catalog.crawlers.lookup import LookupCrawler
from app_catalog.crawlers.reviews import ReviewCrawler, sort_by_date
from app_catalog.models.schemas import (
    AppCatalog,
    AppRecord,
    DeviceType,
    ReviewRecord,
    ScrapedMedia,
    Screenshots,
)
from app_catalog.utils.batching import gather_in_chunks
from app_catalog.utils.proxy import ProxyFetcher

logger = logging.getLogger(__name__)


# ============================================================================
# Lookup result mapping
# ============================================================================

def classify_device(item: dict, is_mac: bool = False) -> DeviceType:
    """Pick the device bucket of a Lookup result."""
    if is_mac or item.get("kind") == "mac-software":
        return DeviceType.MAC
    if "iosUniversal" in (item.get("features") or []):
        return DeviceType.UNIVERSAL
    if item.get("ipadScreenshotUrls") and not item.get("screenshotUrls"):
        return DeviceType.IPAD
    return DeviceType.IPHONE


def to_app_record(item: dict, is_mac: bool = False) -> AppRecord:
    """Map one software result of the Lookup API to an AppRecord."""
    screenshots = Screenshots(
        iphone=item.get("screenshotUrls") or [],
        ipad=item.get("ipadScreenshotUrls") or [],
        mac=(item.get("screenshotUrls") or []) if is_mac else [],
    )

    return AppRecord(
        id=item["trackId"],
        title=item.get("trackName") or "",
        description=item.get("description") or "",
        icon=item.get("artworkUrl100") or item.get("artworkUrl512"),
        screenshots=screenshots,
        url=item.get("trackViewUrl"),
        version=item.get("version"),
        rating=item.get("averageUserRating") or 0,
        genres=item.get("genres") or [],
        formatted_price=item.get("formattedPrice"),
        device=classify_device(item, is_mac),
    )


def process_results(results: Iterable[dict], is_mac: bool = False) -> list[AppRecord]:
    """Keep the software entries of a Lookup response (the artist entry is dropped)."""
    apps = []
    for item in results:
        if item.get("wrapperType") != "software" or "trackId" not in item:
            continue
        apps.append(to_app_record(item, is_mac))
    return apps


def dedupe_apps(apps: Iterable[AppRecord]) -> list[AppRecord]:
    """
    One record per app ID.

    The last record seen for an ID wins while the ID keeps its first
    position, so passing iOS results before Mac results favours the Mac
    classification of an app listed in both.
    """
    unique: dict[int, AppRecord] = {}
    for app in apps:
        unique[app.id] = app
    return list(unique.values())


# ============================================================================
# Scrape merging
# ============================================================================

def merge_screenshots(api: Screenshots, scraped: Screenshots) -> Screenshots:
    """Per bucket, scraped screenshots replace the API ones only when there are any."""
    return Screenshots(
        iphone=scraped.iphone or api.iphone,
        ipad=scraped.ipad or api.ipad,
        mac=scraped.mac or api.mac,
    )


def merge_media(app: AppRecord, media: ScrapedMedia) -> AppRecord:
    return app.model_copy(update={
        "screenshots": merge_screenshots(app.screenshots, media.screenshots),
        "rating": media.rating or app.rating,
    })


def write_catalog(catalog: AppCatalog, path: Path) -> Path:
    """Write the catalog as pretty-printed JSON, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(catalog.to_json_dict(), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    return path


# ============================================================================
# Builder
# ============================================================================

class AppCatalogBuilder:
    """
    Builds the catalog of a developer's iOS and Mac apps.

    All crawlers share one ProxyFetcher. Use as an async context manager so
    the underlying HTTP client is closed.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        fetcher: Optional[ProxyFetcher] = None,
    ):
        self.settings = settings or Settings()
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or ProxyFetcher.from_settings(self.settings)

        self.lookup = LookupCrawler(self.settings, self.fetcher)
        self.app_store = AppStoreCrawler(self.settings, self.fetcher)
        self.reviews = ReviewCrawler(self.settings, self.fetcher)

    async def __aenter__(self) -> "AppCatalogBuilder":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._owns_fetcher:
            await self.fetcher.aclose()

    async def list_apps(self, language: str = "en") -> list[AppRecord]:
        """
        iOS apps of the developer for a UI language, without scraped details.

        Returns an empty list when the lookup fails.
        """
        country = self.settings.country_for_language(language)
        try:
            results = await self.lookup.lookup_software(self.settings.artist_id, country)
        except Exception as e:
            logger.error(f"Error fetching apps: {e}")
            return []

        return process_results(results)

    async def fetch_apps(self, country: str) -> list[AppRecord]:
        """iOS and Mac apps of the developer, deduplicated by ID. Lookup errors propagate."""
        ios_results, mac_results = await asyncio.gather(
            self.lookup.lookup_software(self.settings.artist_id, country),
            self.lookup.lookup_software(self.settings.artist_id, country, mac=True),
        )

        apps = process_results(ios_results) + process_results(mac_results, is_mac=True)
        return dedupe_apps(apps)

    async def fetch_details(self, app: AppRecord, country: str) -> AppRecord:
        """
        Attach scraped screenshots, page rating and reviews to an app.

        Each facet falls back on its own: a failed scrape keeps the API
        screenshots and rating, failed reviews leave the list empty.
        """
        logger.info(f"Processing {app.title}...")
        media, reviews = await asyncio.gather(
            self.app_store.crawl_media(app.id, country),
            self.reviews.crawl_reviews(app.id),
            return_exceptions=True,
        )

        if isinstance(media, Exception):
            logger.warning(f"Failed to scrape media for {app.id}: {media}")
            media = ScrapedMedia()
        if isinstance(reviews, Exception):
            logger.warning(f"Failed to fetch reviews for {app.id}: {reviews}")
            reviews = []

        merged = merge_media(app, media)
        return merged.model_copy(update={"reviews": reviews})

    def collect_reviews(self, apps: Iterable[AppRecord]) -> list[ReviewRecord]:
        """Catalog-wide review list, tagged with the app each review belongs to."""
        tagged = [
            review.model_copy(update={"app_id": app.id, "app_name": app.title})
            for app in apps
            for review in app.reviews
        ]
        return sort_by_date(tagged)[:self.settings.catalog_review_limit]

    async def build(self, country: Optional[str] = None) -> AppCatalog:
        """
        Run the full pipeline once.

        Args:
            country: Storefront for lookups and product pages

        Returns:
            The assembled AppCatalog
        """
        country = country or self.settings.default_country

        logger.info("Fetching apps list...")
        apps = await self.fetch_apps(country)
        logger.info(f"Found {len(apps)} apps. Fetching details...")

        detailed = await gather_in_chunks(
            apps,
            lambda app: self.fetch_details(app, country),
            chunk_size=self.settings.detail_chunk_size,
        )

        return AppCatalog(apps=detailed, reviews=self.collect_reviews(detailed))
