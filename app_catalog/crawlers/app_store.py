"""App Store product page crawler for screenshots and the page rating."""

import logging
from typing import Optional

from bs4 import BeautifulSoup

from .base import BaseCrawler
from app_catalog.extractors.screenshots import build_screenshot_urls
from app_catalog.extractors.shelf_mapping import extract_shelf_mapping
from app_catalog.models.schemas import ScrapedMedia, Screenshots

logger = logging.getLogger(__name__)


def parse_page_rating(html: str) -> Optional[float]:
    """Average rating shown in the ratings block of a product page, if any."""
    soup = BeautifulSoup(html, "lxml")
    rating_elem = soup.select_one("span.we-customer-ratings__averages__display")
    if not rating_elem:
        return None

    try:
        return float(rating_elem.get_text(strip=True))
    except ValueError:
        return None


class AppStoreCrawler(BaseCrawler):
    """
    Crawler for the public App Store product page.

    The page embeds its data as JSON; screenshots are rebuilt from the
    templated image URLs found under ``shelfMapping``.
    """

    @property
    def source(self) -> str:
        return "app_store"

    def _get_app_store_url(self, app_id: int | str, country: str = "us") -> str:
        """Generate App Store URL for an app."""
        return f"https://apps.apple.com/{country}/app/id{app_id}"

    async def crawl_media(self, app_id: int | str, country: Optional[str] = None) -> ScrapedMedia:
        """
        Scrape screenshots and rating from the product page.

        Args:
            app_id: App Store app ID
            country: Storefront country code

        Returns:
            ScrapedMedia; empty when the page could not be fetched or parsed
        """
        country = country or self.settings.default_country
        app_url = self._get_app_store_url(app_id, country)

        try:
            html = await self.fetcher.fetch_text(app_url)
        except Exception as e:
            logger.error(f"Error scraping screenshots for {app_id}: {e}")
            return ScrapedMedia()

        if not html:
            return ScrapedMedia()

        screenshots = Screenshots()
        try:
            mapping = extract_shelf_mapping(html, max_depth=self.settings.max_search_depth)
            if mapping:
                screenshots = build_screenshot_urls(mapping)

            rating = parse_page_rating(html)
        except Exception as e:
            logger.error(f"Error parsing product page for {app_id}: {e}")
            return ScrapedMedia()

        logger.info(
            f"Scraped app {app_id} ({country}): {len(screenshots.iphone)} iphone, "
            f"{len(screenshots.ipad)} ipad, {len(screenshots.mac)} mac screenshots"
        )
        return ScrapedMedia(screenshots=screenshots, rating=rating)

    async def crawl(self, **kwargs) -> ScrapedMedia:
        return await self.crawl_media(
            app_id=kwargs["app_id"],
            country=kwargs.get("country"),
        )
