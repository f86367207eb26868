"""Customer review crawler for the iTunes RSS (JSON) feeds."""

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from .base import BaseCrawler
from app_catalog.models.schemas import ReviewRecord

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _label(entry: dict, *path: str) -> Optional[str]:
    """Walk ``{"a": {"label": ...}}`` style feed nodes."""
    node = entry
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    if isinstance(node, dict):
        node = node.get("label")
    return node if isinstance(node, str) else None


def _parse_rating(entry: dict) -> int:
    try:
        return int(_label(entry, "im:rating") or "0")
    except ValueError:
        return 0


def parse_date(value: Optional[str]) -> Optional[datetime]:
    """Parse a feed timestamp; naive values are taken as UTC."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_entries(feed_data: Any, country: str, min_rating: int = 4) -> list[ReviewRecord]:
    """
    Turn one RSS feed response into review records.

    Args:
        feed_data: Decoded JSON of the feed
        country: Storefront the feed belongs to
        min_rating: Reviews rated below this are dropped

    Returns:
        Reviews in feed order
    """
    feed = feed_data.get("feed") if isinstance(feed_data, dict) else None
    if not isinstance(feed, dict):
        return []

    entries = feed.get("entry") or []
    if isinstance(entries, dict):
        # a feed with a single entry is not wrapped in a list
        entries = [entries]
    if not isinstance(entries, list):
        return []

    reviews = []
    for idx, entry in enumerate(entries):
        if not isinstance(entry, dict) or "im:name" in entry:
            continue

        rating = _parse_rating(entry)
        if rating < min_rating:
            continue

        try:
            reviews.append(ReviewRecord(
                id=_label(entry, "id"),
                title=_label(entry, "title") or "",
                content=_label(entry, "content") or "",
                rating=rating,
                author=_label(entry, "author", "name") or "",
                version=_label(entry, "im:version"),
                date=_label(entry, "updated"),
                country=country,
            ))
        except ValidationError as e:
            logger.warning(f"Error parsing review {idx} ({country}): {e}")

    return reviews


def merge_reviews(batches: Iterable[Iterable[ReviewRecord]]) -> list[ReviewRecord]:
    """Concatenate review batches, keeping the first review per dedup key."""
    merged: dict[str, ReviewRecord] = {}
    for batch in batches:
        for review in batch:
            merged.setdefault(review.dedup_key, review)
    return list(merged.values())


def sort_by_date(reviews: Iterable[ReviewRecord]) -> list[ReviewRecord]:
    """Newest first; reviews without a usable date go last."""
    return sorted(
        reviews,
        key=lambda r: parse_date(r.date) or _EPOCH,
        reverse=True,
    )


class ReviewCrawler(BaseCrawler):
    """
    Crawler for recent customer reviews across several storefronts.

    Feeds are fetched one country at a time; only favourable reviews are
    kept and duplicates across countries are collapsed.
    """

    @property
    def source(self) -> str:
        return "reviews"

    def _get_feed_url(self, app_id: int | str, country: str) -> str:
        return f"https://itunes.apple.com/{country}/rss/customerreviews/id={app_id}/sortby=mostrecent/json"

    async def crawl_country(self, app_id: int | str, country: str) -> list[ReviewRecord]:
        """Reviews from one storefront; empty when the feed is unavailable."""
        try:
            data = await self.fetcher.fetch_json(self._get_feed_url(app_id, country))
            return parse_entries(data, country, min_rating=self.settings.min_review_rating)
        except Exception as e:
            logger.warning(f"Failed to fetch reviews for {app_id} ({country}): {e}")
            return []

    async def crawl_reviews(
        self,
        app_id: int | str,
        countries: Optional[list[str]] = None,
        limit: Optional[int] = None,
    ) -> list[ReviewRecord]:
        """
        Fetch, merge and rank reviews for an app.

        Args:
            app_id: App Store app ID
            countries: Storefronts in fetch order (defaults to settings)
            limit: Maximum reviews returned (defaults to ``reviews_per_app``)

        Returns:
            Newest reviews first
        """
        countries = countries or self.settings.review_countries
        limit = limit if limit is not None else self.settings.reviews_per_app

        logger.info(f"Fetching reviews for app {app_id}...")
        batches = []
        for country in countries:
            batches.append(await self.crawl_country(app_id, country))

        reviews = sort_by_date(merge_reviews(batches))
        return reviews[:limit]

    async def crawl(self, **kwargs) -> list[ReviewRecord]:
        return await self.crawl_reviews(
            app_id=kwargs["app_id"],
            countries=kwargs.get("countries"),
            limit=kwargs.get("limit"),
        )
