import asyncio

import httpx

from app_catalog.crawlers import LookupCrawler, ReviewCrawler, app_store
from app_catalog.crawlers.app_store import AppStoreCrawler, parse_page_rating

from conftest import ARTIST_ENTRY, feed_entry, lookup_item, product_page, review_feed


def test_parse_page_rating():
    assert parse_page_rating(product_page(rating="4.7")) == 4.7
    assert parse_page_rating(product_page(rating=None)) is None
    assert parse_page_rating(product_page(rating="n/a")) is None


def test_crawl_media_scrapes_screenshots_and_rating(settings, make_fetcher):
    requested = []

    def handler(request):
        requested.append(str(request.url))
        return httpx.Response(200, text=product_page())

    crawler = AppStoreCrawler(settings, make_fetcher(handler))
    media = asyncio.run(crawler.crawl_media(6749874426, "cn"))

    assert requested == ["https://apps.apple.com/cn/app/id6749874426"]
    assert media.screenshots.iphone == ["https://img/300x600bb.jpg", "https://img/second/300x600bb.jpg"]
    assert media.screenshots.ipad == ["https://img/pad/1024x768bb.jpg"]
    assert media.rating == 4.8


def test_crawl_media_page_without_mapping(settings, make_fetcher):
    def handler(request):
        return httpx.Response(200, text="<html><script>var a = 1;</script></html>")

    crawler = AppStoreCrawler(settings, make_fetcher(handler))
    media = asyncio.run(crawler.crawl_media(1))

    assert not media.screenshots.has_any()
    assert media.rating is None


def test_crawl_media_fetch_failure_is_empty(settings, make_fetcher):
    def handler(request):
        raise httpx.ConnectError("offline", request=request)

    crawler = AppStoreCrawler(settings, make_fetcher(handler))
    media = asyncio.run(crawler.crawl_media(1, "us"))

    assert not media.screenshots.has_any()
    assert media.rating is None


def test_generic_crawl_entry_points(settings, make_fetcher):
    def handler(request):
        if request.url.path == "/lookup":
            return httpx.Response(200, json={"results": [ARTIST_ENTRY, lookup_item(1, "ShotFit")]})
        if "customerreviews" in request.url.path:
            return httpx.Response(200, json=review_feed(feed_entry("r1", 5)))
        return httpx.Response(200, text=product_page())

    fetcher = make_fetcher(handler)

    async def run():
        async with AppStoreCrawler(settings, fetcher) as pages, \
                LookupCrawler(settings, fetcher) as lookup, \
                ReviewCrawler(settings, fetcher) as reviews:
            return (
                await pages.crawl(app_id=1),
                await lookup.crawl(mac=True),
                await reviews.crawl(app_id=1, countries=["us"]),
            )

    media, results, review_list = asyncio.run(run())

    assert media.rating == 4.8
    assert [r.get("trackId") for r in results] == [None, 1]
    assert [r.id for r in review_list] == ["r1"]


def test_crawl_media_deeply_nested_payload_keeps_rating(settings, make_fetcher):
    nested = "[" * 200000 + "]" * 200000
    page = (
        f'<html><script>{{"shelfMapping_": {nested}}}</script>'
        '<span class="we-customer-ratings__averages__display">4.6</span></html>'
    )

    def handler(request):
        return httpx.Response(200, text=page)

    crawler = AppStoreCrawler(settings, make_fetcher(handler))
    media = asyncio.run(crawler.crawl_media(1))

    assert not media.screenshots.has_any()
    assert media.rating == 4.6


def test_crawl_media_parse_failure_is_empty(settings, make_fetcher, monkeypatch):
    def broken(html, max_depth):
        raise ValueError("unexpected page layout")

    monkeypatch.setattr(app_store, "extract_shelf_mapping", broken)

    crawler = AppStoreCrawler(settings, make_fetcher(lambda request: httpx.Response(200, text=product_page())))
    media = asyncio.run(crawler.crawl_media(1))

    assert not media.screenshots.has_any()
    assert media.rating is None
