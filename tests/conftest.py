import json

import httpx
import pytest

from app_catalog.config import Settings
from app_catalog.utils.proxy import DIRECT, ProxyFetcher

ARTIST_ID = "1367894360"

SHELF_MAPPING = {
    "product_media_phone_": {
        "items": [
            {"screenshot": {"template": "https://img/{w}x{h}{c}.{f}", "width": 300, "height": 600}},
            {"screenshot": {"template": "https://img/{w}x{h}{c}.{f}", "width": 300, "height": 600}},
            {"screenshot": {"template": "https://img/second/{w}x{h}{c}.{f}", "width": 300, "height": 600}},
        ]
    },
    "product_media_pad_": {
        "items": [
            {"screenshot": {"template": "https://img/pad/{w}x{h}{c}.{f}", "width": 1024, "height": 768}},
        ]
    },
    "product_ratings": {"items": []},
}


def product_page(mapping=SHELF_MAPPING, rating="4.8"):
    payload = json.dumps({"data": [{"intent": {}, "data": {"shelfMapping": mapping}}]})
    rating_html = (
        f'<span class="we-customer-ratings__averages__display">{rating}</span>' if rating else ""
    )
    return (
        "<html><head>"
        '<script type="text/javascript">window.analytics = {};</script>'
        f'<script type="application/json" id="serialized-server-data">{payload}</script>'
        f"</head><body>{rating_html}</body></html>"
    )


def feed_entry(review_id, rating, author="alice", content="Great app, love it", updated="2024-05-01T10:00:00-07:00"):
    entry = {
        "title": {"label": f"Review {review_id}"},
        "content": {"label": content, "attributes": {"type": "text"}},
        "im:rating": {"label": str(rating)},
        "im:version": {"label": "1.2"},
        "author": {"name": {"label": author}, "uri": {"label": "https://example.com"}},
        "updated": {"label": updated},
    }
    if review_id is not None:
        entry["id"] = {"label": review_id}
    return entry


def review_feed(*entries, with_app_entry=True):
    items = list(entries)
    if with_app_entry:
        items.insert(0, {"im:name": {"label": "ShotFit"}, "id": {"label": "https://apps.apple.com/app/id1"}})
    return {"feed": {"entry": items}}


def lookup_item(track_id, name, **extra):
    item = {
        "wrapperType": "software",
        "kind": "software",
        "trackId": track_id,
        "trackName": name,
        "description": f"{name} description",
        "artworkUrl100": f"https://icons/{track_id}/100.png",
        "artworkUrl512": f"https://icons/{track_id}/512.png",
        "screenshotUrls": [f"https://api/{track_id}/phone1.png"],
        "ipadScreenshotUrls": [],
        "trackViewUrl": f"https://apps.apple.com/us/app/id{track_id}",
        "version": "1.0",
        "averageUserRating": 4.5,
        "genres": ["Utilities"],
        "formattedPrice": "Free",
        "features": [],
    }
    item.update(extra)
    return item


ARTIST_ENTRY = {"wrapperType": "artist", "artistId": int(ARTIST_ID), "artistName": "Dev"}


@pytest.fixture
def settings(tmp_path):
    return Settings(
        artist_id=ARTIST_ID,
        output_file=tmp_path / "data" / "apps.json",
        try_direct=True,
        _env_file=None,
    )


@pytest.fixture
def make_fetcher():
    """Build a ProxyFetcher whose requests are answered by ``handler``."""
    def factory(handler, strategies=None):
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return ProxyFetcher(strategies=[DIRECT] if strategies is None else strategies, client=client)

    return factory
