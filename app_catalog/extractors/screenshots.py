"""Build screenshot URLs from the shelf mapping of a product page."""

import logging
from typing import Iterable, Optional

from app_catalog.models.schemas import DeviceType, Screenshots

logger = logging.getLogger(__name__)

# Shelf key prefix -> device bucket
MEDIA_PREFIXES = {
    "product_media_phone": DeviceType.IPHONE,
    "product_media_pad": DeviceType.IPAD,
    "product_media_mac": DeviceType.MAC,
}

CROP = "bb"
FORMAT = "jpg"


def render_template(template: str, width: int, height: int) -> str:
    """Fill the ``{w}``, ``{h}``, ``{c}`` and ``{f}`` placeholders of an image URL template."""
    return (
        template
        .replace("{w}", str(width))
        .replace("{h}", str(height))
        .replace("{c}", CROP)
        .replace("{f}", FORMAT)
    )


def dedupe(urls: Iterable[str]) -> list[str]:
    """Drop repeated URLs, keeping the first occurrence's position."""
    return list(dict.fromkeys(urls))


def bucket_for_key(key: str) -> Optional[DeviceType]:
    for prefix, device in MEDIA_PREFIXES.items():
        if key.startswith(prefix):
            return device
    return None


def screenshot_url(item) -> Optional[str]:
    """URL for one shelf item, or None when its screenshot descriptor is incomplete."""
    if not isinstance(item, dict):
        return None

    screenshot = item.get("screenshot")
    if not isinstance(screenshot, dict):
        return None

    template = screenshot.get("template")
    width = screenshot.get("width")
    height = screenshot.get("height")
    if not (isinstance(template, str) and template and width and height):
        return None

    return render_template(template, width, height)


def build_screenshot_urls(mapping: dict) -> Screenshots:
    """
    Collect screenshot URLs per device bucket from a shelf mapping.

    Args:
        mapping: The ``shelfMapping`` object of a product page

    Returns:
        Screenshots with deduplicated URLs in page order
    """
    buckets: dict[DeviceType, list[str]] = {
        DeviceType.IPHONE: [],
        DeviceType.IPAD: [],
        DeviceType.MAC: [],
    }

    for key, shelf in mapping.items():
        device = bucket_for_key(key)
        if device is None:
            continue

        items = shelf.get("items") if isinstance(shelf, dict) else None
        if not isinstance(items, list):
            continue

        logger.debug(f"Found {device.value} media key: {key} ({len(items)} items)")
        for item in items:
            url = screenshot_url(item)
            if url:
                buckets[device].append(url)

    return Screenshots(
        iphone=dedupe(buckets[DeviceType.IPHONE]),
        ipad=dedupe(buckets[DeviceType.IPAD]),
        mac=dedupe(buckets[DeviceType.MAC]),
    )
