"""Extraction of structured data from App Store pages."""

from .shelf_mapping import extract_shelf_mapping, find_key
from .screenshots import build_screenshot_urls

__all__ = [
    "extract_shelf_mapping",
    "find_key",
    "build_screenshot_urls",
]
