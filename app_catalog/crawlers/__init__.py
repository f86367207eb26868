"""Crawler modules for the App Store data sources."""

from .base import BaseCrawler
from .app_store import AppStoreCrawler
from .lookup import LookupCrawler
from .reviews import ReviewCrawler

__all__ = ["BaseCrawler", "AppStoreCrawler", "LookupCrawler", "ReviewCrawler"]
