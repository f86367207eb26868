"""Base crawler class with common functionality."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from app_catalog.config import Settings
from app_catalog.utils.proxy import ProxyFetcher

logger = logging.getLogger(__name__)


class BaseCrawler(ABC):
    """
    Base class for all crawlers.

    Provides common functionality:
    - Proxy fallback fetching via ProxyFetcher
    - Shared settings
    - Async context management of the HTTP client
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        fetcher: Optional[ProxyFetcher] = None,
    ):
        """
        Initialize base crawler.

        Args:
            settings: Service settings (defaults loaded from the environment)
            fetcher: Optional shared fetcher; one is created when omitted
        """
        self.settings = settings or Settings()
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or ProxyFetcher.from_settings(self.settings)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._owns_fetcher:
            await self.fetcher.aclose()

    @property
    @abstractmethod
    def source(self) -> str:
        """Short name of the data source, used in log messages."""
        pass

    @abstractmethod
    async def crawl(self, **kwargs) -> Any:
        """
        Perform the crawl operation.

        Must be implemented by subclasses.
        """
        pass
