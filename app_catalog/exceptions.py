"""Exceptions raised by the catalog service."""

from typing import Optional


class CatalogError(Exception):
    """Base class for catalog service errors."""


class FetchError(CatalogError):
    """A remote resource could not be retrieved."""

    def __init__(self, url: str, message: Optional[str] = None):
        self.url = url
        super().__init__(message or f"Failed to fetch {url}")


class AllStrategiesFailedError(FetchError):
    """Every fetch strategy (direct and proxies) failed for a URL."""

    def __init__(self, url: str, failures: list[tuple[str, str]]):
        self.failures = failures
        reasons = "; ".join(f"{name}: {reason}" for name, reason in failures)
        super().__init__(url, f"All proxies failed for {url} ({reasons or 'no strategies configured'})")
