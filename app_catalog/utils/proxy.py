"""Fetching through an ordered list of CORS-bypass proxies."""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional
from urllib.parse import quote

import httpx

from app_catalog.config import Settings
from app_catalog.exceptions import AllStrategiesFailedError

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Accept-Language": "en-US,en;q=0.8",
}


@dataclass(frozen=True)
class FetchStrategy:
    """A named rewrite from the target URL to the URL actually requested."""
    name: str
    rewrite: Callable[[str], str]

    def __call__(self, url: str) -> str:
        return self.rewrite(url)


DIRECT = FetchStrategy("direct", lambda url: url)
CORSPROXY_IO = FetchStrategy(
    "corsproxy.io",
    lambda url: f"https://corsproxy.io/?{quote(url, safe='')}",
)
ALLORIGINS = FetchStrategy(
    "allorigins",
    lambda url: f"https://api.allorigins.win/raw?url={quote(url, safe='')}",
)

PROXIES = (CORSPROXY_IO, ALLORIGINS)


def default_strategies(try_direct: bool = True) -> list[FetchStrategy]:
    """
    Build the fallback policy.

    Args:
        try_direct: Request the target itself before any proxy. Only useful
            where the caller is not subject to browser CORS rules.

    Returns:
        Strategies in the order they will be attempted
    """
    strategies = [DIRECT] if try_direct else []
    strategies.extend(PROXIES)
    return strategies


class ProxyFetcher:
    """
    HTTP client that tries each strategy once, in order, until one succeeds.

    There is no retry and no backoff: a strategy that raises a transport error
    or answers with a non-2xx status is skipped for the next one.
    """

    def __init__(
        self,
        strategies: Optional[list[FetchStrategy]] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        """
        Initialize the fetcher.

        Args:
            strategies: Ordered fallback policy (defaults to direct + proxies)
            client: Optional pre-configured client, not closed by this fetcher
            timeout: Request timeout in seconds for an owned client
        """
        self.strategies = list(strategies) if strategies is not None else default_strategies()
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProxyFetcher":
        """Fetcher with the fallback policy and timeout configured in ``settings``."""
        return cls(
            strategies=default_strategies(settings.try_direct),
            timeout=settings.request_timeout,
        )

    async def __aenter__(self) -> "ProxyFetcher":
        self._get_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                headers=DEFAULT_HEADERS,
            )
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def fetch(self, url: str, method: str = "GET", **kwargs: Any) -> httpx.Response:
        """
        Request a URL through the first strategy that succeeds.

        Args:
            url: Target URL
            method: HTTP method
            **kwargs: Passed through to ``httpx.AsyncClient.request``

        Returns:
            The first 2xx response

        Raises:
            AllStrategiesFailedError: when every strategy failed
        """
        client = self._get_client()
        failures: list[tuple[str, str]] = []

        for strategy in self.strategies:
            try:
                response = await client.request(method, strategy(url), **kwargs)
            except httpx.HTTPError as e:
                failures.append((strategy.name, str(e) or e.__class__.__name__))
                logger.warning(f"{strategy.name} fetch failed for {url}: {e!r}, trying next")
                continue

            if response.is_success:
                if failures:
                    logger.info(f"Fetched {url} via {strategy.name}")
                return response

            failures.append((strategy.name, f"HTTP {response.status_code}"))
            logger.warning(f"{strategy.name} returned {response.status_code} for {url}, trying next")

        raise AllStrategiesFailedError(url, failures)

    async def fetch_text(self, url: str) -> str:
        response = await self.fetch(url)
        return response.text

    async def fetch_json(self, url: str) -> Any:
        response = await self.fetch(url)
        return response.json()
