"""iTunes Lookup API client for a developer's apps."""

import logging
from urllib.parse import urlencode

from .base import BaseCrawler

logger = logging.getLogger(__name__)

LOOKUP_URL = "https://itunes.apple.com/lookup"


class LookupCrawler(BaseCrawler):
    """Lists the software published under an artist (developer) ID."""

    @property
    def source(self) -> str:
        return "itunes_lookup"

    def _get_lookup_url(self, artist_id: str, country: str, mac: bool = False) -> str:
        params = {
            "id": artist_id,
            "entity": "macSoftware" if mac else "software",
            "country": country,
        }
        return f"{LOOKUP_URL}?{urlencode(params)}"

    async def lookup_software(self, artist_id: str, country: str, mac: bool = False) -> list[dict]:
        """
        Fetch the raw Lookup results for a developer.

        The first result is normally the artist itself; callers filter on
        ``wrapperType``. Fetch errors propagate.

        Args:
            artist_id: Developer (artist) ID
            country: Storefront country code
            mac: Query Mac software instead of iOS software

        Returns:
            The ``results`` array of the response
        """
        data = await self.fetcher.fetch_json(self._get_lookup_url(artist_id, country, mac))
        results = data.get("results", []) if isinstance(data, dict) else []
        logger.info(
            f"Lookup returned {len(results)} {'mac' if mac else 'ios'} results "
            f"for artist {artist_id} ({country})"
        )
        return results

    async def crawl(self, **kwargs) -> list[dict]:
        return await self.lookup_software(
            artist_id=kwargs.get("artist_id", self.settings.artist_id),
            country=kwargs.get("country", self.settings.default_country),
            mac=kwargs.get("mac", False),
        )
