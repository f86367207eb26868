"""Service configuration loaded from environment variables / .env."""

from pathlib import Path

from pydantic_settings import BaseSettings


# UI language -> App Store storefront
LANGUAGE_COUNTRIES = {
    "zh-CN": "cn",
    "zh": "cn",
    "zh-TW": "tw",
}


class Settings(BaseSettings):
    """
    Settings for the catalog builder, crawlers and batch job.

    Every value can be overridden with an ``APP_CATALOG_`` prefixed
    environment variable, e.g. ``APP_CATALOG_ARTIST_ID=123``.
    """
    artist_id: str = "1367894360"
    default_country: str = "us"
    output_file: Path = Path("src/data/apps.json")

    review_countries: list[str] = ["us", "cn", "tw", "hk"]
    min_review_rating: int = 4
    reviews_per_app: int = 20
    catalog_review_limit: int = 50

    detail_chunk_size: int = 3
    max_search_depth: int = 64

    request_timeout: float = 30.0
    try_direct: bool = True

    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_prefix = "APP_CATALOG_"
        extra = "ignore"

    def country_for_language(self, language: str) -> str:
        """Map a UI language code to the App Store country to query."""
        return LANGUAGE_COUNTRIES.get(language, self.default_country)
