"""Pydantic schemas for the app catalog."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Enums
# ============================================================================

class DeviceType(str, Enum):
    """Device bucket an app (or a screenshot list) belongs to."""
    IPHONE = "iphone"
    IPAD = "ipad"
    MAC = "mac"
    UNIVERSAL = "universal"


# ============================================================================
# Media
# ============================================================================

class Screenshots(BaseModel):
    """Screenshot URLs grouped by device bucket."""
    iphone: list[str] = Field(default_factory=list, description="Phone screenshots")
    ipad: list[str] = Field(default_factory=list, description="Tablet screenshots")
    mac: list[str] = Field(default_factory=list, description="Desktop screenshots")

    def has_any(self) -> bool:
        return bool(self.iphone or self.ipad or self.mac)


class ScrapedMedia(BaseModel):
    """What a single App Store product page yielded."""
    screenshots: Screenshots = Field(default_factory=Screenshots)
    rating: Optional[float] = Field(default=None, description="Average rating shown on the page")


# ============================================================================
# Reviews
# ============================================================================

class ReviewRecord(BaseModel):
    """A customer review taken from a country RSS feed."""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(default=None, description="Feed review ID, may be missing")
    title: str = Field(default="", description="Review title")
    content: str = Field(default="", description="Review body")
    rating: int = Field(..., ge=1, le=5, description="Star rating (1-5)")
    author: str = Field(default="", description="Reviewer name")
    version: Optional[str] = Field(default=None, description="App version reviewed")
    date: Optional[str] = Field(default=None, description="Date string as published by the feed")
    country: str = Field(default="us", description="Storefront the review came from")
    app_id: Optional[int] = Field(default=None, alias="appId")
    app_name: Optional[str] = Field(default=None, alias="appName")

    @property
    def dedup_key(self) -> str:
        """Feed ID, or author plus the start of the body when the feed has none."""
        if self.id:
            return self.id
        return f"{self.author}-{self.content[:20]}"


# ============================================================================
# Apps & catalog
# ============================================================================

class AppRecord(BaseModel):
    """One app of the developer, merged from the Lookup API and the product page."""
    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(..., description="App Store track ID")
    title: str = ""
    description: str = ""
    icon: Optional[str] = None
    screenshots: Screenshots = Field(default_factory=Screenshots)
    url: Optional[str] = None
    version: Optional[str] = None
    rating: float = 0.0
    genres: list[str] = Field(default_factory=list)
    formatted_price: Optional[str] = Field(default=None, alias="formattedPrice")
    device: DeviceType = DeviceType.IPHONE
    reviews: list[ReviewRecord] = Field(default_factory=list)


class AppCatalog(BaseModel):
    """The data file consumed by the portfolio front end."""
    model_config = ConfigDict(populate_by_name=True)

    last_updated: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        alias="lastUpdated",
    )
    apps: list[AppRecord] = Field(default_factory=list)
    reviews: list[ReviewRecord] = Field(default_factory=list)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str = "1.0.0"
    uptime_seconds: float = 0.0
