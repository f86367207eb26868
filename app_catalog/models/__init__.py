"""Pydantic models for the app catalog."""

from .schemas import (
    DeviceType,
    Screenshots,
    ScrapedMedia,
    ReviewRecord,
    AppRecord,
    AppCatalog,
    HealthResponse,
)

__all__ = [
    "DeviceType",
    "Screenshots",
    "ScrapedMedia",
    "ReviewRecord",
    "AppRecord",
    "AppCatalog",
    "HealthResponse",
]
