"""Utility modules for the catalog service."""

from .batching import chunked, gather_in_chunks
from .proxy import FetchStrategy, ProxyFetcher, default_strategies

__all__ = [
    "chunked",
    "gather_in_chunks",
    "FetchStrategy",
    "ProxyFetcher",
    "default_strategies",
]
