"""Bounded-batch concurrency for outbound requests."""

import asyncio
import logging
from typing import Awaitable, Callable, Iterable, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def chunked(items: Sequence[T], size: int) -> list[Sequence[T]]:
    """Split items into consecutive chunks of at most ``size`` elements."""
    if size < 1:
        raise ValueError(f"Chunk size must be positive, got {size}")
    return [items[i:i + size] for i in range(0, len(items), size)]


async def gather_in_chunks(
    items: Iterable[T],
    func: Callable[[T], Awaitable[R]],
    chunk_size: int = 3,
) -> list[R]:
    """
    Run ``func`` over items, ``chunk_size`` at a time.

    Chunks run one after another; the items of a chunk run concurrently and
    the whole chunk is awaited before the next one starts. Results keep the
    input order. Exceptions from ``func`` propagate.
    """
    items = list(items)
    results: list[R] = []

    for index, chunk in enumerate(chunked(items, chunk_size)):
        logger.debug(f"Processing chunk {index + 1} ({len(chunk)} items)")
        results.extend(await asyncio.gather(*(func(item) for item in chunk)))

    return results
