"""Lazily-initialised shared resource with single-flight semantics."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SingleFlight(Generic[T]):
    """Create a resource once, on first use, and share it.

    Concurrent first callers await the same in-flight future.  A failed
    attempt clears the cache so the next caller starts from scratch.
    """

    def __init__(self, factory: Callable[[], Awaitable[T]]) -> None:
        self._factory = factory
        self._future: asyncio.Future[T] | None = None

    @property
    def ready(self) -> bool:
        future = self._future
        return (
            future is not None
            and future.done()
            and not future.cancelled()
            and future.exception() is None
        )

    async def get(self) -> T:
        if self._future is None:
            self._future = asyncio.ensure_future(self._factory())
        future = self._future
        try:
            return await asyncio.shield(future)
        except Exception:
            if self._future is future:
                self._future = None
            raise

    def peek(self) -> T | None:
        """Return the resource if it was created successfully, else ``None``."""
        return self._future.result() if self.ready else None  # type: ignore[union-attr]

    def reset(self) -> None:
        self._future = None
