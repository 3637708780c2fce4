"""Process-wide cache registry.

Subsystems create their caches through a `CacheRegistry` so that a single
call can empty all of them when the shell session is reset (e.g. after a
directory change). The registry knows nothing about what is stored.

A default registry is available through the module level functions; code
that wants isolation (tests, several sessions in one process) injects its
own `CacheRegistry` instead.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from .logging_setup import get_logger

__all__ = [
    "Cache",
    "CacheData",
    "CacheRegistry",
    "create_cache",
    "default_registry",
    "generate_spec_cache",
    "list_caches",
    "reset_caches",
    "spec_cache",
]

T = TypeVar("T")


class Cache(dict[str, T], Generic[T]):
    """A named key -> value mapping owned by a registry."""

    def __init__(self, name: str = "") -> None:
        super().__init__()
        self.name = name

    def __repr__(self) -> str:
        return f"<Cache {self.name or '?'} size={len(self)}>"


class CacheRegistry:
    """Keeps track of every cache so they can be emptied together."""

    def __init__(self) -> None:
        self._caches: list[Cache[Any]] = []
        self.log = get_logger("caches")

    def __len__(self) -> int:
        return len(self._caches)

    def create(self, name: str = "") -> Cache[Any]:
        """Return a new empty cache registered in this registry."""
        cache: Cache[Any] = Cache(name)
        self._caches.append(cache)
        return cache

    def named(self, name: str) -> Cache[Any]:
        """Return the cache called `name`, creating it on first use."""
        for cache in self._caches:
            if cache.name == name:
                return cache
        return self.create(name)

    def reset_all(self) -> None:
        """Empty every registered cache. Registry membership is unchanged."""
        for cache in self._caches:
            cache.clear()
        self.log.debug("%d caches cleared", len(self._caches))

    def list_caches(self) -> list[Cache[Any]]:
        """Return the registered caches."""
        return list(self._caches)

    def describe(self) -> str:
        """Return a human readable dump of the registered caches."""
        lines = []
        for index, cache in enumerate(self._caches):
            keys = ", ".join(sorted(cache)) or "-"
            lines.append(f"{index}: {cache.name or '(unnamed)'} [{len(cache)}] {keys}")
        return "\n".join(lines)


@dataclass
class CacheData(Generic[T]):
    """An expiring cache entry.

    While a value is being computed the entry is "pending": readers calling
    `wait_update` block until `set_value` is called.
    """

    retension_time: float  # seconds, 0 never expires
    expiration_date: float = 0
    payload: T | None = None
    _signal: asyncio.Event = field(default_factory=asyncio.Event)

    def set_pending(self, ref_time: float | None = None) -> None:
        """Mark the data as being refreshed, blocking awaiters of `wait_update`."""
        self._signal.clear()
        if self.retension_time:
            self.expiration_date = (ref_time or time.time()) + self.retension_time
        else:
            self.expiration_date = float("inf")
        self.payload = None

    def set_value(self, value: T) -> None:
        """Set the cached value, unblocking awaiters of `wait_update`."""
        self.payload = value
        self._signal.set()

    def discard(self) -> None:
        """Expire the entry, releasing pending readers with an empty payload."""
        self.expiration_date = 0
        self._signal.set()

    def is_valid(self, now: float | None = None) -> bool:
        """Tell whether the entry may still be served."""
        return self.expiration_date > (now or time.time())

    async def wait_update(self) -> T | None:
        """Wait for the cache data to be refreshed."""
        while True:
            if self.payload is not None or not self.is_valid():
                return self.payload
            await self._signal.wait()


default_registry = CacheRegistry()


def create_cache(name: str = "") -> Cache[Any]:
    """Create a cache on the default registry."""
    return default_registry.create(name)


def reset_caches() -> None:
    """Empty every cache of the default registry."""
    default_registry.reset_all()


def list_caches() -> str:
    """Return the diagnostic listing of the default registry."""
    return default_registry.describe()


spec_cache = create_cache("spec")
generate_spec_cache = create_cache("generate_spec")
