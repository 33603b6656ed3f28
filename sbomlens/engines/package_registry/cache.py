"""Memoizing wrapper around a :class:`PackageMetadataLookup`."""

from __future__ import annotations

import asyncio
from collections import OrderedDict

from sbomlens.engines.package_registry.models import PackageInfo, PackageMetadataLookup

_Key = tuple[str | None, str, str]

DEFAULT_MAX_ENTRIES = 4096


class CachedMetadataLookup:
    """At most one in-flight or completed fetch per (ecosystem, name, version).

    Concurrent callers asking for the same key await the same task. A fetch
    that raises is evicted so the next caller retries it. Past *max_entries*
    the least recently used key is dropped.
    """

    def __init__(self, inner: PackageMetadataLookup, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._inner = inner
        self._max_entries = max_entries
        self._tasks: OrderedDict[_Key, asyncio.Task[PackageInfo | None]] = OrderedDict()

    async def get_package_info(
        self, name: str, version: str, ecosystem: str | None
    ) -> PackageInfo | None:
        key = (ecosystem, name, version)
        task = self._tasks.get(key)
        if task is None:
            task = asyncio.ensure_future(self._inner.get_package_info(name, version, ecosystem))
            self._tasks[key] = task
            while len(self._tasks) > self._max_entries:
                self._tasks.popitem(last=False)
        else:
            self._tasks.move_to_end(key)
        try:
            return await asyncio.shield(task)
        except Exception:
            if self._tasks.get(key) is task:
                del self._tasks[key]
            raise

    def clear(self) -> None:
        self._tasks.clear()

    def __len__(self) -> int:
        return len(self._tasks)
