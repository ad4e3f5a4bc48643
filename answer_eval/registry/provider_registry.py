"""
Process-wide provider registry.

Answers "which provider serves task X" and "which provider is the fallback
for task X" from a cached configuration snapshot. The snapshot is an
immutable tuple replaced wholesale on refresh, so concurrent readers always
see one consistent configuration.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable

from answer_eval.core.exceptions import NoProviderConfigured, ProviderNotFound
from answer_eval.models.dto import ProviderConfig, Task
from answer_eval.registry.stores import ProviderConfigStore

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300.0


class ProviderRegistry:
    """
    Cached, read-only view over a provider config store.

    Args:
        store: Source of provider records
        ttl_seconds: Maximum snapshot age before the store is re-read
        clock: Monotonic clock, injectable for tests
    """

    def __init__(
        self,
        store: ProviderConfigStore,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self._ttl = ttl_seconds
        self._clock = clock
        self._snapshot: tuple[ProviderConfig, ...] | None = None
        self._loaded_at = 0.0
        self._lock = asyncio.Lock()

    def _is_fresh(self) -> bool:
        return (
            self._snapshot is not None
            and self._clock() - self._loaded_at < self._ttl
        )

    async def snapshot(self) -> tuple[ProviderConfig, ...]:
        """Current configuration snapshot, reloading it when stale."""
        if self._is_fresh():
            return self._snapshot  # type: ignore[return-value]

        async with self._lock:
            # Another reader may have refreshed while we waited
            if self._is_fresh():
                return self._snapshot  # type: ignore[return-value]

            providers = tuple(await self._store.load())
            self._snapshot = providers
            self._loaded_at = self._clock()
            logger.info(
                "Provider configuration refreshed",
                extra={"provider": [p.name for p in providers]},
            )
            return providers

    def invalidate(self) -> None:
        """Force the next read to reload from the store."""
        self._snapshot = None
        self._loaded_at = 0.0

    async def refresh(self) -> tuple[ProviderConfig, ...]:
        self.invalidate()
        return await self.snapshot()

    async def active_providers(self) -> list[ProviderConfig]:
        return [p for p in await self.snapshot() if p.is_active]

    async def resolve(self, task: Task) -> ProviderConfig:
        """
        Active provider preferred for ``task``.

        Raises:
            NoProviderConfigured: If no active provider is preferred for the task
        """
        for cfg in await self.active_providers():
            if cfg.prefers(task):
                return cfg
        raise NoProviderConfigured(task.value)

    async def resolve_fallback(
        self, task: Task, excluding: ProviderConfig | str | None = None
    ) -> ProviderConfig:
        """
        Active provider that supports ``task`` without being preferred for it.

        Raises:
            ProviderNotFound: If no such provider exists
        """
        excluded = excluding.name if isinstance(excluding, ProviderConfig) else excluding
        for cfg in await self.active_providers():
            if cfg.name == excluded:
                continue
            if cfg.supports(task) and not cfg.prefers(task):
                return cfg
        raise ProviderNotFound(task.value, excluding=excluded)

    async def is_preferred(self, task: Task, name: str) -> bool:
        try:
            return (await self.resolve(task)).name == name
        except NoProviderConfigured:
            return False
