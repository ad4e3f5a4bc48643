"""
Provider configuration stores.

The store is the boundary to configuration management: records are keyed
by provider name and only the registry reads them.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, Protocol

from pydantic import TypeAdapter

from answer_eval.models.dto import ProviderConfig

logger = logging.getLogger(__name__)

_PROVIDER_LIST = TypeAdapter(list[ProviderConfig])


class ProviderConfigStore(Protocol):
    """Source of provider configuration records."""

    async def load(self) -> list[ProviderConfig]: ...


class InMemoryProviderStore:
    """Dict-backed store; insertion order is the resolution order."""

    def __init__(self, providers: Iterable[ProviderConfig] = ()) -> None:
        self._providers: dict[str, ProviderConfig] = {}
        for cfg in providers:
            self.upsert(cfg)

    async def load(self) -> list[ProviderConfig]:
        return list(self._providers.values())

    def upsert(self, cfg: ProviderConfig) -> None:
        self._providers[cfg.name] = cfg

    def get(self, name: str) -> ProviderConfig | None:
        return self._providers.get(name)

    def delete(self, name: str) -> bool:
        return self._providers.pop(name, None) is not None


class JsonFileProviderStore:
    """
    Reads a JSON list of provider records from disk on every load.

    Example file::

        [{"name": "gemini", "api_url": "...", "api_key": "...",
          "supported_tasks": ["text_extraction", "evaluation"],
          "task_preferences": {"evaluation": true}}]
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    async def load(self) -> list[ProviderConfig]:
        with open(self.path, encoding="utf-8") as f:
            raw = json.load(f)

        providers = _PROVIDER_LIST.validate_python(raw)
        names = [p.name for p in providers]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate provider names in {self.path}")

        logger.debug("Loaded %d provider configs from %s", len(providers), self.path)
        return providers
