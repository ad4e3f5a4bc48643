"""Unit tests for provider resolution and snapshot caching."""

import json

import pytest

from answer_eval.core.exceptions import NoProviderConfigured, ProviderNotFound
from answer_eval.models.dto import Task
from answer_eval.registry import InMemoryProviderStore, JsonFileProviderStore, ProviderRegistry
from tests.fakes import make_provider


class CountingStore(InMemoryProviderStore):
    def __init__(self, providers=()):
        super().__init__(providers)
        self.loads = 0

    async def load(self):
        self.loads += 1
        return await super().load()


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def _providers():
    return [
        make_provider("agentic", tasks=[Task.TEXT_EXTRACTION], prefers=[Task.TEXT_EXTRACTION]),
        make_provider("gemini", prefers=[Task.EVALUATION, Task.ANALYSIS]),
        make_provider("openai"),
    ]


class TestResolve:
    """Tests for preferred provider resolution."""

    @pytest.mark.asyncio
    async def test_resolves_preferred_provider(self):
        registry = ProviderRegistry(InMemoryProviderStore(_providers()))

        assert (await registry.resolve(Task.TEXT_EXTRACTION)).name == "agentic"
        assert (await registry.resolve(Task.EVALUATION)).name == "gemini"

    @pytest.mark.asyncio
    async def test_inactive_provider_is_ignored(self):
        store = InMemoryProviderStore(
            [make_provider("gemini", prefers=[Task.EVALUATION], active=False)]
        )
        registry = ProviderRegistry(store)

        with pytest.raises(NoProviderConfigured) as exc_info:
            await registry.resolve(Task.EVALUATION)
        assert exc_info.value.task == "evaluation"

    @pytest.mark.asyncio
    async def test_first_preferred_wins(self):
        store = InMemoryProviderStore(
            [
                make_provider("first", prefers=[Task.EVALUATION]),
                make_provider("second", prefers=[Task.EVALUATION]),
            ]
        )
        assert (await ProviderRegistry(store).resolve(Task.EVALUATION)).name == "first"

    @pytest.mark.asyncio
    async def test_is_preferred(self):
        registry = ProviderRegistry(InMemoryProviderStore(_providers()))
        assert await registry.is_preferred(Task.EVALUATION, "gemini") is True
        assert await registry.is_preferred(Task.EVALUATION, "openai") is False
        assert await ProviderRegistry(InMemoryProviderStore()).is_preferred(
            Task.EVALUATION, "gemini"
        ) is False


class TestResolveFallback:
    """Tests for fallback provider resolution."""

    @pytest.mark.asyncio
    async def test_fallback_supports_but_is_not_preferred(self):
        registry = ProviderRegistry(InMemoryProviderStore(_providers()))
        primary = await registry.resolve(Task.TEXT_EXTRACTION)

        fallback = await registry.resolve_fallback(Task.TEXT_EXTRACTION, excluding=primary)
        assert fallback.name == "gemini"

    @pytest.mark.asyncio
    async def test_excluding_by_name(self):
        registry = ProviderRegistry(InMemoryProviderStore(_providers()))
        fallback = await registry.resolve_fallback(Task.TEXT_EXTRACTION, excluding="gemini")
        assert fallback.name == "openai"

    @pytest.mark.asyncio
    async def test_no_fallback(self):
        store = InMemoryProviderStore(
            [make_provider("agentic", tasks=[Task.TEXT_EXTRACTION], prefers=[Task.TEXT_EXTRACTION])]
        )
        with pytest.raises(ProviderNotFound):
            await ProviderRegistry(store).resolve_fallback(Task.TEXT_EXTRACTION, excluding="agentic")


class TestSnapshotCaching:
    """Tests for TTL caching and invalidation."""

    @pytest.mark.asyncio
    async def test_snapshot_is_cached_within_ttl(self):
        store, clock = CountingStore(_providers()), FakeClock()
        registry = ProviderRegistry(store, ttl_seconds=300, clock=clock)

        await registry.resolve(Task.EVALUATION)
        clock.now += 299
        await registry.resolve(Task.EVALUATION)
        assert store.loads == 1

        clock.now += 2
        await registry.resolve(Task.EVALUATION)
        assert store.loads == 2

    @pytest.mark.asyncio
    async def test_update_visible_after_invalidate(self):
        store = CountingStore(_providers())
        registry = ProviderRegistry(store, clock=FakeClock())
        assert (await registry.resolve(Task.EVALUATION)).name == "gemini"

        store.upsert(make_provider("gemini", active=False))
        assert (await registry.resolve(Task.EVALUATION)).name == "gemini"

        registry.invalidate()
        with pytest.raises(NoProviderConfigured):
            await registry.resolve(Task.EVALUATION)

    @pytest.mark.asyncio
    async def test_active_providers(self):
        store = InMemoryProviderStore(
            [make_provider("a"), make_provider("b", active=False), make_provider("c")]
        )
        names = [p.name for p in await ProviderRegistry(store).active_providers()]
        assert names == ["a", "c"]


class TestJsonFileStore:
    """Tests for the JSON file backed store."""

    @pytest.mark.asyncio
    async def test_loads_records(self, tmp_path):
        path = tmp_path / "providers.json"
        path.write_text(
            json.dumps(
                [
                    {
                        "name": "gemini",
                        "api_url": "https://gemini.example.com",
                        "api_key": "secret",
                        "supported_tasks": ["evaluation", "analysis"],
                        "task_preferences": {"evaluation": True},
                        "options": {"timeout_seconds": 20},
                    }
                ]
            ),
            encoding="utf-8",
        )

        registry = ProviderRegistry(JsonFileProviderStore(path))
        cfg = await registry.resolve(Task.EVALUATION)
        assert cfg.secret() == "secret"
        assert cfg.options.timeout_seconds == 20

    @pytest.mark.asyncio
    async def test_rejects_duplicate_names(self, tmp_path):
        path = tmp_path / "providers.json"
        path.write_text(json.dumps([{"name": "gemini"}, {"name": "gemini"}]), encoding="utf-8")

        with pytest.raises(ValueError):
            await JsonFileProviderStore(path).load()
