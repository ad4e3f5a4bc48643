"""Test doubles implementing the provider capability interfaces."""

from __future__ import annotations

import asyncio
from typing import Callable, Iterable, Optional, Union

from answer_eval.clients.base import failure_outcome
from answer_eval.clients.factory import AdapterFactory
from answer_eval.core.exceptions import ExternalServiceError
from answer_eval.models.dto import (
    DocumentReference,
    ErrorKind,
    ExtractionOutcome,
    ProviderConfig,
    Task,
)
from answer_eval.registry.provider_registry import ProviderRegistry
from answer_eval.registry.stores import InMemoryProviderStore

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def make_provider(
    name: str,
    *,
    tasks: Iterable[Task] = (Task.TEXT_EXTRACTION, Task.ANALYSIS, Task.EVALUATION),
    prefers: Iterable[Task] = (),
    active: bool = True,
    adapter: Optional[str] = None,
    **options,
) -> ProviderConfig:
    return ProviderConfig(
        name=name,
        adapter=adapter,
        api_url=f"https://{name}.example.com/v1",
        api_key="test-key",
        is_active=active,
        supported_tasks=frozenset(tasks),
        task_preferences={task: True for task in prefers},
        options=options,
    )


def make_registry(*providers: ProviderConfig) -> ProviderRegistry:
    return ProviderRegistry(InMemoryProviderStore(providers))


def make_refs(count: int) -> list[DocumentReference]:
    return [
        DocumentReference(index=i, location=f"https://files.example.com/answer-{i}.png")
        for i in range(count)
    ]


ExtractBehavior = Callable[[DocumentReference], Union[str, ErrorKind]]


class FakeExtractor:
    """Returns the behavior's text, or a failed outcome for an ErrorKind."""

    def __init__(self, behavior: Optional[ExtractBehavior] = None, delay: float = 0.0):
        self.behavior = behavior or (lambda ref: f"Answer text on page {ref.label}")
        self.delay = delay
        self.calls: list[int] = []

    async def extract(self, ref: DocumentReference, cfg: ProviderConfig) -> ExtractionOutcome:
        self.calls.append(ref.index)
        if self.delay:
            await asyncio.sleep(self.delay)
        result = self.behavior(ref)
        if isinstance(result, ErrorKind):
            return failure_outcome(ref, cfg.name, result, "simulated failure")
        return ExtractionOutcome(
            index=ref.index, text=result, success=True, provider_used=cfg.name
        )


class FakeLLM:
    """Classifier and Evaluator with canned replies or a canned failure."""

    def __init__(
        self,
        *,
        classify_reply: str = "RELEVANT - addresses the question",
        complete_reply: str = "",
        error_type: Optional[str] = None,
    ):
        self.classify_reply = classify_reply
        self.complete_reply = complete_reply
        self.error_type = error_type
        self.prompts: list[str] = []

    def _maybe_fail(self, cfg: ProviderConfig) -> None:
        if self.error_type:
            raise ExternalServiceError(service_name=cfg.name, error_type=self.error_type)

    async def classify(self, prompt: str, cfg: ProviderConfig) -> str:
        self.prompts.append(prompt)
        self._maybe_fail(cfg)
        return self.classify_reply

    async def complete(self, prompt: str, cfg: ProviderConfig) -> str:
        self.prompts.append(prompt)
        self._maybe_fail(cfg)
        return self.complete_reply


def make_factory(**adapters: object) -> AdapterFactory:
    return AdapterFactory(overrides=adapters)
