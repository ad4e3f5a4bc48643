"""
Provider adapter factory.

Maps a provider's adapter key (its name unless configured otherwise) to
the adapter class and hands out the capability the caller asked for.
Adding a provider means registering one more adapter class here.
"""

from __future__ import annotations

import httpx

from answer_eval.clients.agentic_client import AgenticDocumentClient
from answer_eval.clients.base import ProviderHttpClient
from answer_eval.clients.gemini_client import GeminiClient
from answer_eval.clients.openai_client import OpenAIClient
from answer_eval.clients.ports import Classifier, Evaluator, Extractor
from answer_eval.core.exceptions import UnsupportedProviderError
from answer_eval.models.dto import ProviderConfig

ADAPTER_CLASSES: dict[str, type[ProviderHttpClient]] = {
    "agentic": AgenticDocumentClient,
    "openai": OpenAIClient,
    "gemini": GeminiClient,
}


def register_adapter(key: str, adapter_cls: type[ProviderHttpClient]) -> None:
    ADAPTER_CLASSES[key.lower()] = adapter_cls


class AdapterFactory:
    """
    Builds (and caches) one adapter instance per adapter key.

    Args:
        transport: Optional httpx transport shared by every adapter
        verify_ssl: Verify TLS certificates
        overrides: Pre-built adapters by key, used instead of constructing one
    """

    def __init__(
        self,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        verify_ssl: bool = True,
        overrides: dict[str, object] | None = None,
    ) -> None:
        self._transport = transport
        self._verify_ssl = verify_ssl
        self._instances: dict[str, object] = {
            k.lower(): v for k, v in (overrides or {}).items()
        }

    def _adapter(self, cfg: ProviderConfig, capability: str) -> object:
        key = cfg.adapter_key
        adapter = self._instances.get(key)
        if adapter is None:
            adapter_cls = ADAPTER_CLASSES.get(key)
            if adapter_cls is None:
                raise UnsupportedProviderError(cfg.name, capability)
            adapter = adapter_cls(transport=self._transport, verify_ssl=self._verify_ssl)
            self._instances[key] = adapter
        return adapter

    def extractor_for(self, cfg: ProviderConfig) -> Extractor:
        adapter = self._adapter(cfg, "text extraction")
        if not isinstance(adapter, Extractor):
            raise UnsupportedProviderError(cfg.name, "text extraction")
        return adapter

    def classifier_for(self, cfg: ProviderConfig) -> Classifier:
        adapter = self._adapter(cfg, "classification")
        if not isinstance(adapter, Classifier):
            raise UnsupportedProviderError(cfg.name, "classification")
        return adapter

    def evaluator_for(self, cfg: ProviderConfig) -> Evaluator:
        adapter = self._adapter(cfg, "evaluation")
        if not isinstance(adapter, Evaluator):
            raise UnsupportedProviderError(cfg.name, "evaluation")
        return adapter
