from answer_eval.registry.provider_registry import ProviderRegistry
from answer_eval.registry.stores import (
    InMemoryProviderStore,
    JsonFileProviderStore,
    ProviderConfigStore,
)

__all__ = [
    "ProviderRegistry",
    "ProviderConfigStore",
    "InMemoryProviderStore",
    "JsonFileProviderStore",
]
