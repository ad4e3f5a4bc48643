"""Capability interfaces implemented by provider adapters.

A provider adapter implements whichever of these its service supports;
the factory maps provider names to adapter classes so that adding a
provider never touches the orchestration code.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from answer_eval.models.dto import DocumentReference, ExtractionOutcome, ProviderConfig


@runtime_checkable
class Extractor(Protocol):
    """Document text extraction.

    Never raises: every failure is classified into an ``ErrorKind`` on the
    returned outcome.
    """

    async def extract(
        self, ref: DocumentReference, cfg: ProviderConfig
    ) -> ExtractionOutcome: ...


@runtime_checkable
class Classifier(Protocol):
    """Short free-text classification (relevance check).

    Raises ExternalServiceError on provider failure.
    """

    async def classify(self, prompt: str, cfg: ProviderConfig) -> str: ...


@runtime_checkable
class Evaluator(Protocol):
    """Long-form evaluation completion.

    Raises ExternalServiceError on provider failure.
    """

    async def complete(self, prompt: str, cfg: ProviderConfig) -> str: ...
