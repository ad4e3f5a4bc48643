"""
Batch text extraction with one provider-level fallback pass.

Documents are extracted in submission order by the preferred
``text_extraction`` provider. When that provider fails systemically the
whole batch is repeated once with the fallback provider. Per-document
failures are never retried: the outcome records them and the caller sees
exactly one outcome per input, in input order.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, Sequence

from answer_eval.clients.base import failure_outcome
from answer_eval.clients.factory import AdapterFactory
from answer_eval.clients.ports import Extractor
from answer_eval.core.config import EXTRACTION_FAILED_TEMPLATE
from answer_eval.core.exceptions import (
    NoProviderConfigured,
    ProviderNotFound,
    UnsupportedProviderError,
)
from answer_eval.models.dto import (
    TRANSPORT_ERROR_KINDS,
    DocumentReference,
    ErrorKind,
    ExtractionOutcome,
    ProviderConfig,
    Task,
)
from answer_eval.registry.provider_registry import ProviderRegistry
from answer_eval.resilience.circuit_breaker import ProviderBreakers

logger = logging.getLogger(__name__)


def placeholder_outcome(ref: DocumentReference, reason: str) -> ExtractionOutcome:
    """Outcome for a document no provider could be asked about."""
    return ExtractionOutcome(
        index=ref.index,
        text=EXTRACTION_FAILED_TEMPLATE.format(position=ref.label),
        success=False,
        error_kind=ErrorKind.PROVIDER_ERROR,
        detail=reason,
    )


def is_systemic_failure(outcomes: Sequence[ExtractionOutcome]) -> bool:
    """Every document failed for the same provider-side reason."""
    if not outcomes or any(o.success for o in outcomes):
        return False
    kinds = {o.error_kind for o in outcomes}
    return len(kinds) == 1 and kinds.pop() in TRANSPORT_ERROR_KINDS


class ExtractionOrchestrator:
    """
    Run extraction over a batch of documents.

    Args:
        registry: Provider registry
        factory: Adapter factory
        breakers: Per-provider circuit breakers
        concurrency: Documents extracted at once (1 = strictly sequential)
        clock: Monotonic clock the deadline is measured against
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        factory: AdapterFactory,
        breakers: ProviderBreakers,
        *,
        concurrency: int = 1,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._registry = registry
        self._factory = factory
        self._breakers = breakers
        self._concurrency = max(1, concurrency)
        self._clock = clock

    async def extract_batch(
        self,
        refs: Sequence[DocumentReference],
        *,
        deadline: Optional[float] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> list[ExtractionOutcome]:
        """
        Extract text from every document.

        Args:
            refs: Documents in submission order
            deadline: Absolute deadline on the orchestrator clock
            cancel_event: Set to abandon the remaining documents

        Returns:
            One outcome per document, in input order. Never raises for
            provider or document failures.
        """
        refs = list(refs)
        if not refs:
            return []

        primary: Optional[ProviderConfig] = None
        try:
            primary = await self._registry.resolve(Task.TEXT_EXTRACTION)
        except NoProviderConfigured as exc:
            logger.warning(exc.message, extra={"task": Task.TEXT_EXTRACTION.value})

        if primary is not None:
            outcomes, systemic = await self._run_with(primary, refs, deadline, cancel_event)
            if outcomes is not None and not systemic:
                return outcomes

        try:
            fallback = await self._registry.resolve_fallback(
                Task.TEXT_EXTRACTION, excluding=primary
            )
        except ProviderNotFound as exc:
            logger.error(
                f"{exc.message}; returning placeholder outcomes",
                extra={
                    "task": Task.TEXT_EXTRACTION.value,
                    "provider": primary.name if primary else None,
                    "batch_size": len(refs),
                },
            )
            return [placeholder_outcome(ref, exc.message) for ref in refs]

        logger.warning(
            f"Switching text extraction to fallback provider {fallback.name}",
            extra={
                "provider": primary.name if primary else None,
                "fallback_provider": fallback.name,
                "batch_size": len(refs),
            },
        )
        outcomes, _ = await self._run_with(fallback, refs, deadline, cancel_event)
        if outcomes is None:
            return [
                placeholder_outcome(ref, f"fallback provider {fallback.name} unavailable")
                for ref in refs
            ]
        return outcomes

    async def _run_with(
        self,
        cfg: ProviderConfig,
        refs: list[DocumentReference],
        deadline: Optional[float],
        cancel_event: Optional[asyncio.Event],
    ) -> tuple[Optional[list[ExtractionOutcome]], bool]:
        """
        One pass over the batch with ``cfg``.

        Returns:
            ``(outcomes, systemic)``; outcomes is None when the provider
            could not be asked at all
        """
        breaker = self._breakers.get(cfg.name)
        if not breaker.allow_request():
            logger.warning(
                f"Circuit open for {cfg.name}, skipping provider",
                extra={"provider": cfg.name, "circuit_state": breaker.state.value},
            )
            return None, True

        try:
            extractor = self._factory.extractor_for(cfg)
        except UnsupportedProviderError as exc:
            logger.error(exc.message, extra={"provider": cfg.name, "error_code": exc.error_code})
            return None, True

        outcomes, interrupted = await self._run_batch(extractor, cfg, refs, deadline, cancel_event)

        # A caller deadline says nothing about the provider's health
        systemic = not interrupted and is_systemic_failure(outcomes)
        if systemic:
            breaker.record_failure()
            logger.warning(
                f"Provider {cfg.name} failed for the whole batch",
                extra={
                    "provider": cfg.name,
                    "error_kind": outcomes[0].error_kind.value,
                    "batch_size": len(refs),
                },
            )
        elif not interrupted:
            breaker.record_success()
        return outcomes, systemic

    async def _run_batch(
        self,
        extractor: Extractor,
        cfg: ProviderConfig,
        refs: list[DocumentReference],
        deadline: Optional[float],
        cancel_event: Optional[asyncio.Event],
    ) -> tuple[list[ExtractionOutcome], bool]:
        results: list[Optional[ExtractionOutcome]] = [None] * len(refs)
        semaphore = asyncio.Semaphore(self._concurrency)

        async def run_one(position: int, ref: DocumentReference) -> None:
            async with semaphore:
                if self._stopped(deadline, cancel_event):
                    return
                results[position] = await self._bounded(
                    extractor.extract(ref, cfg), deadline, cancel_event
                )

        await asyncio.gather(*(run_one(i, ref) for i, ref in enumerate(refs)))

        interrupted = any(r is None for r in results)
        if interrupted:
            reason = (
                "cancelled"
                if cancel_event is not None and cancel_event.is_set()
                else "deadline exceeded"
            )
            logger.warning(
                f"Text extraction {reason} before the batch completed",
                extra={
                    "provider": cfg.name,
                    "batch_size": len(refs),
                    "error_kind": ErrorKind.TIMEOUT.value,
                },
            )
            results = [
                r if r is not None else failure_outcome(ref, cfg.name, ErrorKind.TIMEOUT, reason)
                for r, ref in zip(results, refs)
            ]
        return results, interrupted  # type: ignore[return-value]

    def _stopped(
        self, deadline: Optional[float], cancel_event: Optional[asyncio.Event]
    ) -> bool:
        if cancel_event is not None and cancel_event.is_set():
            return True
        return deadline is not None and self._clock() >= deadline

    async def _bounded(
        self,
        call: Awaitable[ExtractionOutcome],
        deadline: Optional[float],
        cancel_event: Optional[asyncio.Event],
    ) -> Optional[ExtractionOutcome]:
        """Await ``call`` unless the deadline passes or the batch is cancelled first."""
        if deadline is None and cancel_event is None:
            return await call

        task = asyncio.ensure_future(call)
        waiters: set[asyncio.Future] = {task}
        cancel_waiter = None
        if cancel_event is not None:
            cancel_waiter = asyncio.ensure_future(cancel_event.wait())
            waiters.add(cancel_waiter)
        timeout = None if deadline is None else max(0.0, deadline - self._clock())

        try:
            done, _ = await asyncio.wait(
                waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            if cancel_waiter is not None:
                cancel_waiter.cancel()
            if not task.done():
                task.cancel()

        if task in done:
            return task.result()
        return None
