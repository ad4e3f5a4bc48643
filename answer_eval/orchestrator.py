from __future__ import annotations

import asyncio
import logging
import random
from typing import Optional, Sequence, Union

from answer_eval.clients.factory import AdapterFactory
from answer_eval.core.config import DEFAULT_COMMENTS
from answer_eval.core.exceptions import NoProviderConfigured, ProviderNotFound
from answer_eval.core.logging_config import configure_structured_logging
from answer_eval.core.settings import (
    AppSettings,
    ProviderSettings,
    get_app_settings,
    get_provider_settings,
)
from answer_eval.models.dto import (
    CustomPromptOptions,
    DocumentReference,
    EvaluationRecord,
    EvaluationSource,
    ExtractionOutcome,
    ProviderConfig,
    Question,
    RelevanceVerdict,
    Task,
)
from answer_eval.processors import evaluation_parser, fallback_evaluator, text_sanitizer
from answer_eval.processors.extraction import ExtractionOrchestrator
from answer_eval.processors.prompt_builder import build_custom_prompt, build_standard_prompt
from answer_eval.processors.relevance import RelevanceValidator
from answer_eval.registry.provider_registry import ProviderRegistry
from answer_eval.registry.stores import (
    InMemoryProviderStore,
    JsonFileProviderStore,
    ProviderConfigStore,
)
from answer_eval.resilience.circuit_breaker import ProviderBreakers
from answer_eval.utils.timing import StageTimers

logger = logging.getLogger(__name__)

# Tasks a submission cannot be processed without
REQUIRED_TASKS = (Task.TEXT_EXTRACTION, Task.EVALUATION)


class AnswerEvaluationPipeline:
    """
    Entry point for extracting, gating and grading one submitted answer.

    Provider failures never escape: they end in a failed outcome, a skipped
    relevance check or the fallback evaluation. Only a missing provider
    configuration is surfaced, through ``assert_ready``.

    Args:
        registry: Provider registry
        factory: Adapter factory
        breakers: Per-provider circuit breakers
        concurrency: Documents extracted at once
        rng: Random source for the fallback evaluator
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        factory: Optional[AdapterFactory] = None,
        breakers: Optional[ProviderBreakers] = None,
        *,
        concurrency: int = 1,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.registry = registry
        self.factory = factory or AdapterFactory()
        self.breakers = breakers or ProviderBreakers()
        self.extraction = ExtractionOrchestrator(
            registry, self.factory, self.breakers, concurrency=concurrency
        )
        self.relevance = RelevanceValidator(registry, self.factory, self.breakers)
        self._rng = rng

    async def assert_ready(self, *tasks: Union[Task, str]) -> None:
        """
        Raises:
            NoProviderConfigured: For the first task without a preferred provider
        """
        for task in tasks or REQUIRED_TASKS:
            await self.registry.resolve(Task(task))

    async def extract_and_clean(
        self,
        refs: Sequence[DocumentReference],
        *,
        deadline: Optional[float] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> tuple[list[str], list[ExtractionOutcome]]:
        """
        Extract and sanitize every submitted document.

        Returns:
            ``(texts, outcomes)``: cleaned texts of the successful outcomes
            in input order, and one outcome per document
        """
        timers = StageTimers()
        with timers.timer("extraction"):
            outcomes = await self.extraction.extract_batch(
                refs, deadline=deadline, cancel_event=cancel_event
            )
        with timers.timer("sanitize"):
            texts = text_sanitizer.clean(o.text for o in outcomes if o.has_text)

        failed = sum(1 for o in outcomes if not o.success)
        logger.info(
            f"Extracted {len(outcomes) - failed}/{len(outcomes)} documents",
            extra=timers.log_extra(
                batch_size=len(outcomes),
                provider=sorted({o.provider_used for o in outcomes if o.provider_used}),
            ),
        )
        return texts, outcomes

    async def check_relevance(
        self,
        question: Question,
        texts: Sequence[Union[str, ExtractionOutcome]],
    ) -> RelevanceVerdict:
        timers = StageTimers()
        with timers.timer("relevance"):
            verdict = await self.relevance.validate(question, texts)
        logger.info(
            f"Relevance check: {'valid' if verdict.is_valid else verdict.reason}",
            extra=timers.log_extra(question_id=question.id),
        )
        return verdict

    async def evaluate(
        self,
        question: Question,
        texts: Sequence[str],
        criteria: Optional[str] = None,
        options: Optional[CustomPromptOptions] = None,
    ) -> EvaluationRecord:
        """
        Grade the answer.

        Tries the preferred evaluation provider, then one fallback
        evaluation provider, then the fallback evaluator. Never raises for
        provider failures.
        """
        if criteria and criteria.strip():
            prompt = build_custom_prompt(question, texts, criteria, options)
        else:
            prompt = build_standard_prompt(question, texts)

        timers = StageTimers()
        record: Optional[EvaluationRecord] = None
        with timers.timer("evaluation"):
            for cfg in await self._evaluation_candidates():
                raw = await self._complete(cfg, prompt, question)
                if raw is None:
                    continue
                with timers.timer("parse"):
                    record = evaluation_parser.parse(raw, question)
                if record.source is EvaluationSource.AI:
                    record = self._finalize(record, cfg)
                break

        if record is not None:
            logger.info(
                "Answer evaluated",
                extra=timers.log_extra(provider=record.provider_used, question_id=question.id),
            )
            return record

        logger.warning(
            "No evaluation provider succeeded, using fallback evaluation",
            extra={"question_id": question.id, "task": Task.EVALUATION.value},
        )
        return fallback_evaluator.mock(question, self._rng)

    async def _evaluation_candidates(self) -> list[ProviderConfig]:
        candidates: list[ProviderConfig] = []
        preferred: Optional[ProviderConfig] = None
        try:
            preferred = await self.registry.resolve(Task.EVALUATION)
            candidates.append(preferred)
        except NoProviderConfigured as exc:
            logger.warning(exc.message, extra={"task": Task.EVALUATION.value})
        try:
            candidates.append(
                await self.registry.resolve_fallback(Task.EVALUATION, excluding=preferred)
            )
        except ProviderNotFound:
            pass
        return candidates

    async def _complete(
        self, cfg: ProviderConfig, prompt: str, question: Question
    ) -> Optional[str]:
        breaker = self.breakers.get(cfg.name)
        try:
            evaluator = self.factory.evaluator_for(cfg)
            raw = await breaker.call(evaluator.complete, prompt, cfg)
        except Exception as exc:
            logger.warning(
                f"Evaluation with {cfg.name} failed: {exc}",
                extra={
                    "provider": cfg.name,
                    "task": Task.EVALUATION.value,
                    "question_id": question.id,
                    "error_code": getattr(exc, "error_code", type(exc).__name__),
                },
            )
            return None
        return raw if raw and raw.strip() else None

    @staticmethod
    def _finalize(record: EvaluationRecord, cfg: ProviderConfig) -> EvaluationRecord:
        update: dict = {"provider_used": cfg.name}
        if record.comments == [DEFAULT_COMMENTS]:
            update["comments"] = fallback_evaluator.summarize_comments(
                record.analysis, record.score, record.max_marks
            )
        return record.model_copy(update=update)


def build_pipeline(
    settings: Optional[ProviderSettings] = None,
    *,
    store: Optional[ProviderConfigStore] = None,
    app_settings: Optional[AppSettings] = None,
    configure_logging: bool = False,
) -> AnswerEvaluationPipeline:
    """
    Wire a pipeline from settings.

    Providers are read from ``PROVIDERS_FILE`` unless a store is given; with
    neither, the registry starts empty and ``assert_ready`` will fail.
    """
    settings = settings or get_provider_settings()
    if configure_logging:
        app_settings = app_settings or get_app_settings()
        configure_structured_logging(app_settings.LOG_LEVEL, app_settings.LOG_JSON)

    if store is None:
        path = settings.providers_path
        store = JsonFileProviderStore(path) if path else InMemoryProviderStore()

    registry = ProviderRegistry(store, ttl_seconds=settings.PROVIDER_CACHE_TTL_SECONDS)
    factory = AdapterFactory(verify_ssl=settings.VERIFY_SSL)
    return AnswerEvaluationPipeline(
        registry,
        factory,
        ProviderBreakers(),
        concurrency=settings.EXTRACTION_CONCURRENCY,
    )
