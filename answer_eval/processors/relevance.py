"""
Relevance gate run before evaluation.

Rejects submissions with no readable text, submissions an AI classifier
flags as unrelated, and obvious garbage (arithmetic only, a handful of
letters, one repeated character). The checks short-circuit in that order,
then fall back to keyword overlap with the question.
"""

from __future__ import annotations

import logging
import re
from typing import Optional, Sequence, Union

from answer_eval.clients.factory import AdapterFactory
from answer_eval.core.config import (
    MAX_GARBAGE_LETTERS,
    MIN_PREFIX_LENGTH,
    MIN_TERM_LENGTH,
    SHORT_ANSWER_CHARS,
)
from answer_eval.core.exceptions import NoProviderConfigured
from answer_eval.models.dto import (
    ExtractionOutcome,
    Question,
    RelevanceVerdict,
    Task,
    is_failure_text,
)
from answer_eval.processors.prompt_builder import build_relevance_prompt
from answer_eval.registry.provider_registry import ProviderRegistry
from answer_eval.resilience.circuit_breaker import ProviderBreakers

logger = logging.getLogger(__name__)

STOP_WORDS = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to",
        "for", "of", "with", "by", "is", "are", "was", "were", "be",
        "been", "have", "has", "had", "do", "does", "did", "will",
        "would", "could", "should", "may", "might", "can", "what",
        "when", "where", "why", "how", "which", "who", "whom",
    }
)

GARBAGE_PATTERNS = (
    re.compile(r"^[\d\s\-+*/=().,%^×]+$"),  # arithmetic only
    re.compile(r"^(.)\1{5,}$"),
)

REASON_NO_TEXT = "No readable text found in images"
REASON_NOT_RELEVANT = "Answer content is not relevant to the question"
REASON_GARBAGE = "Answer contains invalid or meaningless content"
REASON_TOO_SHORT = "Answer appears to be too short and unrelated to the question"
REASON_VALID = "Answer appears relevant to the question"

_NOT_RELEVANT_RE = re.compile(r"\b(?:NOT[\s_-]*RELEVANT|IRRELEVANT)\b", re.IGNORECASE)
_RELEVANT_RE = re.compile(r"\bRELEVANT\b", re.IGNORECASE)
_PUNCT_RE = re.compile(r"[^\w\s]")
_LETTER_RE = re.compile(r"[^\W\d_]")


def significant_terms(question_text: str) -> list[str]:
    """Lower-cased question tokens minus stop words, in first-seen order."""
    words = _PUNCT_RE.sub(" ", question_text.lower()).split()
    terms: list[str] = []
    for word in words:
        if len(word) >= MIN_TERM_LENGTH and word not in STOP_WORDS and word not in terms:
            terms.append(word)
    return terms


def term_matches(term: str, text: str) -> bool:
    prefix = term[: max(MIN_PREFIX_LENGTH, len(term) - 2)]
    return term in text or prefix in text


def is_garbage(text: str) -> bool:
    stripped = text.strip()
    if any(pattern.match(stripped) for pattern in GARBAGE_PATTERNS):
        return True
    return len(_LETTER_RE.findall(stripped)) <= MAX_GARBAGE_LETTERS


def classify_opinion(answer: str) -> Optional[bool]:
    """True/False for a clear classifier answer, None when ambiguous."""
    if _NOT_RELEVANT_RE.search(answer):
        return False
    if _RELEVANT_RE.search(answer):
        return True
    return None


def _readable_texts(items: Sequence[Union[str, ExtractionOutcome]]) -> list[str]:
    texts = []
    for item in items:
        if isinstance(item, ExtractionOutcome):
            if item.has_text:
                texts.append(item.text)
        elif isinstance(item, str) and not is_failure_text(item):
            texts.append(item)
    return texts


class RelevanceValidator:
    """
    Decide whether extracted text is a genuine attempt at the question.

    Args:
        registry: Provider registry (``analysis`` task selects the classifier)
        factory: Adapter factory
        breakers: Per-provider circuit breakers
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        factory: AdapterFactory,
        breakers: ProviderBreakers,
    ) -> None:
        self._registry = registry
        self._factory = factory
        self._breakers = breakers

    async def _ask_classifier(self, question: Question, combined_text: str) -> Optional[str]:
        try:
            cfg = await self._registry.resolve(Task.ANALYSIS)
        except NoProviderConfigured:
            logger.debug("No analysis provider configured, skipping AI relevance check")
            return None

        breaker = self._breakers.get(cfg.name)
        try:
            classifier = self._factory.classifier_for(cfg)
            answer = await breaker.call(
                classifier.classify, build_relevance_prompt(question, combined_text), cfg
            )
        except Exception as exc:
            logger.warning(
                f"AI relevance check failed: {exc}",
                extra={
                    "provider": cfg.name,
                    "task": Task.ANALYSIS.value,
                    "question_id": question.id,
                    "error_code": getattr(exc, "error_code", type(exc).__name__),
                },
            )
            return None
        return (answer or "").strip() or None

    async def validate(
        self,
        question: Question,
        texts: Sequence[Union[str, ExtractionOutcome]],
    ) -> RelevanceVerdict:
        """
        Validate extracted text against the question.

        Args:
            question: Question being answered
            texts: Extraction outcomes or cleaned texts, in submission order

        Returns:
            The first failing check's verdict, or a valid verdict
        """
        readable = _readable_texts(texts)
        if not readable:
            return RelevanceVerdict(is_valid=False, reason=REASON_NO_TEXT)

        combined_text = " ".join(readable).lower()
        terms = significant_terms(question.text)

        opinion = await self._ask_classifier(question, combined_text)
        if opinion is not None and classify_opinion(opinion) is False:
            logger.info(
                "Answer rejected by AI relevance check",
                extra={"question_id": question.id},
            )
            return RelevanceVerdict(
                is_valid=False, reason=REASON_NOT_RELEVANT, ai_opinion=opinion
            )

        if is_garbage(combined_text):
            return RelevanceVerdict(is_valid=False, reason=REASON_GARBAGE, ai_opinion=opinion)

        matches = [term for term in terms if term_matches(term, combined_text)]
        if len(combined_text) < SHORT_ANSWER_CHARS and not matches:
            return RelevanceVerdict(is_valid=False, reason=REASON_TOO_SHORT, ai_opinion=opinion)

        return RelevanceVerdict(is_valid=True, reason=REASON_VALID, ai_opinion=opinion)
