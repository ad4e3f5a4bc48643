"""
Deterministic-shape evaluation used when no provider produced one.

The numbers are randomized within a plausible band so a fallback record is
not mistaken for a real grade distribution; the text is drawn from the
curated rubric pools.
"""

from __future__ import annotations

import random
from typing import Optional

from answer_eval.core.config import (
    DEFAULT_SECTION_CONTENT,
    FALLBACK_RELEVANCY_MAX,
    FALLBACK_RELEVANCY_MIN,
)
from answer_eval.models.dto import (
    EvaluationAnalysis,
    EvaluationRecord,
    EvaluationSource,
    Question,
)
from answer_eval.processors.rubric import (
    ANALYSIS_POOL,
    FALLBACK_COMMENTS,
    FALLBACK_PICKS,
    OVERALL_COMMENT_BRACKETS,
    REMARK_BRACKETS,
    pick_bracket,
)

SUMMARY_ITEMS = 3


def _percentage(score: int, max_marks: int) -> float:
    return score * 100 / max_marks if max_marks else 0.0


def default_remark(score: int, max_marks: int) -> str:
    return pick_bracket(REMARK_BRACKETS, _percentage(score, max_marks))


def fallback_analysis() -> EvaluationAnalysis:
    return EvaluationAnalysis(
        **{
            section: [ANALYSIS_POOL[section][i] for i in picks]
            for section, picks in FALLBACK_PICKS.items()
        }
    )


def mock(question: Question, rng: Optional[random.Random] = None) -> EvaluationRecord:
    """
    Plausible evaluation record for ``question``.

    Args:
        question: Question being evaluated (supplies max marks)
        rng: Random source, injectable for reproducible tests
    """
    rng = rng or random.Random()
    max_marks = question.max_marks
    relevancy = rng.randint(FALLBACK_RELEVANCY_MIN, FALLBACK_RELEVANCY_MAX)
    score = relevancy * max_marks // 100

    return EvaluationRecord(
        relevancy=relevancy,
        score=score,
        max_marks=max_marks,
        remark=default_remark(score, max_marks),
        comments=list(FALLBACK_COMMENTS),
        analysis=fallback_analysis(),
        source=EvaluationSource.FALLBACK,
    )


def _provided(items: list[str]) -> list[str]:
    return [item for item in items if item != DEFAULT_SECTION_CONTENT]


def summarize_comments(
    analysis: EvaluationAnalysis, score: int, max_marks: int
) -> list[str]:
    """Comments derived from an analysis, for responses that omitted them."""
    comments = [pick_bracket(OVERALL_COMMENT_BRACKETS, _percentage(score, max_marks))]

    strengths = _provided(analysis.strengths)[:SUMMARY_ITEMS]
    if strengths:
        comments.append(f"Notable strengths include: {', '.join(strengths)}.")

    weaknesses = _provided(analysis.weaknesses)[:SUMMARY_ITEMS]
    if weaknesses:
        comments.append(f"Areas needing improvement: {', '.join(weaknesses)}.")

    suggestions = _provided(analysis.suggestions)[:SUMMARY_ITEMS]
    if suggestions:
        comments.append(f"Recommendations for improvement: {', '.join(suggestions)}.")

    return comments
