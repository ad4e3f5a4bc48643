"""
Parse a provider's free-text evaluation into an EvaluationRecord.

Providers are asked to answer with fixed section headers, but they add
markdown emphasis, bullets and the occasional typo. Header recognition is a
declared table (section -> compiled pattern) so the heuristics can be
tested in isolation; misspelt headers are recovered with rapidfuzz.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Optional

from rapidfuzz import fuzz, process

from answer_eval.core.config import DEFAULT_RELEVANCY, DEFAULT_SCORE_RATIO
from answer_eval.models.dto import (
    ANALYSIS_SECTIONS,
    EvaluationAnalysis,
    EvaluationRecord,
    EvaluationSource,
    Question,
)
from answer_eval.processors import fallback_evaluator

logger = logging.getLogger(__name__)

HEADER_ALIASES: dict[str, tuple[str, ...]] = {
    "introduction": ("introduction", "intro"),
    "body": ("body section", "main body", "body"),
    "conclusion": ("conclusion section", "conclusion"),
    "strengths": ("strengths", "strength"),
    "weaknesses": ("areas for improvement", "weaknesses", "weakness"),
    "suggestions": ("recommendations", "recommendation", "suggestions", "suggestion"),
    "feedback": ("overall feedback", "feedback"),
    "comments": ("comments", "comment"),
    "remark": ("overall remark", "remark", "summary"),
}

_LEAD = r"^[#>*_\s]*"
_TRAIL = r"[*_\s]*(?:[:\-][*_\s]*|$)"


def _header_pattern(aliases: tuple[str, ...]) -> re.Pattern[str]:
    alternation = "|".join(re.escape(a).replace(r"\ ", r"\s+") for a in aliases)
    return re.compile(_LEAD + r"(?:" + alternation + r")" + _TRAIL, re.IGNORECASE)


SECTION_PATTERNS: dict[str, re.Pattern[str]] = {
    section: _header_pattern(aliases) for section, aliases in HEADER_ALIASES.items()
}

_QUALIFIER = r"(?:(?:total|final|overall)\s+)?"

RELEVANCY_PATTERN = re.compile(
    _LEAD + _QUALIFIER + r"relevancy" + r"[*_]*(?:[\s:\-]|$)", re.IGNORECASE
)
SCORE_PATTERN = re.compile(_LEAD + _QUALIFIER + r"score" + r"[*_]*(?:[\s:\-]|$)", re.IGNORECASE)

_INTEGER_RE = re.compile(r"\d+")
_BULLET_RE = re.compile(r"^(?:[-*\u2022+]|\d+[.)])\s+")
_EMPHASIS_RE = re.compile(r"^[#>*_\s]+|[*_\s]+$")

FUZZY_HEADER_CUTOFF = 85
MAX_FUZZY_HEADER_CHARS = 30

_ALIAS_TO_SECTION: dict[str, str] = {
    alias: section for section, aliases in HEADER_ALIASES.items() for alias in aliases
}


def match_header(line: str) -> Optional[tuple[str, str]]:
    """
    Recognize a section header line.

    Returns:
        ``(section, trailing_text)`` or None when the line is not a header
    """
    for section, pattern in SECTION_PATTERNS.items():
        m = pattern.match(line)
        if m:
            return section, line[m.end():].strip()

    if not line.rstrip().endswith(":"):
        return None
    label = _EMPHASIS_RE.sub("", line.rstrip()[:-1]).lower()
    if not label or len(label) > MAX_FUZZY_HEADER_CHARS:
        return None
    best = process.extractOne(
        label,
        list(_ALIAS_TO_SECTION),
        scorer=fuzz.ratio,
        score_cutoff=FUZZY_HEADER_CUTOFF,
    )
    if best is None:
        return None
    logger.debug(f"Recovered misspelt header '{label}' as '{best[0]}'")
    return _ALIAS_TO_SECTION[best[0]], ""


def _marker_value(pattern: re.Pattern[str], line: str) -> Optional[tuple[int, ...]]:
    """``(value,)`` when the line is the marker, ``()`` if it has no number."""
    m = pattern.match(line)
    if not m:
        return None
    number = _INTEGER_RE.search(line, m.end())
    return (int(number.group()),) if number else ()


def _strip_bullet(item: str) -> str:
    return _BULLET_RE.sub("", item).strip()


def _clean_items(items: list[str]) -> list[str]:
    seen: set[str] = set()
    cleaned: list[str] = []
    for raw in items:
        item = _strip_bullet(raw)
        if not item:
            continue
        header = match_header(item)
        if header is not None and not header[1]:
            continue
        if item in seen:
            continue
        seen.add(item)
        cleaned.append(item)
    return cleaned


def default_score(max_marks: int) -> int:
    return math.floor(max_marks * DEFAULT_SCORE_RATIO)


def _parse(raw_text: str, question: Question) -> EvaluationRecord:
    max_marks = question.max_marks
    relevancy = DEFAULT_RELEVANCY
    score = default_score(max_marks)
    remark_parts: list[str] = []
    collected: dict[str, list[str]] = {
        section: [] for section in (*ANALYSIS_SECTIONS, "comments")
    }

    current: Optional[str] = None
    for line in (raw.strip() for raw in raw_text.split("\n")):
        if not line:
            continue

        marker = _marker_value(RELEVANCY_PATTERN, line)
        if marker is not None:
            if marker:
                relevancy = min(100, max(0, marker[0]))
            current = None
            continue

        marker = _marker_value(SCORE_PATTERN, line)
        if marker is not None:
            if marker:
                score = min(max_marks, max(0, marker[0]))
            current = None
            continue

        header = match_header(line)
        if header is not None:
            current, line = header
            if not line:
                continue

        if current is None:
            continue
        if current == "remark":
            remark_parts.append(line)
        else:
            collected[current].append(line)

    analysis = EvaluationAnalysis(
        **{section: _clean_items(collected[section]) for section in ANALYSIS_SECTIONS}
    )
    return EvaluationRecord(
        relevancy=relevancy,
        score=score,
        max_marks=max_marks,
        remark=" ".join(remark_parts),
        comments=_clean_items(collected["comments"]),
        analysis=analysis,
        source=EvaluationSource.AI,
    )


def parse(raw_text: str, question: Question) -> EvaluationRecord:
    """
    Parse evaluation text, never raising.

    Any internal failure yields the fallback evaluator's record instead.
    """
    try:
        return _parse(raw_text or "", question)
    except Exception as exc:
        logger.error(
            f"Failed to parse evaluation response: {exc}",
            exc_info=True,
            extra={"question_id": question.id},
        )
        return fallback_evaluator.mock(question)
