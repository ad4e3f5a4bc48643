"""
Noise filter for extracted answer text.

Drops OCR debris line by line (stray symbols, page numbers, ruler lines,
failure messages). No semantic judgement: relevance is decided later.
"""

from __future__ import annotations

import re
from typing import Iterable

from answer_eval.core.config import FAILURE_SENTINELS

_SENTINEL_RE = re.compile(
    r"^(?:" + "|".join(re.escape(s) for s in FAILURE_SENTINELS) + r")",
    re.IGNORECASE,
)
_NUMERIC_PUNCT_RE = re.compile(r"^[\d\s\-+*/=().,:;]+$")
_REPEATED_CHAR_RE = re.compile(r"^(.)\1{5,}$")
_ALNUM_RE = re.compile(r"[^\W_]", re.UNICODE)

MIN_LINE_LENGTH = 3
MIN_ALNUM_CHARS = 2


def is_noise_line(line: str) -> bool:
    if len(line) < MIN_LINE_LENGTH:
        return True
    if _SENTINEL_RE.match(line):
        return True
    if _NUMERIC_PUNCT_RE.match(line):
        return True
    if _REPEATED_CHAR_RE.match(line):
        return True
    return len(_ALNUM_RE.findall(line)) < MIN_ALNUM_CHARS


def clean_text(text: str | None) -> str:
    """Trimmed surviving lines of one text, newline-joined."""
    if not text or not isinstance(text, str):
        return ""
    lines = (line.strip() for line in text.split("\n"))
    return "\n".join(line for line in lines if line and not is_noise_line(line))


def clean(texts: Iterable[str | None]) -> list[str]:
    """Clean each text, dropping texts with nothing left."""
    cleaned = (clean_text(t) for t in texts)
    return [t for t in cleaned if t]
