"""
Gemini generateContent adapter.

Supports all three capabilities. The API key travels as the ``key`` query
parameter; images are embedded as ``inline_data`` parts.
"""

from __future__ import annotations

from typing import Any

from answer_eval.clients.base import ProviderHttpClient
from answer_eval.core.config import (
    CLASSIFICATION_MAX_TOKENS,
    CLASSIFICATION_TEMPERATURE,
    CLASSIFICATION_TIMEOUT_SECONDS,
    EVALUATION_MAX_TOKENS,
    EVALUATION_TEMPERATURE,
    EVALUATION_TIMEOUT_SECONDS,
    EXTRACTION_MAX_TOKENS,
    EXTRACTION_TEMPERATURE,
    GEMINI_EXTRACTION_TIMEOUT_SECONDS,
    NO_READABLE_TEXT,
)
from answer_eval.models.dto import DocumentReference, ProviderConfig

DEFAULT_GEMINI_URL = (
    "https://generativelanguage.googleapis.com/v1beta/models/gemini-1.5-flash:generateContent"
)

OCR_INSTRUCTIONS = (
    "Extract all text content from this image. Return only the text as it appears, "
    f"maintaining original formatting. If no text is found, respond with '{NO_READABLE_TEXT}'."
)


def extract_candidate_text(data: Any) -> str | None:
    """``candidates[0].content.parts[*].text`` joined, or None when absent."""
    if not isinstance(data, dict):
        return None
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return None
    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return None
    texts = [p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str)]
    if not texts:
        return None
    return "".join(texts)


class GeminiClient(ProviderHttpClient):
    """Extractor, Classifier and Evaluator backed by generateContent."""

    async def _generate(
        self,
        cfg: ProviderConfig,
        parts: list[dict[str, Any]],
        *,
        timeout: float,
        temperature: float,
        max_tokens: int,
    ) -> str | None:
        payload = {
            "contents": [{"parts": parts}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": cfg.options.max_output_tokens or max_tokens,
            },
        }
        data = await self._post_json(
            cfg,
            cfg.api_url or DEFAULT_GEMINI_URL,
            timeout=timeout,
            json_body=payload,
            params={"key": cfg.secret()},
        )
        return extract_candidate_text(data)

    async def _extract_text(self, ref: DocumentReference, cfg: ProviderConfig) -> str:
        document = await self.fetch_document(ref)
        parts = [
            {"text": OCR_INSTRUCTIONS},
            {"inline_data": {"mime_type": document.mime, "data": document.as_base64()}},
        ]
        text = await self._generate(
            cfg,
            parts,
            timeout=cfg.timeout_for(GEMINI_EXTRACTION_TIMEOUT_SECONDS),
            temperature=EXTRACTION_TEMPERATURE,
            max_tokens=EXTRACTION_MAX_TOKENS,
        )
        # A candidate without text parts means the model saw nothing to read
        return text or NO_READABLE_TEXT

    async def classify(self, prompt: str, cfg: ProviderConfig) -> str:
        text = await self._generate(
            cfg,
            [{"text": prompt}],
            timeout=CLASSIFICATION_TIMEOUT_SECONDS,
            temperature=CLASSIFICATION_TEMPERATURE,
            max_tokens=CLASSIFICATION_MAX_TOKENS,
        )
        if text is None:
            raise self._missing_content(cfg, "candidates[0].content.parts")
        return text.strip()

    async def complete(self, prompt: str, cfg: ProviderConfig) -> str:
        text = await self._generate(
            cfg,
            [{"text": prompt}],
            timeout=cfg.timeout_for(EVALUATION_TIMEOUT_SECONDS),
            temperature=EVALUATION_TEMPERATURE,
            max_tokens=EVALUATION_MAX_TOKENS,
        )
        if text is None:
            raise self._missing_content(cfg, "candidates[0].content.parts")
        return text.strip()
