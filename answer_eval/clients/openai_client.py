"""
OpenAI chat-completions adapter.

Supports all three capabilities. Vision extraction embeds the document
inline as a base64 ``data:`` URI; classification and evaluation send the
prompt as a single user message.
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
    OPENAI_DEFAULT_MODEL,
    OPENAI_EXTRACTION_TIMEOUT_SECONDS,
)
from answer_eval.models.dto import DocumentReference, ProviderConfig

DEFAULT_OPENAI_URL = "https://api.openai.com/v1/chat/completions"

OCR_INSTRUCTIONS = """You are a precise OCR (Optical Character Recognition) system. Your task is to extract ALL text content from this image.
Instructions:
1. Extract ALL visible text exactly as it appears
2. Maintain the original formatting, line breaks, and spacing
3. Include mathematical equations, formulas, and symbols
4. Include any handwritten text if clearly readable
5. Do not add explanations, interpretations, or additional commentary
6. If the text is in multiple languages, extract all of it
7. If there are tables, preserve the table structure
8. If no readable text is found, respond with exactly: "No readable text found"
Return only the extracted text content:"""


def extract_message_content(data: Any) -> str | None:
    """``choices[0].message.content`` or None when the envelope is malformed."""
    if not isinstance(data, dict):
        return None
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    message = first.get("message")
    if isinstance(message, dict) and isinstance(message.get("content"), str):
        return message["content"]
    return None


class OpenAIClient(ProviderHttpClient):
    """Extractor, Classifier and Evaluator backed by chat completions."""

    def _headers(self, cfg: ProviderConfig) -> dict[str, str]:
        return {"Authorization": f"Bearer {cfg.secret()}"}

    async def _chat(
        self,
        cfg: ProviderConfig,
        content: Any,
        *,
        timeout: float,
        temperature: float,
        max_tokens: int,
    ) -> str:
        payload = {
            "model": cfg.options.model or OPENAI_DEFAULT_MODEL,
            "messages": [{"role": "user", "content": content}],
            "max_tokens": cfg.options.max_output_tokens or max_tokens,
            "temperature": temperature,
        }
        data = await self._post_json(
            cfg,
            cfg.api_url or DEFAULT_OPENAI_URL,
            timeout=timeout,
            json_body=payload,
            headers=self._headers(cfg),
        )
        text = extract_message_content(data)
        if text is None:
            raise self._missing_content(cfg, "choices[0].message.content")
        return text.strip()

    async def _extract_text(self, ref: DocumentReference, cfg: ProviderConfig) -> str:
        document = await self.fetch_document(ref)
        content = [
            {"type": "text", "text": OCR_INSTRUCTIONS},
            {
                "type": "image_url",
                "image_url": {"url": document.as_data_uri(), "detail": "high"},
            },
        ]
        return await self._chat(
            cfg,
            content,
            timeout=cfg.timeout_for(OPENAI_EXTRACTION_TIMEOUT_SECONDS),
            temperature=EXTRACTION_TEMPERATURE,
            max_tokens=EXTRACTION_MAX_TOKENS,
        )

    async def classify(self, prompt: str, cfg: ProviderConfig) -> str:
        # Classification keeps its own short timeout regardless of provider options
        return await self._chat(
            cfg,
            prompt,
            timeout=CLASSIFICATION_TIMEOUT_SECONDS,
            temperature=CLASSIFICATION_TEMPERATURE,
            max_tokens=CLASSIFICATION_MAX_TOKENS,
        )

    async def complete(self, prompt: str, cfg: ProviderConfig) -> str:
        return await self._chat(
            cfg,
            prompt,
            timeout=cfg.timeout_for(EVALUATION_TIMEOUT_SECONDS),
            temperature=EVALUATION_TEMPERATURE,
            max_tokens=EVALUATION_MAX_TOKENS,
        )
