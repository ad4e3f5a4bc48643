"""
Agentic document analysis adapter (extraction only).

Wire protocol: multipart upload of the raw document bytes in field
``image`` plus boolean form flags, page selection and server-side timeout
as query parameters, ``Authorization: Basic <key>``.

Response shape::

    {"data": {"markdown": "...", "chunks": [{"text": "..."}]},
     "errors": [...], "extraction_error": ...}
"""

from __future__ import annotations

import logging
from typing import Any

from answer_eval.clients.base import ProviderHttpClient
from answer_eval.core.config import AGENTIC_TIMEOUT_SECONDS
from answer_eval.models.dto import DocumentReference, ProviderConfig

logger = logging.getLogger(__name__)

DEFAULT_AGENTIC_URL = "https://api.va.landing.ai/v1/tools/agentic-document-analysis"


def _flag(value: bool) -> str:
    return "true" if value else "false"


def parse_agentic_text(body: Any) -> str:
    """Markdown when present, else the joined non-empty chunk texts."""
    data = body.get("data") if isinstance(body, dict) else None
    if not isinstance(data, dict):
        return ""

    markdown = data.get("markdown")
    if isinstance(markdown, str) and markdown.strip():
        return markdown.strip()

    chunks = data.get("chunks")
    if isinstance(chunks, list):
        texts = [
            chunk["text"].strip()
            for chunk in chunks
            if isinstance(chunk, dict)
            and isinstance(chunk.get("text"), str)
            and chunk["text"].strip()
        ]
        return "\n\n".join(texts)
    return ""


class AgenticDocumentClient(ProviderHttpClient):
    """Extractor backed by the agentic document analysis API."""

    async def _extract_text(self, ref: DocumentReference, cfg: ProviderConfig) -> str:
        document = await self.fetch_document(ref)
        timeout = cfg.timeout_for(AGENTIC_TIMEOUT_SECONDS)

        params: dict[str, str] = {}
        if cfg.options.pages:
            params["pages"] = cfg.options.pages
        if cfg.options.timeout_seconds:
            params["timeout"] = str(int(cfg.options.timeout_seconds))

        body = await self._post_json(
            cfg,
            cfg.api_url or DEFAULT_AGENTIC_URL,
            timeout=timeout,
            params=params,
            headers={"Authorization": f"Basic {cfg.secret()}"},
            files={
                "image": (
                    f"document_{ref.label}.{document.extension}",
                    document.data,
                    document.mime,
                )
            },
            data={
                "include_marginalia": _flag(cfg.options.include_marginalia),
                "include_metadata_in_markdown": _flag(
                    cfg.options.include_metadata_in_markdown
                ),
            },
        )

        if not isinstance(body, dict) or "data" not in body:
            raise self._missing_content(cfg, "data")

        if body.get("errors"):
            logger.warning(
                f"Agentic API warnings for image {ref.label}: {body['errors']}",
                extra={"provider": cfg.name, "image_index": ref.index},
            )
        if body.get("extraction_error"):
            logger.warning(
                f"Agentic API extraction error for image {ref.label}: {body['extraction_error']}",
                extra={"provider": cfg.name, "image_index": ref.index},
            )

        return parse_agentic_text(body)
