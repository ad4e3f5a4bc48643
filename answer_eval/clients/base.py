"""
Shared HTTP plumbing for provider adapters.

Adapters subclass ProviderHttpClient and implement the wire protocol of a
single provider. This module owns the parts every provider has in common:
getting the document bytes, classifying failures into ErrorKind, and the
extraction boundary that turns any exception into a failed outcome.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import json
import logging
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Optional

import httpx

from answer_eval.core.config import (
    DOCUMENT_FETCH_TIMEOUT_SECONDS,
    ERROR_BODY_MAX_CHARS,
    NO_READABLE_TEXT,
    USER_AGENT,
)
from answer_eval.core.exceptions import (
    DocumentFetchError,
    ExternalServiceError,
    UnsupportedFormatError,
)
from answer_eval.models.dto import (
    DocumentReference,
    ErrorKind,
    ExtractionOutcome,
    ProviderConfig,
)
from answer_eval.utils.file_detection import extension_for, is_supported_mime, resolve_mime

logger = logging.getLogger(__name__)


FAILURE_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.FETCH_FAILED: "Failed to fetch image",
    ErrorKind.AUTH_FAILED: "API authentication failed - check API key",
    ErrorKind.RATE_LIMITED: "Rate limit exceeded - please try again later",
    ErrorKind.BAD_REQUEST: "Invalid request - check document format",
    ErrorKind.PROVIDER_ERROR: "Provider error - please try again later",
    ErrorKind.TIMEOUT: "Text extraction timed out - document may be too complex",
    ErrorKind.UNSUPPORTED_FORMAT: "Invalid document format",
}


def _status_kind(status_code: int) -> ErrorKind:
    if status_code in (HTTPStatus.UNAUTHORIZED, HTTPStatus.FORBIDDEN):
        return ErrorKind.AUTH_FAILED
    if status_code == HTTPStatus.TOO_MANY_REQUESTS:
        return ErrorKind.RATE_LIMITED
    if status_code == HTTPStatus.UNSUPPORTED_MEDIA_TYPE:
        return ErrorKind.UNSUPPORTED_FORMAT
    if status_code in (
        HTTPStatus.BAD_REQUEST,
        HTTPStatus.NOT_FOUND,
        HTTPStatus.UNPROCESSABLE_ENTITY,
    ):
        return ErrorKind.BAD_REQUEST
    return ErrorKind.PROVIDER_ERROR


def classify_error(exc: BaseException) -> ErrorKind:
    """Map any adapter-side exception to an ErrorKind."""
    if isinstance(exc, DocumentFetchError):
        return ErrorKind.FETCH_FAILED
    if isinstance(exc, UnsupportedFormatError):
        return ErrorKind.UNSUPPORTED_FORMAT
    if isinstance(exc, ExternalServiceError):
        try:
            return ErrorKind(exc.error_type)
        except ValueError:
            return ErrorKind.PROVIDER_ERROR
    if isinstance(exc, (httpx.TimeoutException, asyncio.TimeoutError)):
        return ErrorKind.TIMEOUT
    if isinstance(exc, httpx.HTTPStatusError):
        return _status_kind(exc.response.status_code)
    return ErrorKind.PROVIDER_ERROR


def _error_body(exc: httpx.HTTPStatusError) -> str:
    try:
        return exc.response.text[:ERROR_BODY_MAX_CHARS]
    except Exception:
        return ""


def failure_outcome(
    ref: DocumentReference,
    provider: Optional[str],
    kind: ErrorKind,
    reason: str,
) -> ExtractionOutcome:
    message = FAILURE_MESSAGES.get(kind, FAILURE_MESSAGES[ErrorKind.PROVIDER_ERROR])
    return ExtractionOutcome(
        index=ref.index,
        text=f"Failed to extract text from image {ref.label}: {message}",
        success=False,
        error_kind=kind,
        provider_used=provider,
        detail=reason,
    )


@dataclass(frozen=True)
class FetchedDocument:
    data: bytes
    mime: str

    @property
    def extension(self) -> str:
        return extension_for(self.mime)

    def as_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def as_data_uri(self) -> str:
        return f"data:{self.mime};base64,{self.as_base64()}"


def _decode_data_uri(uri: str) -> tuple[bytes, Optional[str]]:
    header, sep, body = uri.partition(",")
    if not sep:
        raise DocumentFetchError(uri[:40], "malformed data URI")
    meta = header[len("data:"):]
    mime = meta.split(";", 1)[0] or None
    try:
        if ";base64" in meta:
            return base64.b64decode(body, validate=True), mime
        return body.encode("utf-8"), mime
    except (binascii.Error, ValueError) as exc:
        raise DocumentFetchError(uri[:40], "invalid base64 payload") from exc


class ProviderHttpClient:
    """
    Base class for provider adapters.

    Args:
        transport: Optional httpx transport (``httpx.MockTransport`` in tests)
        verify_ssl: Verify TLS certificates on provider and document requests
    """

    def __init__(
        self,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        verify_ssl: bool = True,
    ) -> None:
        self._transport = transport
        self._verify_ssl = verify_ssl

    def _client(self, timeout: float, **kwargs: Any) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=timeout,
            verify=self._verify_ssl,
            transport=self._transport,
            **kwargs,
        )

    async def fetch_document(self, ref: DocumentReference) -> FetchedDocument:
        """
        Resolve a document reference to raw bytes and a supported mime type.

        Raises:
            DocumentFetchError: Download or decoding failed
            UnsupportedFormatError: Content type is not an image or PDF
        """
        location = ref.location or ""
        declared = ref.content_type

        if ref.payload is not None:
            data = ref.payload
        elif location.startswith("data:"):
            data, uri_mime = _decode_data_uri(location)
            declared = declared or uri_mime
        elif ref.is_remote:
            try:
                async with self._client(
                    DOCUMENT_FETCH_TIMEOUT_SECONDS, follow_redirects=True
                ) as client:
                    resp = await client.get(location, headers={"User-Agent": USER_AGENT})
                    resp.raise_for_status()
            except httpx.HTTPError as exc:
                raise DocumentFetchError(location, f"{type(exc).__name__}: {exc}") from exc
            data = resp.content
            declared = resp.headers.get("content-type") or declared
        else:
            raise DocumentFetchError(location, "unsupported document location")

        if not data:
            raise DocumentFetchError(location or f"payload #{ref.label}", "empty document")

        mime = resolve_mime(data, declared)
        if not is_supported_mime(mime):
            raise UnsupportedFormatError(mime)
        return FetchedDocument(data=data, mime=mime)  # type: ignore[arg-type]

    async def extract(self, ref: DocumentReference, cfg: ProviderConfig) -> ExtractionOutcome:
        """Extraction boundary: runs the provider call, never raises."""
        try:
            text = await self._extract_text(ref, cfg)
        except Exception as exc:
            kind = classify_error(exc)
            logger.warning(
                f"Text extraction failed for image {ref.label}: {exc}",
                extra={
                    "provider": cfg.name,
                    "image_index": ref.index,
                    "error_kind": kind.value,
                },
            )
            return failure_outcome(ref, cfg.name, kind, str(exc))

        text = (text or "").strip()
        if not text or text == NO_READABLE_TEXT:
            text = NO_READABLE_TEXT
        return ExtractionOutcome(
            index=ref.index,
            text=text,
            success=True,
            provider_used=cfg.name,
        )

    async def _extract_text(self, ref: DocumentReference, cfg: ProviderConfig) -> str:
        raise NotImplementedError

    async def _post_json(
        self,
        cfg: ProviderConfig,
        url: str,
        *,
        timeout: float,
        json_body: Any = None,
        **kwargs: Any,
    ) -> Any:
        """POST and decode a JSON response.

        Raises:
            ExternalServiceError: On any transport, status or decoding failure
        """
        try:
            async with self._client(timeout) as client:
                resp = await client.post(url, json=json_body, **kwargs)
                resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ExternalServiceError(
                service_name=cfg.name,
                error_type=classify_error(exc).value,
                details={
                    "http_code": exc.response.status_code,
                    "body": _error_body(exc),
                },
            ) from exc
        except httpx.HTTPError as exc:
            raise ExternalServiceError(
                service_name=cfg.name,
                error_type=classify_error(exc).value,
                details={"reason": f"{type(exc).__name__}: {exc}"},
            ) from exc

        body = resp.text or ""
        if body.lstrip().lower().startswith(("<!doctype html", "<html")):
            # Gateways answer expired credentials with a login page
            raise ExternalServiceError(
                service_name=cfg.name,
                error_type=ErrorKind.AUTH_FAILED.value,
                details={"reason": "received HTML page instead of API response"},
            )
        try:
            return resp.json()
        except (json.JSONDecodeError, ValueError) as exc:
            raise ExternalServiceError(
                service_name=cfg.name,
                error_type=ErrorKind.PROVIDER_ERROR.value,
                details={"reason": "response is not JSON", "body": body[:ERROR_BODY_MAX_CHARS]},
            ) from exc

    @staticmethod
    def _missing_content(cfg: ProviderConfig, what: str) -> ExternalServiceError:
        return ExternalServiceError(
            service_name=cfg.name,
            error_type=ErrorKind.PROVIDER_ERROR.value,
            details={"reason": f"Invalid response structure: missing {what}"},
        )
