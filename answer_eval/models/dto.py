"""
Typed contracts shared by every stage of the answer evaluation pipeline.

Provider configuration is frozen: the registry hands the same instances
to concurrent requests. Everything else is a per-request value object.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, model_validator

from answer_eval.core.config import (
    DEFAULT_COMMENTS,
    DEFAULT_MAX_MARKS,
    DEFAULT_REMARK,
    DEFAULT_SECTION_CONTENT,
    FAILURE_SENTINELS,
)


class Task(str, Enum):
    """Unit of provider selection."""

    TEXT_EXTRACTION = "text_extraction"
    ANALYSIS = "analysis"
    EVALUATION = "evaluation"


class ErrorKind(str, Enum):
    """Classified reason an extraction attempt failed."""

    NONE = "none"
    FETCH_FAILED = "fetch-failed"
    AUTH_FAILED = "auth-failed"
    RATE_LIMITED = "rate-limited"
    BAD_REQUEST = "bad-request"
    PROVIDER_ERROR = "provider-error"
    TIMEOUT = "timeout"
    UNSUPPORTED_FORMAT = "unsupported-format"


# Failures that say something about the provider rather than the document
TRANSPORT_ERROR_KINDS = frozenset(
    {
        ErrorKind.AUTH_FAILED,
        ErrorKind.RATE_LIMITED,
        ErrorKind.PROVIDER_ERROR,
        ErrorKind.TIMEOUT,
    }
)


class ProviderOptions(BaseModel):
    """Provider-specific request options."""

    model_config = ConfigDict(frozen=True)

    timeout_seconds: float | None = Field(default=None, gt=0)
    model: str | None = None
    include_marginalia: bool = True
    include_metadata_in_markdown: bool = True
    pages: str | None = None
    max_output_tokens: int | None = Field(default=None, gt=0)


class ProviderConfig(BaseModel):
    """
    Configuration of one installed AI provider.

    Read-only to the pipeline; created and updated by configuration
    management. ``task_preferences`` should flag at most one provider per
    task, but that is not enforced here: the registry takes the first match.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    adapter: str | None = None  # adapter key, defaults to name
    display_name: str = ""
    api_url: str = ""
    api_key: SecretStr | None = None
    is_active: bool = True
    supported_tasks: frozenset[Task] = frozenset()
    task_preferences: dict[Task, bool] = Field(default_factory=dict)
    options: ProviderOptions = Field(default_factory=ProviderOptions)

    @property
    def adapter_key(self) -> str:
        return (self.adapter or self.name).lower()

    def supports(self, task: Task) -> bool:
        return task in self.supported_tasks

    def prefers(self, task: Task) -> bool:
        return bool(self.task_preferences.get(task, False))

    def timeout_for(self, default: float) -> float:
        return self.options.timeout_seconds or default

    def secret(self) -> str:
        return self.api_key.get_secret_value() if self.api_key else ""


class DocumentReference(BaseModel):
    """
    One submitted answer image, addressed by its position in the submission.

    Either ``location`` (http(s) URL or ``data:`` URI) or inline
    ``payload`` bytes must be set.
    """

    index: int = Field(ge=0)
    location: str | None = None
    payload: bytes | None = None
    content_type: str | None = None

    @model_validator(mode="after")
    def _require_source(self) -> "DocumentReference":
        if not self.location and self.payload is None:
            raise ValueError("DocumentReference needs a location or an inline payload")
        return self

    @property
    def label(self) -> int:
        """1-based position used in user-facing messages."""
        return self.index + 1

    @property
    def is_remote(self) -> bool:
        return bool(self.location) and self.location.lower().startswith(("http://", "https://"))


def is_failure_text(text: str | None) -> bool:
    """True for empty text or text that is one of the failure sentinels."""
    if not text or not text.strip():
        return True
    stripped = text.strip()
    return stripped.startswith(FAILURE_SENTINELS) or FAILURE_SENTINELS[2] in stripped


class ExtractionOutcome(BaseModel):
    """Per-document extraction result, present even when extraction failed."""

    index: int = Field(ge=0)
    text: str
    success: bool
    error_kind: ErrorKind = ErrorKind.NONE
    provider_used: str | None = None
    detail: str | None = None

    @model_validator(mode="after")
    def _consistent_error_kind(self) -> "ExtractionOutcome":
        if self.success and self.error_kind is not ErrorKind.NONE:
            raise ValueError("successful outcome cannot carry an error kind")
        if not self.success and self.error_kind is ErrorKind.NONE:
            raise ValueError("failed outcome requires an error kind")
        return self

    @property
    def has_text(self) -> bool:
        return self.success and not is_failure_text(self.text)


class Question(BaseModel):
    """Question metadata supplied by the question lookup collaborator."""

    id: str | None = None
    text: str
    max_marks: int = Field(default=DEFAULT_MAX_MARKS, gt=0)
    keywords: list[str] = Field(default_factory=list)
    difficulty_level: str | None = None
    evaluation_guideline: str | None = None


class RelevanceVerdict(BaseModel):
    is_valid: bool
    reason: str
    ai_opinion: str | None = None

    @model_validator(mode="after")
    def _reason_required(self) -> "RelevanceVerdict":
        if not self.is_valid and not self.reason.strip():
            raise ValueError("an invalid verdict must carry a reason")
        return self


ANALYSIS_SECTIONS = (
    "introduction",
    "body",
    "conclusion",
    "strengths",
    "weaknesses",
    "suggestions",
    "feedback",
)


class EvaluationAnalysis(BaseModel):
    introduction: list[str] = Field(default_factory=list)
    body: list[str] = Field(default_factory=list)
    conclusion: list[str] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    feedback: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _fill_empty_sections(self) -> "EvaluationAnalysis":
        for section in ANALYSIS_SECTIONS:
            if not getattr(self, section):
                setattr(self, section, [DEFAULT_SECTION_CONTENT])
        return self

    def as_dict(self) -> dict[str, list[str]]:
        return {section: list(getattr(self, section)) for section in ANALYSIS_SECTIONS}


class EvaluationSource(str, Enum):
    AI = "ai"
    FALLBACK = "fallback"


class EvaluationRecord(BaseModel):
    """
    Structured evaluation of one answer.

    Numeric fields are clamped into range and empty text/list fields are
    replaced by defaults on construction, so consumers never branch on
    out-of-range or missing values.
    """

    relevancy: int
    score: int
    max_marks: int = Field(default=DEFAULT_MAX_MARKS, gt=0)
    remark: str = ""
    comments: list[str] = Field(default_factory=list)
    analysis: EvaluationAnalysis = Field(default_factory=EvaluationAnalysis)
    source: EvaluationSource = EvaluationSource.AI
    provider_used: str | None = None

    @model_validator(mode="after")
    def _enforce_bounds(self) -> "EvaluationRecord":
        self.relevancy = min(100, max(0, self.relevancy))
        self.score = min(self.max_marks, max(0, self.score))
        if not self.remark.strip():
            self.remark = DEFAULT_REMARK
        if not self.comments:
            self.comments = [DEFAULT_COMMENTS]
        return self

    def to_payload(self) -> dict[str, Any]:
        """Plain dict in the shape downstream consumers persist."""
        return {
            "relevancy": self.relevancy,
            "score": self.score,
            "remark": self.remark,
            "comments": list(self.comments),
            "analysis": self.analysis.as_dict(),
        }


class CustomPromptOptions(BaseModel):
    include_extracted_text: bool = True
    include_question_details: bool = True
    max_marks: int | None = Field(default=None, gt=0)
