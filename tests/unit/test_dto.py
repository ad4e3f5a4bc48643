"""Unit tests for pipeline data contracts."""

import pytest
from pydantic import ValidationError

from answer_eval.models.dto import (
    DocumentReference,
    ErrorKind,
    EvaluationAnalysis,
    EvaluationRecord,
    ExtractionOutcome,
    ProviderConfig,
    Question,
    RelevanceVerdict,
    Task,
    is_failure_text,
)
from tests.fakes import make_provider


class TestProviderConfig:
    """Tests for provider configuration records."""

    def test_adapter_key_defaults_to_name(self):
        assert make_provider("Gemini").adapter_key == "gemini"
        assert make_provider("school-llm", adapter="OpenAI").adapter_key == "openai"

    def test_task_flags(self):
        cfg = make_provider("gemini", tasks=[Task.EVALUATION], prefers=[Task.EVALUATION])
        assert cfg.supports(Task.EVALUATION)
        assert not cfg.supports(Task.TEXT_EXTRACTION)
        assert cfg.prefers(Task.EVALUATION)
        assert not cfg.prefers(Task.ANALYSIS)

    def test_timeout_override(self):
        assert make_provider("agentic").timeout_for(480) == 480
        assert make_provider("agentic", timeout_seconds=90).timeout_for(480) == 90

    def test_secret_is_not_exposed_in_repr(self):
        cfg = make_provider("openai")
        assert cfg.secret() == "test-key"
        assert "test-key" not in repr(cfg)

    def test_frozen(self):
        cfg = make_provider("openai")
        with pytest.raises(ValidationError):
            cfg.name = "other"

    def test_parses_string_tasks(self):
        cfg = ProviderConfig.model_validate(
            {
                "name": "agentic",
                "supported_tasks": ["text_extraction"],
                "task_preferences": {"text_extraction": True},
            }
        )
        assert cfg.prefers(Task.TEXT_EXTRACTION)


class TestDocumentReference:
    def test_requires_a_source(self):
        with pytest.raises(ValidationError):
            DocumentReference(index=0)

    def test_label_and_remote(self):
        ref = DocumentReference(index=2, location="HTTPS://files.example.com/a.png")
        assert ref.label == 3
        assert ref.is_remote
        assert not DocumentReference(index=0, payload=b"x").is_remote


class TestExtractionOutcome:
    def test_failure_requires_kind(self):
        with pytest.raises(ValidationError):
            ExtractionOutcome(index=0, text="Failed", success=False)

    def test_success_rejects_kind(self):
        with pytest.raises(ValidationError):
            ExtractionOutcome(
                index=0, text="ok", success=True, error_kind=ErrorKind.TIMEOUT
            )

    def test_sentinel_success_has_no_text(self):
        outcome = ExtractionOutcome(index=0, text="No readable text found", success=True)
        assert outcome.has_text is False

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("", True),
            ("   ", True),
            ("Failed to extract text from image 1: timeout", True),
            ("Text extraction failed for image 2. Please ...", True),
            ("Real answer", False),
        ],
    )
    def test_is_failure_text(self, text, expected):
        assert is_failure_text(text) is expected


class TestEvaluationRecord:
    """Tests for record invariants enforced at construction."""

    def test_clamps_numbers(self):
        record = EvaluationRecord(relevancy=140, score=-3, max_marks=15)
        assert record.relevancy == 100
        assert record.score == 0

        record = EvaluationRecord(relevancy=-1, score=99, max_marks=15)
        assert record.relevancy == 0
        assert record.score == 15

    def test_fills_defaults(self):
        record = EvaluationRecord(relevancy=50, score=5)
        assert record.remark == "No remark provided by AI."
        assert record.comments == ["No comments provided by AI."]
        assert record.analysis.weaknesses == ["No content provided by AI."]

    def test_payload_shape(self):
        payload = EvaluationRecord(
            relevancy=80,
            score=8,
            analysis=EvaluationAnalysis(strengths=["Clear structure"]),
        ).to_payload()

        assert set(payload) == {"relevancy", "score", "remark", "comments", "analysis"}
        assert payload["analysis"]["strengths"] == ["Clear structure"]
        assert len(payload["analysis"]) == 7


class TestQuestionAndVerdict:
    def test_max_marks_must_be_positive(self):
        with pytest.raises(ValidationError):
            Question(text="Explain erosion", max_marks=0)

    def test_invalid_verdict_needs_reason(self):
        with pytest.raises(ValidationError):
            RelevanceVerdict(is_valid=False, reason=" ")
