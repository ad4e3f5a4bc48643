"""Unit tests for the fallback evaluator."""

import random

import pytest

from answer_eval.models.dto import EvaluationAnalysis, EvaluationSource, Question
from answer_eval.processors.fallback_evaluator import default_remark, mock, summarize_comments


class TestMock:
    """Tests for fallback record generation."""

    @pytest.mark.parametrize("seed", range(20))
    def test_bounds_and_proportional_score(self, seed):
        question = Question(text="Explain monsoons", max_marks=15)
        record = mock(question, random.Random(seed))

        assert 60 <= record.relevancy <= 90
        assert record.score == record.relevancy * 15 // 100
        assert record.source is EvaluationSource.FALLBACK
        assert record.remark != "No remark provided by AI."

    def test_reproducible_with_seeded_rng(self):
        question = Question(text="Explain monsoons")
        assert mock(question, random.Random(7)) == mock(question, random.Random(7))

    def test_fixed_text_content(self):
        record = mock(Question(text="Explain monsoons"), random.Random(1))

        assert len(record.comments) == 4
        assert len(record.analysis.introduction) == 2
        assert len(record.analysis.feedback) == 1
        for items in record.analysis.as_dict().values():
            assert "No content provided by AI." not in items


class TestDefaultRemark:
    @pytest.mark.parametrize(
        "score,expected_start",
        [
            (10, "Excellent"),
            (9, "Excellent"),
            (8, "Good"),
            (7, "Satisfactory"),
            (6, "Average"),
            (5, "Below average"),
            (4, "Poor"),
        ],
    )
    def test_brackets(self, score, expected_start):
        assert default_remark(score, 10).startswith(expected_start)


class TestSummarizeComments:
    def test_uses_provided_sections(self):
        analysis = EvaluationAnalysis(
            strengths=["Clear structure"], weaknesses=["Few examples"]
        )
        comments = summarize_comments(analysis, 8, 10)

        assert comments[0].startswith("The answer demonstrates a strong understanding")
        assert "Notable strengths include: Clear structure." in comments
        assert "Areas needing improvement: Few examples." in comments
        assert not any(c.startswith("Recommendations") for c in comments)

    def test_placeholders_are_not_summarized(self):
        comments = summarize_comments(EvaluationAnalysis(), 3, 10)
        assert comments == [
            "The answer falls short of expectations, with minimal understanding demonstrated."
        ]
