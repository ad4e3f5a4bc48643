"""
Evaluation and relevance prompt construction.

Every evaluation prompt ends with the same rigid list of section headers;
the response parser depends on providers echoing them verbatim.
"""

from __future__ import annotations

from typing import Sequence

from answer_eval.core.config import NEXT_IMAGE_MARKER
from answer_eval.models.dto import CustomPromptOptions, Question
from answer_eval.processors.rubric import EVALUATION_FRAMEWORK, REQUIRED_SECTIONS


def join_texts(texts: Sequence[str]) -> str:
    return NEXT_IMAGE_MARKER.join(texts)


def rubric_for(question: Question) -> str:
    guideline = (question.evaluation_guideline or "").strip()
    return guideline or EVALUATION_FRAMEWORK


def required_headers_block(max_marks: int) -> str:
    """The response template providers must follow."""
    lines = [
        "Please use the exact section headers as shown below, and do not change their names or order.",
        "",
        "RELEVANCY: [Score out of 100 - How relevant is the answer to the question]",
        f"SCORE: [Score out of {max_marks}]",
    ]
    for header, placeholder in REQUIRED_SECTIONS:
        lines.extend(["", f"{header}:", placeholder])
    return "\n".join(lines) + "\n"


def build_standard_prompt(question: Question, texts: Sequence[str]) -> str:
    return (
        "Please evaluate this student's answer to the given question using the following "
        "evaluation framework.\n\n"
        f"{rubric_for(question)}\n\n"
        f"QUESTION:\n{question.text}\n\n"
        f"MAXIMUM MARKS: {question.max_marks}\n\n"
        f"STUDENT'S ANSWER (extracted from images):\n{join_texts(texts)}\n\n"
        f"{required_headers_block(question.max_marks)}"
    )


def build_custom_prompt(
    question: Question,
    texts: Sequence[str],
    criteria: str,
    options: CustomPromptOptions | None = None,
) -> str:
    """Evaluation prompt led by caller-supplied criteria."""
    options = options or CustomPromptOptions()
    max_marks = options.max_marks or question.max_marks

    parts = [
        "You are an expert evaluator. Please evaluate this student's answer based on the "
        "following custom evaluation criteria.\n\n"
        f"EVALUATION CRITERIA:\n{criteria.strip()}\n\n"
        f"{rubric_for(question)}\n\n"
    ]

    if options.include_question_details:
        details = ["QUESTION DETAILS:", f"Question: {question.text}"]
        if question.difficulty_level:
            details.append(f"Difficulty Level: {question.difficulty_level}")
        details.append(f"Maximum Marks: {max_marks}")
        if question.keywords:
            details.append(f"Keywords: {', '.join(question.keywords)}")
        parts.append("\n".join(details) + "\n\n")

    if options.include_extracted_text and texts:
        parts.append(f"STUDENT'S ANSWER (extracted from images):\n{join_texts(texts)}\n\n")

    parts.append(required_headers_block(max_marks))
    return "".join(parts)


def build_relevance_prompt(question: Question, combined_text: str) -> str:
    return f"""Analyze if the following student answer is relevant to the given question.
QUESTION: {question.text}
STUDENT ANSWER: {combined_text}
Please respond with only "RELEVANT" or "NOT_RELEVANT" followed by a brief reason.
Consider the answer relevant if:
1. It attempts to address the question topic
2. It contains subject-related content
3. It shows understanding of the question context
Consider it NOT_RELEVANT if:
1. It's completely unrelated to the question
2. It's just random text or numbers
3. It's clearly not an attempt to answer the question"""
