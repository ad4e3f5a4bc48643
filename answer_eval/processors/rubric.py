"""
Fixed rubric text and curated feedback pools.

The framework text is embedded in every evaluation prompt unless the
question carries its own guideline. The pools feed the fallback evaluator.
"""

from __future__ import annotations

EVALUATION_FRAMEWORK = """Introduction
Relevant introduction, as defined, about
Relevant Introduction Supported by Data like
Your introduction is well presented with factual information
Your introduction is valid but concise it and mention some keywords like
Your introduction is general, you may start introduction like
Your introduction can be enriched by adding keywords like
Your introduction is relevant but too long - it needs to be concise, within 20-30 words.

Body:
Frame the heading to reflect the core demand of the question, such as:
Well-Formatted Main Heading in a Box
Write Main Heading in a Box
You missed a part of demand of question ---

Rough-Paragraph-Not effective
Your presentation is rough; avoid paragraph format. However, some of your content lines are relevant.
Your points are not very effective; please present them in a more structured and impactful manner.
Relevant-Valid
Your points are relevant, but they need to be substantiated with examples to strengthen your argument.
Valid point with substantiation
Your points are valid as per the implicit demand of the question but add some points like
Your points are valid as per the explicit demand of the question but add some points like
Your points are valid and substantiated with evidence.
Your points are valid and supported by relevant examples.

Heading-Core Demand
Try to use heading and subheadings for better presentation
Try to understand core demand of question
Points are valid but use sub-headings for better presentation
Try to use sub-headings for better presentation

Your points can be enriched by elaborate properly like
Underline specific keywords for better presentation like
You should work on presentation
Your points can be enriched by adding examples or substantiate them like
Enrich your points by adding examples or substantiate
Your points are less effective and can be enriched in effective manner like

Good use of diagram and relevant content
Good use of map but the map can be drawn better.
Lack of legibility-Please work on it.
Your points are valid but need supporting data, facts, and reports.

Conclusion
Your conclusion is based on balanced answer
Relevant conclusion, as it reflects a futuristic vision
Your conclusion is relevant as it outlines in suggestive manner

Less effective conclusion- you may conclude in effective manner like
Relevant conclusion but you may add-
Relevant conclusion but you may conclude in effective manner like
Your conclusion is relevant as it outlines steps---but it may be concluded as-
Your conclusion is relevant but too long - it needs to be concise, within 20-30 words."""


# Header label -> placeholder instruction, in the order providers must echo them
REQUIRED_SECTIONS: tuple[tuple[str, str], ...] = (
    ("Introduction", "[Your analysis of the introduction]"),
    ("Body", "[Your analysis of the body]"),
    ("Conclusion", "[Your analysis of the conclusion]"),
    ("Strengths", "[List 2-3 strengths]"),
    ("Weaknesses", "[List 2-3 weaknesses]"),
    ("Suggestions", "[List 2-3 suggestions]"),
    ("Feedback", "[Overall feedback]"),
    ("Comments", "[3-4 detailed comments (5-12 words each)]"),
    ("Remark", "[1-2 line summary of the overall answer quality]"),
)


ANALYSIS_POOL: dict[str, tuple[str, ...]] = {
    "introduction": (
        "Relevant introduction, as defined, about the topic with appropriate context",
        "Relevant Introduction supported by data like statistical figures or research findings",
        "Your introduction is well presented with factual information and clear context",
        "Your introduction is valid but concise and mentions key keywords effectively",
        "Your introduction is general, you may start introduction with more specific focus",
        "Your introduction can be enriched by adding keywords related to the core topic",
        "Introduction lacks clarity and fails to establish proper context for the answer",
    ),
    "body": (
        "Frame the heading to reflect the core demand of the question accurately",
        "You missed a part of demand of question - ensure comprehensive coverage",
        "Your presentation is rough; avoid paragraph format and use structured points",
        "Your points are not very effective; present them in a more structured and impactful manner",
        "Your points are relevant, but they need substantiation with examples to strengthen argument",
        "Valid point with proper substantiation using facts, data, or real-world examples",
        "Your points are valid and substantiated with credible evidence and examples",
        "Try to use heading and subheadings for better presentation and logical flow",
        "Good use of diagram and relevant content - visual aids enhance understanding",
        "Your points are valid but need supporting data, facts, reports and current statistics",
    ),
    "conclusion": (
        "Your conclusion is based on balanced answer and provides logical closure",
        "Relevant conclusion, as it reflects a futuristic vision and forward-thinking approach",
        "Your conclusion is relevant as it outlines suggestions in a constructive manner",
        "Less effective conclusion - you may conclude in more impactful manner with recommendations",
        "Conclusion lacks synthesis of main arguments and fails to provide closure",
    ),
    "strengths": (
        "Excellent comprehensive understanding of the topic with multi-dimensional analysis",
        "Good conceptual clarity and logical flow of ideas throughout the answer",
        "Effective use of examples and case studies to support arguments",
        "Clear structure with proper introduction, body, and conclusion format",
    ),
    "weaknesses": (
        "Lacks comprehensive coverage of all aspects mentioned in the question",
        "Poor presentation and formatting affects overall readability",
        "Insufficient examples and case studies to support the arguments",
        "Lacks depth in analysis and fails to explore various dimensions",
    ),
    "suggestions": (
        "Include more specific examples and case studies to strengthen arguments",
        "Improve presentation with proper headings, subheadings, and formatting",
        "Add supporting data, facts, reports, and current statistics",
        "Structure answer with clear introduction, body, and conclusion format",
    ),
    "feedback": (
        "Overall, the answer demonstrates a good understanding of the topic but could benefit "
        "from more detailed explanations and examples.",
        "The response shows potential but needs improvement in organization and depth of analysis.",
    ),
}


# Representative picks used by the fallback evaluator, per section
FALLBACK_PICKS: dict[str, tuple[int, ...]] = {
    "introduction": (2, 3),
    "body": (4, 6),
    "conclusion": (0, 1),
    "strengths": (0, 1),
    "weaknesses": (0, 1),
    "suggestions": (0, 1),
    "feedback": (0,),
}

FALLBACK_COMMENTS: tuple[str, ...] = (
    "The answer demonstrates a reasonable understanding of the topic but could benefit "
    "from more detailed explanations and examples.",
    "Good structure overall, but some sections could be better organized with clearer "
    "transitions between ideas.",
    "The conclusion effectively summarizes the main points but could be strengthened "
    "with more specific recommendations.",
    "Consider adding more current examples and data to support your arguments for a "
    "more comprehensive response.",
)


# (minimum percentage, remark); first bracket the percentage reaches wins
REMARK_BRACKETS: tuple[tuple[float, str], ...] = (
    (90, "Excellent comprehensive answer with outstanding presentation and depth"),
    (80, "Good understanding demonstrated with relevant examples and proper structure"),
    (70, "Satisfactory attempt with valid points covered adequately"),
    (60, "Average answer showing basic understanding but lacks depth"),
    (50, "Below average answer lacking comprehensive understanding and depth"),
    (0, "Poor answer with minimal understanding and significant deficiencies"),
)

# (minimum percentage, overall comment) used when a provider omitted comments
OVERALL_COMMENT_BRACKETS: tuple[tuple[float, str], ...] = (
    (
        80,
        "The answer demonstrates a strong understanding of the topic with clear organization "
        "and relevant content.",
    ),
    (
        60,
        "The answer shows a good grasp of the subject matter but could benefit from more "
        "detailed explanations and better organization.",
    ),
    (
        40,
        "The answer attempts to address the question but lacks depth and clarity in several "
        "areas.",
    ),
    (
        0,
        "The answer falls short of expectations, with minimal understanding demonstrated.",
    ),
)


def pick_bracket(brackets: tuple[tuple[float, str], ...], percentage: float) -> str:
    for threshold, text in brackets:
        if percentage >= threshold:
            return text
    return brackets[-1][1]
