# =============================================================================
# Sentinels
# =============================================================================

NO_READABLE_TEXT = "No readable text found"

# Prefixes that mark an extracted text as a failure message rather than content
FAILURE_SENTINELS = (
    NO_READABLE_TEXT,
    "Failed to extract text",
    "Text extraction failed",
)

EXTRACTION_FAILED_TEMPLATE = (
    "Text extraction failed for image {position}. "
    "Please ensure the image is clear and contains readable text."
)

NEXT_IMAGE_MARKER = "\n\n--- Next Image ---\n\n"


# =============================================================================
# Evaluation Defaults
# =============================================================================

DEFAULT_MAX_MARKS = 10
DEFAULT_RELEVANCY = 75
DEFAULT_SCORE_RATIO = 0.75

DEFAULT_SECTION_CONTENT = "No content provided by AI."
DEFAULT_COMMENTS = "No comments provided by AI."
DEFAULT_REMARK = "No remark provided by AI."

FALLBACK_RELEVANCY_MIN = 60
FALLBACK_RELEVANCY_MAX = 90


# =============================================================================
# External Service Timeouts (seconds)
# =============================================================================

DOCUMENT_FETCH_TIMEOUT_SECONDS = 30  # Download of the answer image itself
AGENTIC_TIMEOUT_SECONDS = 480  # Document analysis can take minutes on dense pages
OPENAI_EXTRACTION_TIMEOUT_SECONDS = 45
GEMINI_EXTRACTION_TIMEOUT_SECONDS = 30
CLASSIFICATION_TIMEOUT_SECONDS = 15
EVALUATION_TIMEOUT_SECONDS = 60

ERROR_BODY_MAX_CHARS = 500


# =============================================================================
# Provider Request Settings
# =============================================================================

OPENAI_DEFAULT_MODEL = "gpt-4o-mini"
EXTRACTION_TEMPERATURE = 0.1
CLASSIFICATION_TEMPERATURE = 0.1
EVALUATION_TEMPERATURE = 0.7

EXTRACTION_MAX_TOKENS = 2000
CLASSIFICATION_MAX_TOKENS = 100
EVALUATION_MAX_TOKENS = 2048

USER_AGENT = "Mozilla/5.0 (compatible; TextExtractor/1.0)"


# =============================================================================
# Relevance Heuristics
# =============================================================================

MIN_TERM_LENGTH = 3  # Tokens of 2 characters or fewer are never significant
MIN_PREFIX_LENGTH = 4
SHORT_ANSWER_CHARS = 20
MAX_GARBAGE_LETTERS = 10  # Answers with this many letters or fewer carry no prose


# =============================================================================
# Circuit Breaker
# =============================================================================

PROVIDER_FAILURE_THRESHOLD = 5
PROVIDER_RESET_TIMEOUT_SECONDS = 60
