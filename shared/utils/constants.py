"""Application constants - all magic numbers centralized."""

# LLM request defaults
DEFAULT_CLAUDE_MODEL = "claude-sonnet-4-20250514"
DEFAULT_MAX_TOKENS = 4096

# Transport error codes (wire values of the proxy's `error` field)
ERROR_API_KEY_INVALID = "API_KEY_INVALID"
ERROR_RATE_LIMIT = "RATE_LIMIT"
ERROR_OVERLOADED = "OVERLOADED"
ERROR_UNKNOWN = "UNKNOWN"

# HTTP status <-> error code table
STATUS_TO_ERROR_CODE = {
    401: ERROR_API_KEY_INVALID,
    429: ERROR_RATE_LIMIT,
    529: ERROR_OVERLOADED,
}
ERROR_CODE_TO_STATUS = {
    ERROR_API_KEY_INVALID: 401,
    ERROR_RATE_LIMIT: 429,
    ERROR_OVERLOADED: 529,
    ERROR_UNKNOWN: 500,
}

# User-facing messages per error code
ERROR_MESSAGES = {
    ERROR_API_KEY_INVALID: "Invalid API key. Please check your environment variables.",
    ERROR_RATE_LIMIT: "Rate limit exceeded. Please wait a moment.",
    ERROR_OVERLOADED: "Claude is currently overloaded. Please try again.",
    ERROR_UNKNOWN: "Failed to process request",
}

# Prompt assembly
REFERENCE_PREVIEW_CHARS = 3000  # characters of each reference material shown to the model
TRUNCATION_MARKER = "...[content truncated]"

# Mock responder
MOCK_DELAY_SECONDS = 1.5
MOCK_PREVIEW_CHARS = 200
MOCK_USAGE = {"input_tokens": 100, "output_tokens": 150}

# Progress
MAX_WEAK_AREAS = 5
DEFAULT_QUIZ_TOPIC = "general"

# Grading thresholds (percent, inclusive lower bounds)
GRADE_DISTINCTION = 90
GRADE_MERIT = 76
GRADE_PASS = 55

# Concurrency
ANSWER_DEBOUNCE_SECONDS = 0.3

# Exam configuration limits
MAX_OBJECTIVES_COUNT = 20
MAX_OBJECTIVE_LENGTH = 500
MAX_PITFALLS_COUNT = 20
MAX_PITFALL_LENGTH = 500
