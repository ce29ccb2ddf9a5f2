"""
Mock responder used when no Anthropic credential is configured.

Produces deterministic, mode-specific canned replies so the whole session
flow can be exercised offline.
"""

from shared.models.schemas import LLMReply, TransportContext, Usage
from shared.utils.constants import MOCK_PREVIEW_CHARS, MOCK_USAGE


LEARN_TEMPLATE = """Great question! Let me help you understand this concept.

Based on your textbook (first {preview_chars} chars: "{preview}..."), here's a step-by-step explanation:

1. **Key Concept**: This topic is fundamental to understanding the broader subject
2. **Why It Matters**: It connects to other important concepts you'll learn
3. **Real-World Example**: Think of it like [analogy]

**Reference**: See pages 15-20 in your textbook for more details.

Would you like me to explain any part in more detail?{exam_note}{materials_note}

*[Note: This is a MOCK response for testing. Add your Claude API key to .env to use real AI]*"""

REVIEW_TEMPLATE = """Based on your textbook content ("{preview}..."), here's the answer:

{opening}

**Key Points:**
- Point 1 from the textbook
- Point 2 with supporting details
- Point 3 connecting to other topics

**Pages Referenced**: 5, 12, 18

Related topics you might want to review:
- Related Topic A
- Related Topic B

*[Note: This is a MOCK response. Add your Claude API key to use real AI]*"""

QUIZ_TEMPLATE = """**Question** (from "{preview}..."): What is the primary function of X in the context of Y?

Please provide your answer in 2-3 sentences, explaining both the function and its significance.

*[Note: This is a MOCK quiz question. Add your Claude API key for real adaptive quizzes]*"""


def document_preview(document_text: str, limit: int = MOCK_PREVIEW_CHARS) -> str:
    return document_text[:limit] if document_text else "No PDF content"


def build_mock_message(context: TransportContext) -> str:
    """Render the canned reply for the context's mode (unknown modes get the learn reply)."""
    preview = document_preview(context.document_text)

    if context.mode == "review":
        opening = (
            "The main concept is..."
            if "what" in context.user_message.lower()
            else "To answer your question..."
        )
        return REVIEW_TEMPLATE.format(preview=preview, opening=opening)

    if context.mode == "quiz":
        return QUIZ_TEMPLATE.format(preview=preview)

    exam_note = ""
    if context.exam_type:
        exam_note = (
            f"\n\n📋 **Exam Mode**: Preparing for {context.exam_type} exam "
            f"at {context.difficulty_level} level"
        )
    materials_note = ""
    if context.reference_material_count > 0:
        materials_note = (
            f"\n\n📚 **Exam Materials Loaded**: Using {context.reference_material_count} "
            "exam material(s) as reference for question format and style"
        )
    return LEARN_TEMPLATE.format(
        preview_chars=MOCK_PREVIEW_CHARS,
        preview=preview,
        exam_note=exam_note,
        materials_note=materials_note,
    )


def build_mock_reply(context: TransportContext) -> LLMReply:
    return LLMReply(
        success=True,
        message=build_mock_message(context),
        usage=Usage(**MOCK_USAGE),
        is_mock=True,
    )
