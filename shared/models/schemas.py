"""Pydantic schemas for the LLM proxy wire contract."""
from typing import Literal, Optional, List
from pydantic import BaseModel, Field

from shared.utils.constants import DEFAULT_CLAUDE_MODEL, DEFAULT_MAX_TOKENS


class WireMessage(BaseModel):
    """One prior or current turn sent to the model."""
    role: Literal["user", "assistant"]
    content: str


class ClaudeRequest(BaseModel):
    """Request body POSTed to the proxy endpoint."""
    model: str = DEFAULT_CLAUDE_MODEL
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, gt=0)
    system: Optional[str] = None
    messages: List[WireMessage]


class Usage(BaseModel):
    """Token usage reported by the provider."""
    input_tokens: int = 0
    output_tokens: int = 0


class LLMReply(BaseModel):
    """Successful reply from any transport."""
    success: bool = True
    message: str
    usage: Usage = Field(default_factory=Usage)
    is_mock: bool = False


class TransportContext(BaseModel):
    """Session facts a transport may need besides the request itself.

    Real transports ignore it; the mock responder builds its canned reply from it.
    """
    mode: str = "learn"
    document_text: str = ""
    user_message: str = ""
    exam_type: Optional[str] = None
    difficulty_level: Optional[str] = None
    reference_material_count: int = 0


class ClaudeErrorResponse(BaseModel):
    """Failure body returned by the proxy endpoint."""
    success: bool = False
    error: str
    message: str
