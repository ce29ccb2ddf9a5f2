"""Claude proxy API endpoints.

Keeps the Anthropic key on the server: clients POST the wire request here
and get back `{success, message, usage}` or `{success: false, error, message}`.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse

from config import get_settings
from shared.models.schemas import ClaudeErrorResponse
from shared.services.anthropic_adapter import AnthropicAdapter
from shared.utils.exceptions import LLMTransportError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["claude"])

_adapter: Optional[AnthropicAdapter] = None


def get_anthropic_adapter() -> AnthropicAdapter:
    """Lazily build the shared adapter. Raises LLMTransportError without a key."""
    global _adapter
    if _adapter is None:
        settings = get_settings()
        if not settings.has_usable_api_key:
            raise LLMTransportError("API key not configured")
        _adapter = AnthropicAdapter(
            api_key=settings.anthropic_api_key,
            timeout=settings.llm_timeout,
            model=settings.claude_model,
            max_tokens=settings.max_tokens,
        )
    return _adapter


def reset_anthropic_adapter():
    """Drop the cached adapter (useful for testing)."""
    global _adapter
    _adapter = None


@router.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok", "message": "StudyBuddy AI Backend Running"}


@router.post("/claude", responses={
    401: {"model": ClaudeErrorResponse},
    429: {"model": ClaudeErrorResponse},
    500: {"model": ClaudeErrorResponse},
    529: {"model": ClaudeErrorResponse},
})
async def claude(body: Dict[str, Any] = Body(...)):
    """Forward a Messages API request to Claude."""
    messages = body.get("messages")
    if messages is None or not isinstance(messages, list):
        return JSONResponse(status_code=400, content={"error": "Invalid messages format"})

    system = body.get("system")
    logger.info(
        f"Received Claude API request: messageCount={len(messages)}, "
        f"systemLength={len(system or '')}, model={body.get('model') or 'default'}"
    )

    try:
        adapter = get_anthropic_adapter()
        reply = await adapter.call_async(
            system=system,
            messages=messages,
            model=body.get("model"),
            max_tokens=body.get("max_tokens"),
        )
    except LLMTransportError as e:
        logger.error(f"Claude API Error: {e.error_code} {e.message}")
        return JSONResponse(status_code=e.status_code, content=e.to_payload())

    return {"success": True, "message": reply.message, "usage": reply.usage.model_dump()}
