"""
Anthropic (Claude) Adapter

Encapsulates all Claude API interaction for the tutoring backend.

Handles:
- Building Messages API kwargs from a system prompt and a message list
- Parsing the first text block and token usage out of the response
- Mapping SDK status errors onto the transport error taxonomy
"""

import json
import logging
import time
from typing import Any, Dict, List, Optional

import anthropic

from shared.models.schemas import LLMReply, Usage
from shared.utils.constants import DEFAULT_CLAUDE_MODEL, DEFAULT_MAX_TOKENS
from shared.utils.exceptions import LLMTransportError

logger = logging.getLogger(__name__)


class AnthropicAdapter:
    """Adapter around the Anthropic Messages API."""

    def __init__(
        self,
        api_key: str,
        timeout: int = 60,
        model: str = DEFAULT_CLAUDE_MODEL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ):
        self.model = model
        self.max_tokens = max_tokens
        self.async_client = anthropic.AsyncAnthropic(api_key=api_key, timeout=timeout)

    def _build_kwargs(
        self,
        system: Optional[str],
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Build kwargs for anthropic messages.create()."""
        kwargs: Dict[str, Any] = {
            "model": model or self.model,
            "max_tokens": max_tokens or self.max_tokens,
            "messages": messages,
        }
        if system:
            kwargs["system"] = system
        return kwargs

    def _parse_response(self, response: Any) -> LLMReply:
        """Take the first text block and the usage counters."""
        output_text = ""
        for block in response.content:
            if block.type == "text":
                output_text = block.text
                break

        usage = getattr(response, "usage", None)
        return LLMReply(
            message=output_text,
            usage=Usage(
                input_tokens=getattr(usage, "input_tokens", 0) or 0,
                output_tokens=getattr(usage, "output_tokens", 0) or 0,
            ),
        )

    def _translate_error(self, error: Exception) -> LLMTransportError:
        status_code = getattr(error, "status_code", None)
        logger.error(json.dumps({
            "step": "LLM_CALL",
            "status": "failed",
            "model": self.model,
            "status_code": status_code,
            "error": str(error),
        }))
        if isinstance(error, anthropic.APIStatusError):
            return LLMTransportError.for_status(status_code)
        return LLMTransportError(str(error) or None)

    def _log_start(self, kwargs: Dict[str, Any]) -> None:
        logger.info(json.dumps({
            "step": "LLM_CALL",
            "status": "starting",
            "model": kwargs["model"],
            "params": {
                "message_count": len(kwargs["messages"]),
                "system_length": len(kwargs.get("system") or ""),
                "max_tokens": kwargs["max_tokens"],
            },
        }))

    def _log_complete(self, reply: LLMReply, start_time: float) -> None:
        logger.info(json.dumps({
            "step": "LLM_CALL",
            "status": "complete",
            "model": self.model,
            "output": {"response_length": len(reply.message)},
            "usage": reply.usage.model_dump(),
            "duration_ms": int((time.time() - start_time) * 1000),
        }))

    async def call_async(
        self,
        system: Optional[str],
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMReply:
        """Async call to Claude. Raises LLMTransportError on failure."""
        kwargs = self._build_kwargs(system, messages, model, max_tokens)
        self._log_start(kwargs)
        start_time = time.time()
        try:
            response = await self.async_client.messages.create(**kwargs)
        except anthropic.AnthropicError as e:
            raise self._translate_error(e) from e
        reply = self._parse_response(response)
        self._log_complete(reply, start_time)
        return reply
