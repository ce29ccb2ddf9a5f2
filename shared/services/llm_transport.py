"""
LLM Transport - the request/response seam between a tutoring session and Claude.

Three implementations share one interface:
- HttpLlmTransport: POSTs the wire request to the proxy endpoint
- AnthropicTransport: calls the Anthropic SDK in-process
- MockLlmTransport: canned replies, no network, used without a credential

The implementation is chosen once by create_transport(); sessions never
check for credentials themselves.
"""

import asyncio
import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import httpx
from pydantic import ValidationError

from config import Settings
from shared.models.schemas import ClaudeRequest, LLMReply, TransportContext
from shared.services.mock_responder import build_mock_reply
from shared.utils.constants import DEFAULT_CLAUDE_MODEL, DEFAULT_MAX_TOKENS, MOCK_DELAY_SECONDS
from shared.utils.exceptions import LLMTransportError

logger = logging.getLogger("shared.llm_transport")


class LlmTransport(ABC):
    """Stateless request/response transport to a text-completion model."""

    name = "base"
    is_mock = False

    @abstractmethod
    async def send(
        self,
        system: str,
        messages: List[Dict[str, str]],
        context: Optional[TransportContext] = None,
    ) -> LLMReply:
        """Send one request. Raises LLMTransportError on failure."""
        ...


class HttpLlmTransport(LlmTransport):
    """Sends requests to the JSON proxy endpoint over HTTP POST."""

    name = "http"

    def __init__(
        self,
        endpoint: str,
        model: str = DEFAULT_CLAUDE_MODEL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        timeout: float = 60.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.endpoint = endpoint
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._client = client

    def build_request(self, system: str, messages: List[Dict[str, str]]) -> ClaudeRequest:
        return ClaudeRequest(
            model=self.model,
            max_tokens=self.max_tokens,
            system=system,
            messages=messages,
        )

    async def send(
        self,
        system: str,
        messages: List[Dict[str, str]],
        context: Optional[TransportContext] = None,
    ) -> LLMReply:
        body = self.build_request(system, messages).model_dump()
        start_time = time.time()
        logger.info(json.dumps({
            "step": "LLM_CALL",
            "status": "starting",
            "transport": self.name,
            "model": self.model,
            "params": {"message_count": len(messages), "system_length": len(system)},
        }))

        try:
            if self._client is not None:
                response = await self._client.post(self.endpoint, json=body)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.endpoint, json=body)
        except httpx.HTTPError as e:
            logger.error(f"LLM proxy request failed: {e}")
            raise LLMTransportError(f"Failed to connect to Claude API: {e}") from e

        reply = self._parse_response(response)
        logger.info(json.dumps({
            "step": "LLM_CALL",
            "status": "complete",
            "transport": self.name,
            "output": {"response_length": len(reply.message)},
            "duration_ms": int((time.time() - start_time) * 1000),
        }))
        return reply

    def _parse_response(self, response: httpx.Response) -> LLMReply:
        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if response.is_success and data.get("success"):
            try:
                return LLMReply(
                    success=True,
                    message=data.get("message", ""),
                    usage=data.get("usage") or {},
                )
            except ValidationError as e:
                raise LLMTransportError(f"Malformed proxy response: {e}") from e

        message = data.get("message") or f"API Error: {response.status_code}"
        logger.warning(json.dumps({
            "step": "LLM_CALL",
            "status": "failed",
            "transport": self.name,
            "status_code": response.status_code,
            "error": data.get("error"),
        }))
        if data.get("error"):
            raise LLMTransportError.for_code(data["error"], message)
        raise LLMTransportError.for_status(response.status_code, message)


class AnthropicTransport(LlmTransport):
    """Calls Claude directly through the Anthropic adapter."""

    name = "anthropic"

    def __init__(self, adapter):
        self.adapter = adapter

    async def send(
        self,
        system: str,
        messages: List[Dict[str, str]],
        context: Optional[TransportContext] = None,
    ) -> LLMReply:
        return await self.adapter.call_async(system=system, messages=messages)


class MockLlmTransport(LlmTransport):
    """Deterministic responder that never touches the network."""

    name = "mock"
    is_mock = True

    def __init__(self, delay_seconds: float = MOCK_DELAY_SECONDS):
        self.delay_seconds = delay_seconds

    async def send(
        self,
        system: str,
        messages: List[Dict[str, str]],
        context: Optional[TransportContext] = None,
    ) -> LLMReply:
        if context is None:
            last_user = next((m["content"] for m in reversed(messages) if m["role"] == "user"), "")
            context = TransportContext(user_message=last_user)
        logger.warning("Using mock mode - no valid API key found")
        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)
        return build_mock_reply(context)


def create_transport(settings: Settings) -> LlmTransport:
    """Pick the transport once, from configuration."""
    if not settings.has_usable_api_key:
        logger.info("No usable Anthropic credential; selecting mock transport")
        return MockLlmTransport(delay_seconds=settings.mock_delay_seconds)

    if settings.llm_endpoint:
        logger.info(f"Selecting HTTP transport ({settings.llm_endpoint})")
        return HttpLlmTransport(
            endpoint=settings.llm_endpoint,
            model=settings.claude_model,
            max_tokens=settings.max_tokens,
            timeout=settings.llm_timeout,
        )

    from shared.services.anthropic_adapter import AnthropicAdapter
    logger.info(f"Selecting Anthropic transport (model={settings.claude_model})")
    return AnthropicTransport(
        AnthropicAdapter(
            api_key=settings.anthropic_api_key,
            timeout=settings.llm_timeout,
            model=settings.claude_model,
            max_tokens=settings.max_tokens,
        )
    )
