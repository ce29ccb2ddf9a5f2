"""Pytest configuration and shared fixtures."""
import asyncio
from typing import Dict, List, Optional

import pytest

from config import Settings, reset_settings
from shared.api.claude_proxy import reset_anthropic_adapter
from shared.models.schemas import LLMReply, TransportContext, Usage
from shared.services.llm_transport import LlmTransport, MockLlmTransport
from tutor.models.exam_config import ExamConfig, ReferenceMaterial
from tutor.services.session_store import reset_session_store


class ScriptedTransport(LlmTransport):
    """
    Transport double that replays queued outcomes and records every request.

    Each queued item is either a reply string or an exception instance to raise.
    When `gate` is set, send() waits on it before answering.
    """

    name = "scripted"

    def __init__(self, outcomes=None):
        self.outcomes: List = list(outcomes or [])
        self.calls: List[Dict] = []
        self.gate: Optional[asyncio.Event] = None

    def queue(self, *outcomes):
        self.outcomes.extend(outcomes)

    async def send(self, system: str, messages: List[Dict[str, str]], context: Optional[TransportContext] = None) -> LLMReply:
        self.calls.append({"system": system, "messages": list(messages), "context": context})
        if self.gate is not None:
            await self.gate.wait()
        outcome = self.outcomes.pop(0) if self.outcomes else "OK"
        if isinstance(outcome, BaseException):
            raise outcome
        return LLMReply(message=outcome, usage=Usage(input_tokens=10, output_tokens=20))


@pytest.fixture(autouse=True)
def _reset_globals():
    """Every test starts without cached settings, store or adapter."""
    reset_settings()
    reset_session_store()
    reset_anthropic_adapter()
    yield
    reset_settings()
    reset_session_store()
    reset_anthropic_adapter()


@pytest.fixture
def test_settings():
    """Settings with no credential and no artificial latency."""
    return Settings(
        anthropic_api_key="",
        llm_endpoint="",
        mock_delay_seconds=0,
        answer_debounce_ms=300,
        history_max_turns=0,
    )


@pytest.fixture
def scripted_transport():
    return ScriptedTransport()


@pytest.fixture
def mock_transport():
    return MockLlmTransport(delay_seconds=0)


@pytest.fixture
def sample_exam_config():
    return ExamConfig(
        exam_type="essay",
        learning_objectives=["Explain photosynthesis", "Describe the Calvin cycle"],
        difficulty_level="advanced",
        common_pitfalls=["Confusing light and dark reactions"],
        time_constraints=90,
        special_instructions="Use diagrams where possible",
    )


@pytest.fixture
def sample_reference_materials():
    return [
        ReferenceMaterial(title="2023 Final Exam", page_count=4, text="Q1. Define osmosis."),
        ReferenceMaterial(title="Sample Paper", page_count=None, text="x" * 3500),
    ]
