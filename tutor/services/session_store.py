"""
Session Store

In-memory registry of live tutoring sessions. Nothing is persisted; a
process restart drops every session.
"""

import logging
import threading
from typing import Optional, Sequence

from config import Settings, get_settings
from shared.services.llm_transport import LlmTransport, create_transport
from shared.utils.exceptions import SessionNotFoundException
from tutor.exceptions import ConfigurationError
from tutor.models.exam_config import ExamConfig, ReferenceMaterial
from tutor.orchestration.session_orchestrator import SessionOrchestrator
from tutor.services.conversation_log import history_policy_for

logger = logging.getLogger("tutor.session_store")


class SessionStore:
    """Thread-safe map of session id -> SessionOrchestrator."""

    def __init__(self, settings: Optional[Settings] = None, transport: Optional[LlmTransport] = None):
        self.settings = settings or get_settings()
        if self.settings.reference_preview_chars <= 0:
            raise ConfigurationError("reference_preview_chars", "must be a positive integer")
        # One transport for the whole process; credential detection happens here, once.
        self.transport = transport or create_transport(self.settings)
        self._sessions: dict[str, SessionOrchestrator] = {}
        self._lock = threading.Lock()

    def create(
        self,
        document_text: str = "",
        material_type: str = "study",
        reference_materials: Sequence[ReferenceMaterial] = (),
        exam_config: Optional[ExamConfig] = None,
    ) -> SessionOrchestrator:
        session = SessionOrchestrator(
            transport=self.transport,
            document_text=document_text,
            reference_materials=reference_materials,
            material_type=material_type,
            exam_config=exam_config,
            history_policy=history_policy_for(self.settings.history_max_turns),
            debounce_seconds=self.settings.answer_debounce_ms / 1000,
            preview_chars=self.settings.reference_preview_chars,
        )
        with self._lock:
            self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> SessionOrchestrator:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundException(session_id)
        return session

    def delete(self, session_id: str) -> None:
        with self._lock:
            removed = self._sessions.pop(session_id, None)
        if removed is None:
            raise SessionNotFoundException(session_id)
        logger.info(f"Session {session_id} deleted")

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


_store: Optional[SessionStore] = None


def get_session_store() -> SessionStore:
    """Get or create the process-wide session store."""
    global _store
    if _store is None:
        _store = SessionStore()
    return _store


def reset_session_store():
    """Drop the global store (useful for testing)."""
    global _store
    _store = None
