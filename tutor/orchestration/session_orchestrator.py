"""
Session Orchestrator

Owns one tutoring session: the active mode, the loaded document, the durable
conversation log, the display buffer and the progress record.

Turn flow: validate -> display user turn -> build system prompt -> one
transport call -> on success append to the log (and grade in quiz mode),
on failure append an error display turn only.

Concurrency: at most one request in flight; extra requests are rejected,
not queued. Switching mode, loading a document or resetting bumps a
generation counter, and a response that comes back under an older
generation is discarded without touching any state.
"""

import asyncio
import json
import logging
import time
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Sequence

from pydantic import BaseModel, Field

from shared.models.schemas import TransportContext, Usage
from shared.services.llm_transport import LlmTransport
from shared.utils.constants import (
    ANSWER_DEBOUNCE_SECONDS,
    DEFAULT_QUIZ_TOPIC,
    ERROR_MESSAGES,
    ERROR_UNKNOWN,
    REFERENCE_PREVIEW_CHARS,
)
from shared.utils.exceptions import LLMTransportError
from tutor.models.exam_config import ExamConfig, ReferenceMaterial
from tutor.models.messages import ConversationTurn, DisplayTurn, Mode, create_error_display
from tutor.models.progress import ProgressState, QuestionAnswered, ResetSession, TopicStudied
from tutor.services.conversation_log import (
    HistoryPolicy,
    UnboundedHistory,
    append_turn,
    to_wire_messages,
)
from tutor.services.grading import GradeResult, classify, is_correct_evaluation
from tutor.services.progress_tracker import apply_progress_action
from tutor.services.prompt_assembler import (
    answer_evaluation_prompt,
    build_system_prompt,
    next_question_prompt,
    quiz_start_prompt,
)
from tutor.utils.debounce import AsyncDebouncer
from tutor.utils.state_utils import format_session_duration, sorted_mastery

logger = logging.getLogger("tutor.orchestrator")

STUDY_MATERIAL_TYPE = "study"


class TurnStatus(str, Enum):
    COMPLETED = "completed"
    REJECTED_EMPTY = "rejected_empty"
    REJECTED_BUSY = "rejected_busy"
    FAILED = "failed"
    DISCARDED = "discarded"


class TurnResult(BaseModel):
    """Outcome of one user turn or quiz request."""
    status: TurnStatus
    response: Optional[str] = Field(default=None, description="Assistant text, or the error message")
    is_mock: bool = False
    is_correct: Optional[bool] = None
    error_code: Optional[str] = None
    usage: Optional[Usage] = None

    @property
    def ok(self) -> bool:
        return self.status == TurnStatus.COMPLETED


class ProgressSummary(BaseModel):
    """Dashboard snapshot of the session."""
    mode: Mode
    questions_answered: int
    correct_answers: int
    accuracy: int
    grade: GradeResult
    topics_studied: list[str]
    weak_areas: list[str]
    concept_mastery: dict[str, int]
    session_duration: str
    is_mock: bool


class SessionOrchestrator:
    """
    Central coordinator for a single tutoring session.

    The transport is injected and fixed for the lifetime of the session;
    whether it is the real client or the mock responder is decided by
    whoever builds the orchestrator.
    """

    def __init__(
        self,
        transport: LlmTransport,
        document_text: str = "",
        reference_materials: Sequence[ReferenceMaterial] = (),
        material_type: str = STUDY_MATERIAL_TYPE,
        exam_config: Optional[ExamConfig] = None,
        history_policy: Optional[HistoryPolicy] = None,
        debounce_seconds: float = ANSWER_DEBOUNCE_SECONDS,
        preview_chars: int = REFERENCE_PREVIEW_CHARS,
        session_id: Optional[str] = None,
    ):
        self.transport = transport
        self.history_policy = history_policy or UnboundedHistory()
        self.preview_chars = preview_chars
        self.session_id = session_id or f"sess_{uuid.uuid4().hex[:12]}"

        self.mode: Mode = Mode.LEARN
        self.current_topic: Optional[str] = None
        self.current_question: Optional[str] = None
        self.exam_config: Optional[ExamConfig] = exam_config
        self.progress: ProgressState = ProgressState()
        self.conversation_log: tuple[ConversationTurn, ...] = ()
        self.display_messages: list[DisplayTurn] = []
        self.document_text: str = ""
        self.reference_materials: tuple[ReferenceMaterial, ...] = ()
        self.started_at: datetime = datetime.now(timezone.utc)

        self._in_flight = False
        self._generation = 0
        self._answer_debouncer = AsyncDebouncer(debounce_seconds, self.submit_answer)

        self._set_document(document_text, material_type, reference_materials)

        logger.info(f"Session {self.session_id} created (transport={transport.name})")

    # ─── State transitions ────────────────────────────────────────────

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def is_mock(self) -> bool:
        return self.transport.is_mock

    def _invalidate_pending(self) -> None:
        """Make any in-flight response stale and drop a pending debounced submit."""
        self._generation += 1
        self._answer_debouncer.cancel()

    def _set_document(
        self,
        document_text: str,
        material_type: str,
        reference_materials: Sequence[ReferenceMaterial],
    ) -> None:
        self.document_text = document_text or ""
        if material_type == STUDY_MATERIAL_TYPE:
            self.reference_materials = tuple(reference_materials)
        else:
            self.reference_materials = ()

    def switch_mode(self, mode: Mode) -> None:
        """Unconditional; keeps history and progress, clears the current topic."""
        previous = self.mode
        self.mode = Mode(mode)
        self.current_topic = None
        self._invalidate_pending()
        logger.info(f"Session {self.session_id}: mode {previous.value} -> {self.mode.value}")

    def load_document(
        self,
        document_text: str,
        material_type: str = STUDY_MATERIAL_TYPE,
        reference_materials: Sequence[ReferenceMaterial] = (),
    ) -> None:
        """Start over on a new document. Progress survives; the conversation does not."""
        self._invalidate_pending()
        self._set_document(document_text, material_type, reference_materials)
        self.mode = Mode.LEARN
        self.current_topic = None
        self.current_question = None
        self.conversation_log = ()
        self.display_messages = []
        self.started_at = datetime.now(timezone.utc)
        logger.info(
            f"Session {self.session_id}: loaded {material_type} document "
            f"({len(self.document_text)} chars, {len(self.reference_materials)} reference materials)"
        )

    def set_exam_config(self, exam_config: Optional[ExamConfig]) -> None:
        """Replace (never merge) the exam configuration."""
        self.exam_config = exam_config
        logger.info(f"Session {self.session_id}: exam config {'saved' if exam_config else 'cleared'}")

    def set_current_topic(self, topic: Optional[str]) -> None:
        self.current_topic = topic or None

    def record_topic_studied(self, topic: str) -> ProgressState:
        self.progress = apply_progress_action(self.progress, TopicStudied(topic=topic))
        return self.progress

    def reset(self) -> None:
        """Drop everything: document, materials, exam config, conversation and progress."""
        self._invalidate_pending()
        self._set_document("", STUDY_MATERIAL_TYPE, ())
        self.exam_config = None
        self.mode = Mode.LEARN
        self.current_topic = None
        self.current_question = None
        self.conversation_log = ()
        self.display_messages = []
        self.progress = apply_progress_action(self.progress, ResetSession())
        self.started_at = datetime.now(timezone.utc)
        logger.info(f"Session {self.session_id}: reset")

    # ─── Read models ──────────────────────────────────────────────────

    def build_system_prompt(self, mode: Optional[Mode] = None) -> str:
        return build_system_prompt(
            mode=mode or self.mode,
            document_text=self.document_text,
            progress=self.progress,
            exam_config=self.exam_config,
            reference_materials=self.reference_materials,
            preview_chars=self.preview_chars,
        )

    def grade(self) -> GradeResult:
        return classify(self.progress.correct_answers, self.progress.questions_answered)

    def summary(self, now: Optional[datetime] = None) -> ProgressSummary:
        grade = self.grade()
        return ProgressSummary(
            mode=self.mode,
            questions_answered=self.progress.questions_answered,
            correct_answers=self.progress.correct_answers,
            accuracy=grade.percentage,
            grade=grade,
            topics_studied=sorted(self.progress.topics_studied),
            weak_areas=list(self.progress.weak_areas),
            concept_mastery=dict(sorted_mastery(self.progress.concept_mastery)),
            session_duration=format_session_duration(self.started_at, now),
            is_mock=self.is_mock,
        )

    # ─── Turns ────────────────────────────────────────────────────────

    async def handle_user_turn(self, user_text: str) -> TurnResult:
        """Run one conversational turn in the current mode; quiz turns are graded."""
        return await self._run_turn(user_text, mode=self.mode, grade=self.mode == Mode.QUIZ)

    async def submit_answer(self, answer: str) -> TurnResult:
        """Grade an answer to `current_question`. The log records the raw answer."""
        text = (answer or "").strip()
        return await self._run_turn(
            text,
            mode=Mode.QUIZ,
            grade=True,
            request_text=answer_evaluation_prompt(self.current_question, text) if text else None,
        )

    async def request_answer_submission(self, answer: str) -> TurnResult:
        """Debounced submit: only the last call within the quiet window reaches submit_answer.

        Earlier calls superseded by a later one resolve as DISCARDED.
        """
        task = self._answer_debouncer.trigger(answer)
        # wait() leaves the debounced task alone if this caller is cancelled.
        await asyncio.wait({task})
        if task.cancelled():
            logger.info(f"Session {self.session_id}: answer submission superseded")
            return TurnResult(status=TurnStatus.DISCARDED)
        return task.result()

    async def start_quiz(self) -> TurnResult:
        """Ask for a first question without replaying the conversation."""
        return await self._request_question(quiz_start_prompt(), replay_history=False)

    async def next_question(self) -> TurnResult:
        return await self._request_question(next_question_prompt(), replay_history=True)

    def _transport_context(self, mode: Mode, user_text: str) -> TransportContext:
        return TransportContext(
            mode=mode.value,
            document_text=self.document_text,
            user_message=user_text,
            exam_type=self.exam_config.exam_type if self.exam_config else None,
            difficulty_level=self.exam_config.difficulty_level if self.exam_config else None,
            reference_material_count=len(self.reference_materials),
        )

    def _is_stale(self, generation: int) -> bool:
        return generation != self._generation

    async def _send(self, mode: Mode, user_text: str, request_text: str, replay_history: bool):
        """One transport call. Returns (reply, None) or (None, LLMTransportError); never raises."""
        history = self.history_policy.select(self.conversation_log) if replay_history else ()
        messages = to_wire_messages(history) + [{"role": "user", "content": request_text}]
        system = self.build_system_prompt(mode)
        try:
            reply = await self.transport.send(
                system, messages, context=self._transport_context(mode, user_text)
            )
            return reply, None
        except LLMTransportError as e:
            return None, e
        except Exception as e:
            logger.error(f"Session {self.session_id}: transport raised unexpectedly: {e}", exc_info=True)
            return None, LLMTransportError(
                str(e) or ERROR_MESSAGES[ERROR_UNKNOWN], error_code=ERROR_UNKNOWN
            )

    def _fail(self, error: LLMTransportError) -> TurnResult:
        self.display_messages.append(create_error_display(error.message, error.error_code))
        logger.warning(f"Session {self.session_id}: turn failed ({error.error_code}): {error.message}")
        return TurnResult(status=TurnStatus.FAILED, response=error.message, error_code=error.error_code)

    async def _run_turn(
        self,
        user_text: str,
        mode: Mode,
        grade: bool,
        request_text: Optional[str] = None,
    ) -> TurnResult:
        text = (user_text or "").strip()
        if not text:
            logger.debug(f"Session {self.session_id}: empty input ignored")
            return TurnResult(status=TurnStatus.REJECTED_EMPTY)
        if self._in_flight:
            logger.info(f"Session {self.session_id}: turn rejected, another request is in flight")
            return TurnResult(status=TurnStatus.REJECTED_BUSY)

        self._in_flight = True
        generation = self._generation
        start_time = time.time()
        logger.info(json.dumps({
            "step": "TURN",
            "status": "started",
            "session_id": self.session_id,
            "mode": mode.value,
            "history_length": len(self.conversation_log),
        }))

        try:
            self.display_messages.append(DisplayTurn(role="user", content=text))
            reply, error = await self._send(mode, text, request_text or text, replay_history=True)

            if self._is_stale(generation):
                logger.info(f"Session {self.session_id}: discarding response from a superseded context")
                return TurnResult(status=TurnStatus.DISCARDED)
            if error is not None:
                return self._fail(error)

            self.conversation_log = append_turn(self.conversation_log, text, reply.message)
            self.display_messages.append(
                DisplayTurn(role="assistant", content=reply.message, is_mock=reply.is_mock)
            )

            is_correct = None
            if grade:
                is_correct = is_correct_evaluation(reply.message)
                self.progress = apply_progress_action(
                    self.progress,
                    QuestionAnswered(is_correct=is_correct, topic=self.current_topic or DEFAULT_QUIZ_TOPIC),
                )

            logger.info(json.dumps({
                "step": "TURN",
                "status": "completed",
                "session_id": self.session_id,
                "mode": mode.value,
                "is_mock": reply.is_mock,
                "graded": grade,
                "is_correct": is_correct,
                "duration_ms": int((time.time() - start_time) * 1000),
            }))
            return TurnResult(
                status=TurnStatus.COMPLETED,
                response=reply.message,
                is_mock=reply.is_mock,
                is_correct=is_correct,
                usage=reply.usage,
            )
        finally:
            self._in_flight = False

    async def _request_question(self, prompt: str, replay_history: bool) -> TurnResult:
        """Fetch a quiz question into `current_question`; log and progress are untouched."""
        if self._in_flight:
            logger.info(f"Session {self.session_id}: question request rejected, another request is in flight")
            return TurnResult(status=TurnStatus.REJECTED_BUSY)

        self._in_flight = True
        generation = self._generation
        try:
            reply, error = await self._send(Mode.QUIZ, prompt, prompt, replay_history=replay_history)

            if self._is_stale(generation):
                logger.info(f"Session {self.session_id}: discarding question from a superseded context")
                return TurnResult(status=TurnStatus.DISCARDED)
            if error is not None:
                return self._fail(error)

            self.current_question = reply.message
            return TurnResult(
                status=TurnStatus.COMPLETED,
                response=reply.message,
                is_mock=reply.is_mock,
                usage=reply.usage,
            )
        finally:
            self._in_flight = False
