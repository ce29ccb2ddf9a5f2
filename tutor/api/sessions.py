"""Session management API endpoints.

Every handler is `async def` so session state is only ever touched on the
event loop thread.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, status

from shared.utils.exceptions import StudyBuddyException
from tutor.exceptions import TurnValidationError
from tutor.models.exam_config import ExamConfig
from tutor.models.session_api import (
    AnswerRequest,
    CreateSessionRequest,
    CreateSessionResponse,
    LoadDocumentRequest,
    MessagesResponse,
    ModeRequest,
    QuestionResponse,
    TopicRequest,
    TurnRequest,
    TurnResponse,
)
from tutor.orchestration.session_orchestrator import (
    ProgressSummary,
    SessionOrchestrator,
    TurnResult,
    TurnStatus,
)
from tutor.services.session_store import SessionStore, get_session_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])

_REJECTIONS = {
    TurnStatus.REJECTED_EMPTY: ("message is empty", status.HTTP_400_BAD_REQUEST),
    TurnStatus.REJECTED_BUSY: ("another request is in flight", status.HTTP_409_CONFLICT),
    TurnStatus.DISCARDED: ("superseded by a newer request", status.HTTP_409_CONFLICT),
}


def _get_session(store: SessionStore, session_id: str) -> SessionOrchestrator:
    try:
        return store.get(session_id)
    except StudyBuddyException as e:
        raise e.to_http_exception()


def _check_accepted(result: TurnResult) -> TurnResult:
    """Raise TurnValidationError for results the client has to retry or fix."""
    if result.status in _REJECTIONS:
        reason, status_code = _REJECTIONS[result.status]
        raise TurnValidationError(reason, status_code=status_code)
    return result


def _turn_response(result: TurnResult) -> TurnResponse:
    return TurnResponse(
        status=result.status.value,
        response=result.response,
        is_mock=result.is_mock,
        is_correct=result.is_correct,
        error_code=result.error_code,
        usage=result.usage,
    )


def _question_response(session: SessionOrchestrator, result: TurnResult) -> QuestionResponse:
    return QuestionResponse(
        question=session.current_question if result.ok else None,
        status=result.status.value,
        is_mock=result.is_mock,
        error_code=result.error_code,
    )


@router.post("", response_model=CreateSessionResponse)
async def create_session(request: CreateSessionRequest, store: SessionStore = Depends(get_session_store)):
    """Create a tutoring session over an already-extracted document."""
    session = store.create(
        document_text=request.document_text,
        material_type=request.material_type,
        reference_materials=request.reference_materials,
        exam_config=request.exam_config,
    )
    return CreateSessionResponse(session_id=session.session_id, mode=session.mode, is_mock=session.is_mock)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    try:
        store.delete(session_id)
    except StudyBuddyException as e:
        raise e.to_http_exception()


@router.put("/{session_id}/document", response_model=CreateSessionResponse)
async def load_document(session_id: str, request: LoadDocumentRequest, store: SessionStore = Depends(get_session_store)):
    """Replace the document; conversation restarts, progress is kept."""
    session = _get_session(store, session_id)
    session.load_document(request.document_text, request.material_type, request.reference_materials)
    return CreateSessionResponse(session_id=session.session_id, mode=session.mode, is_mock=session.is_mock)


@router.post("/{session_id}/turns", response_model=TurnResponse)
async def post_turn(session_id: str, request: TurnRequest, store: SessionStore = Depends(get_session_store)):
    """Send one message in the current mode."""
    session = _get_session(store, session_id)
    try:
        result = _check_accepted(await session.handle_user_turn(request.message))
    except TurnValidationError as e:
        raise e.to_http_exception()
    return _turn_response(result)


@router.get("/{session_id}/messages", response_model=MessagesResponse)
async def get_messages(session_id: str, store: SessionStore = Depends(get_session_store)):
    """Display buffer, including error turns."""
    session = _get_session(store, session_id)
    return MessagesResponse(session_id=session.session_id, mode=session.mode, messages=session.display_messages)


@router.put("/{session_id}/mode")
async def switch_mode(session_id: str, request: ModeRequest, store: SessionStore = Depends(get_session_store)):
    session = _get_session(store, session_id)
    session.switch_mode(request.mode)
    return {"mode": session.mode}


@router.put("/{session_id}/exam-config")
async def save_exam_config(
    session_id: str,
    exam_config: Optional[ExamConfig] = None,
    store: SessionStore = Depends(get_session_store),
):
    """Save (replace) the exam configuration; an empty body clears it."""
    session = _get_session(store, session_id)
    session.set_exam_config(exam_config)
    return {"exam_config": session.exam_config}


@router.post("/{session_id}/quiz/start", response_model=QuestionResponse)
async def start_quiz(session_id: str, store: SessionStore = Depends(get_session_store)):
    session = _get_session(store, session_id)
    try:
        result = _check_accepted(await session.start_quiz())
    except TurnValidationError as e:
        raise e.to_http_exception()
    return _question_response(session, result)


@router.post("/{session_id}/quiz/next", response_model=QuestionResponse)
async def next_question(session_id: str, store: SessionStore = Depends(get_session_store)):
    session = _get_session(store, session_id)
    try:
        result = _check_accepted(await session.next_question())
    except TurnValidationError as e:
        raise e.to_http_exception()
    return _question_response(session, result)


@router.post("/{session_id}/quiz/answer", response_model=TurnResponse)
async def submit_answer(session_id: str, request: AnswerRequest, store: SessionStore = Depends(get_session_store)):
    """Evaluate an answer to the current question and record the result.

    Submissions are debounced: when several arrive within the quiet window
    only the last one is graded, the earlier ones get 409.
    """
    session = _get_session(store, session_id)
    try:
        result = _check_accepted(await session.request_answer_submission(request.answer))
    except TurnValidationError as e:
        raise e.to_http_exception()
    return _turn_response(result)


@router.post("/{session_id}/topics")
async def record_topic(session_id: str, request: TopicRequest, store: SessionStore = Depends(get_session_store)):
    session = _get_session(store, session_id)
    progress = session.record_topic_studied(request.topic)
    return {"topics_studied": sorted(progress.topics_studied), "concept_mastery": progress.concept_mastery}


@router.get("/{session_id}/progress", response_model=ProgressSummary)
async def get_progress(session_id: str, store: SessionStore = Depends(get_session_store)):
    """Dashboard snapshot: counts, accuracy, grade, topics and session time."""
    session = _get_session(store, session_id)
    return session.summary()


@router.post("/{session_id}/reset")
async def reset_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    """Clear document, exam config, conversation and progress."""
    session = _get_session(store, session_id)
    session.reset()
    logger.info(f"Session {session_id} reset via API")
    return {"session_id": session.session_id, "mode": session.mode}
