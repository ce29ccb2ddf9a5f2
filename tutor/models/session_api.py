"""Request/response schemas for the session API."""
from typing import List, Optional
from pydantic import BaseModel, Field

from shared.models.schemas import Usage
from tutor.models.exam_config import ExamConfig, ReferenceMaterial
from tutor.models.messages import DisplayTurn, Mode


class CreateSessionRequest(BaseModel):
    """Document text (already extracted) plus optional exam context."""
    document_text: str = ""
    material_type: str = Field(default="study", description="'study' loads reference materials; anything else ignores them")
    reference_materials: List[ReferenceMaterial] = Field(default_factory=list)
    exam_config: Optional[ExamConfig] = None


class CreateSessionResponse(BaseModel):
    session_id: str
    mode: Mode
    is_mock: bool


class LoadDocumentRequest(BaseModel):
    document_text: str
    material_type: str = "study"
    reference_materials: List[ReferenceMaterial] = Field(default_factory=list)


class TurnRequest(BaseModel):
    message: str


class AnswerRequest(BaseModel):
    answer: str


class ModeRequest(BaseModel):
    mode: Mode


class TopicRequest(BaseModel):
    topic: str = Field(min_length=1)


class TurnResponse(BaseModel):
    status: str
    response: Optional[str] = None
    is_mock: bool = False
    is_correct: Optional[bool] = None
    error_code: Optional[str] = None
    usage: Optional[Usage] = None


class QuestionResponse(BaseModel):
    question: Optional[str] = None
    status: str
    is_mock: bool = False
    error_code: Optional[str] = None


class MessagesResponse(BaseModel):
    session_id: str
    mode: Mode
    messages: List[DisplayTurn]
