"""Tutor models."""
from tutor.models.messages import Mode, ConversationTurn, DisplayTurn
from tutor.models.progress import ProgressState, QuestionAnswered, TopicStudied, ResetSession, ProgressAction
from tutor.models.exam_config import ExamConfig, ReferenceMaterial
