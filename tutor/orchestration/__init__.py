"""Tutoring session orchestration."""
from tutor.orchestration.session_orchestrator import SessionOrchestrator, TurnResult, TurnStatus, ProgressSummary
