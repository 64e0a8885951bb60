"""
Orchestrator module for managing interview flow and session lifecycle.
"""

from contextual_interviewer.orchestrator.interview_orchestrator import SessionOrchestrator
from contextual_interviewer.orchestrator.interview_state import InterviewSession, SessionState
from contextual_interviewer.orchestrator.session_registry import (
    InMemorySessionRegistry,
    SessionRegistry,
)

__all__ = [
    "SessionOrchestrator",
    "InterviewSession",
    "SessionState",
    "SessionRegistry",
    "InMemorySessionRegistry",
]
