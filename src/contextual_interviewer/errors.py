"""
Session-level exceptions surfaced to callers of the orchestrator.

Backend failures live next to the backend client in
``contextual_interviewer.models.llm_client``.
"""


class InterviewError(Exception):
    """Base class for errors raised by the interview core."""


class SessionNotFound(InterviewError):
    """Raised when a session's durable context is absent (expired or deleted)."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Interview session not found: {session_id}")
        self.session_id = session_id


class NoAnswersYet(InterviewError):
    """Raised when a summary is requested before any answer was recorded."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"No answers recorded yet for session: {session_id}")
        self.session_id = session_id
