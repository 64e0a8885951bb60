"""
Session registry.

Process-local cache of live interview sessions. It can be lost at any time;
the orchestrator rebuilds sessions from the conversation store.
"""

from abc import ABC, abstractmethod

from contextual_interviewer.orchestrator.interview_state import InterviewSession


class SessionRegistry(ABC):
    """Abstract base class for session registries."""

    @abstractmethod
    def get(self, session_id: str) -> InterviewSession | None:
        """Get a cached session, or None."""
        ...

    @abstractmethod
    def put(self, session: InterviewSession) -> None:
        """Cache a session, replacing any previous entry."""
        ...

    @abstractmethod
    def remove(self, session_id: str) -> InterviewSession | None:
        """Drop a session from the cache and return it, if present."""
        ...

    @abstractmethod
    def __len__(self) -> int:
        ...


class InMemorySessionRegistry(SessionRegistry):
    """Dictionary-backed session registry."""

    def __init__(self) -> None:
        self._sessions: dict[str, InterviewSession] = {}

    def get(self, session_id: str) -> InterviewSession | None:
        return self._sessions.get(session_id)

    def put(self, session: InterviewSession) -> None:
        self._sessions[session.session_id] = session

    def remove(self, session_id: str) -> InterviewSession | None:
        return self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._sessions)
