"""
Interview session state.

In-process view of an interview session: the questions asked so far, how
many were answered, and the lifecycle state. The durable conversation
context remains authoritative; a session can always be rebuilt from it.
"""

from datetime import datetime, timezone
from enum import Enum

from contextual_interviewer.errors import InterviewError
from contextual_interviewer.schemas import (
    CandidateProfile,
    ConversationContext,
    Question,
    SessionProgress,
)


class SessionState(str, Enum):
    """Lifecycle states of an interview session."""

    CREATED = "created"
    ACTIVE = "active"
    COMPLETE = "complete"
    ABANDONED = "abandoned"


TERMINAL_STATES = frozenset({SessionState.COMPLETE, SessionState.ABANDONED})


class InterviewSession:
    """
    Manages the mutable state of an interview session.

    Asked questions are append-only, and ``answered_count`` never exceeds
    the number of questions asked. Once the session reaches a terminal
    state no further questions or answers are accepted.
    """

    def __init__(
        self,
        session_id: str,
        profile: CandidateProfile,
        planned_question_count: int,
    ) -> None:
        """
        Initialize a session.

        Args:
            session_id: Session identifier.
            profile: Candidate profile.
            planned_question_count: Planned number of questions.
        """
        self._session_id = session_id
        self._profile = profile
        self._planned_question_count = planned_question_count
        self._asked_questions: list[Question] = []
        self._answered_count = 0
        self._state = SessionState.CREATED
        self._created_at = datetime.now(timezone.utc)

    @classmethod
    def from_context(cls, context: ConversationContext) -> "InterviewSession":
        """
        Rebuild a session from its durable conversation context.

        Args:
            context: Stored conversation context.

        Returns:
            A session whose counters and state match the transcript.
        """
        session = cls(
            session_id=context.session_id,
            profile=context.candidate_profile,
            planned_question_count=context.max_questions,
        )
        session._asked_questions = [
            q for q in (m.to_question() for m in context.interviewer_messages) if q is not None
        ]
        session._answered_count = min(len(context.candidate_messages), len(session._asked_questions))
        session._created_at = context.started_at
        if context.is_complete:
            session._state = SessionState.COMPLETE
        elif session._answered_count > 0:
            session._state = SessionState.ACTIVE
        return session

    @property
    def session_id(self) -> str:
        """Get the session identifier."""
        return self._session_id

    @property
    def profile(self) -> CandidateProfile:
        """Get the candidate profile."""
        return self._profile

    @property
    def planned_question_count(self) -> int:
        """Get the planned number of questions."""
        return self._planned_question_count

    @property
    def asked_questions(self) -> list[Question]:
        """Get all questions asked so far."""
        return self._asked_questions.copy()

    @property
    def answered_count(self) -> int:
        """Get the number of answers recorded."""
        return self._answered_count

    @property
    def state(self) -> SessionState:
        """Get the lifecycle state."""
        return self._state

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def is_complete(self) -> bool:
        """Check if the interview is complete."""
        return self._state == SessionState.COMPLETE

    @property
    def is_terminal(self) -> bool:
        """Check if the session is complete or abandoned."""
        return self._state in TERMINAL_STATES

    @property
    def has_pending_question(self) -> bool:
        """Check if the latest question is still unanswered."""
        return self._answered_count < len(self._asked_questions)

    @property
    def current_question(self) -> Question | None:
        """The most recently asked question, if any."""
        return self._asked_questions[-1] if self._asked_questions else None

    def progress(self) -> SessionProgress:
        """Get progress counters for the session."""
        return SessionProgress(
            current_question_number=len(self._asked_questions),
            total_questions=self._planned_question_count,
            questions_asked=len(self._asked_questions),
            questions_answered=self._answered_count,
        )

    def _ensure_open(self, action: str) -> None:
        if self.is_terminal:
            raise InterviewError(f"Cannot {action} in {self._state.value} session {self._session_id}")

    def record_question(self, question: Question) -> None:
        """
        Record a question put to the candidate.

        Raises:
            InterviewError: If the session is already terminal.
        """
        self._ensure_open("ask a question")
        self._asked_questions.append(question)

    def record_answer(self) -> None:
        """
        Record an answer to the current question. Activates the session.

        Raises:
            InterviewError: If the session is terminal or no question is pending.
        """
        self._ensure_open("record an answer")
        if not self.has_pending_question:
            raise InterviewError(f"No pending question to answer in session {self._session_id}")
        self._answered_count += 1
        self._state = SessionState.ACTIVE

    def complete(self) -> None:
        """Mark the interview complete. Abandoned sessions stay abandoned."""
        if self._state == SessionState.ABANDONED:
            return
        self._state = SessionState.COMPLETE

    def abandon(self) -> None:
        """Mark the session abandoned unless it already completed."""
        if self._state == SessionState.COMPLETE:
            return
        self._state = SessionState.ABANDONED
