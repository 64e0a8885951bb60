"""
Pydantic schemas shared across the interview core.

Defines data models for candidate profiles, questions, transcript messages,
the durable conversation context and the results returned to callers.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _now_utc() -> datetime:
    """Get current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


# Experience tier supplied by the profile-extraction collaborator
ExperienceLevel = Literal["entry", "mid", "senior"]


class QuestionCategory(str, Enum):
    """Categories of interview questions."""

    INTRODUCTION = "introduction"
    TECHNICAL = "technical"
    PROJECT_SPECIFIC = "project-specific"
    BEHAVIORAL = "behavioral"
    PROBLEM_SOLVING = "problem-solving"
    LEARNING_GROWTH = "learning-growth"
    FOLLOW_UP = "follow-up"
    SITUATIONAL = "situational"
    GENERAL = "general"


class Difficulty(str, Enum):
    """Difficulty of an interview question."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class MessageRole(str, Enum):
    """Role of the speaker in a transcript message."""

    INTERVIEWER = "interviewer"
    CANDIDATE = "candidate"


class CandidateProfile(BaseModel):
    """Structured candidate profile, read-only for the lifetime of a session."""

    model_config = ConfigDict(frozen=True)

    skills: list[str] = Field(default_factory=list, description="Skills in resume order")
    projects: list[str] = Field(default_factory=list, description="Project names")
    work_experience: list[str] = Field(
        default_factory=list,
        description="Work-experience descriptions",
    )
    achievements: list[str] = Field(default_factory=list, description="Achievements")
    experience_level: ExperienceLevel = Field(
        default="mid",
        description="Candidate's experience tier (entry, mid, senior)",
    )
    domain: str = Field(default="Software Engineering", description="Domain label")


class Question(BaseModel):
    """An interviewer question. Immutable once produced."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Question identifier")
    text: str = Field(..., min_length=1, description="Human-readable question text")
    category: QuestionCategory = Field(..., description="Question category")
    difficulty: Difficulty = Field(default=Difficulty.MEDIUM, description="Question difficulty")
    is_follow_up: bool = Field(default=False, description="Whether this probes the last answer")

    @field_validator("text")
    @classmethod
    def _text_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("question text must not be blank")
        return value


class Message(BaseModel):
    """A single transcript message."""

    role: MessageRole = Field(..., description="Role of the speaker")
    text: str = Field(..., description="Message content")
    timestamp: datetime = Field(default_factory=_now_utc, description="When the message was sent")
    category: QuestionCategory | None = Field(
        default=None,
        description="Question category (interviewer messages only)",
    )
    is_follow_up: bool | None = Field(default=None, description="Whether the question is a follow-up")
    question_id: str | None = Field(default=None, description="Identifier of the question asked")
    difficulty: Difficulty | None = Field(default=None, description="Difficulty of the question asked")

    @classmethod
    def from_question(cls, question: Question) -> "Message":
        """Build the interviewer message that records a question."""
        return cls(
            role=MessageRole.INTERVIEWER,
            text=question.text,
            category=question.category,
            is_follow_up=question.is_follow_up,
            question_id=question.id,
            difficulty=question.difficulty,
        )

    def to_question(self) -> Question | None:
        """Rebuild the question recorded by an interviewer message."""
        if self.role != MessageRole.INTERVIEWER:
            return None
        return Question(
            id=self.question_id or "",
            text=self.text,
            category=self.category or QuestionCategory.GENERAL,
            difficulty=self.difficulty or Difficulty.MEDIUM,
            is_follow_up=bool(self.is_follow_up),
        )


class ConversationContext(BaseModel):
    """Durable, TTL-bound view of a session's transcript and progress."""

    session_id: str = Field(..., description="Session identifier")
    candidate_profile: CandidateProfile = Field(..., description="Candidate profile")
    interview_focus: str = Field(default="Software Engineering", description="Role being interviewed for")
    current_topic: str = Field(default=QuestionCategory.INTRODUCTION.value, description="Active topic")
    topic_history: list[str] = Field(default_factory=list, description="Previously active topics")
    transcript: list[Message] = Field(default_factory=list, description="Append-only transcript")
    interview_style: Literal["formal", "conversational"] = Field(
        default="conversational",
        description="Interviewer personality kept consistent across turns",
    )
    questions_asked: int = Field(default=0, ge=0, description="Interviewer messages recorded")
    max_questions: int = Field(default=12, ge=1, description="Planned question count")
    is_complete: bool = Field(default=False, description="Whether the interview has ended")
    started_at: datetime = Field(default_factory=_now_utc, description="Session start time")

    @property
    def interviewer_messages(self) -> list[Message]:
        """Interviewer messages in transcript order."""
        return [m for m in self.transcript if m.role == MessageRole.INTERVIEWER]

    @property
    def candidate_messages(self) -> list[Message]:
        """Candidate messages in transcript order."""
        return [m for m in self.transcript if m.role == MessageRole.CANDIDATE]

    @property
    def last_interviewer_message(self) -> Message | None:
        """Most recent interviewer message, if any."""
        messages = self.interviewer_messages
        return messages[-1] if messages else None


class ConversationStats(BaseModel):
    """Aggregate statistics about a conversation."""

    total_messages: int = Field(default=0, description="Messages in the transcript")
    questions_asked: int = Field(default=0, description="Interviewer questions asked")
    average_response_length: int = Field(default=0, description="Mean candidate answer length in chars")
    topics_covered: list[str] = Field(default_factory=list, description="Current topic then history")
    duration_seconds: float = Field(default=0.0, description="Seconds since the session started")


class ConversationQuality(BaseModel):
    """Heuristic quality metrics of a candidate's side of the conversation."""

    score: int = Field(default=0, ge=0, le=100, description="Overall quality score")
    responsiveness: int = Field(default=0, ge=0, le=100)
    depth: int = Field(default=0, ge=0, le=100)
    engagement: int = Field(default=0, ge=0, le=100)


class CreateSessionResult(BaseModel):
    """Result of creating a session."""

    session_id: str
    first_question: Question
    planned_question_count: int


class SubmitResponseResult(BaseModel):
    """Result of submitting a candidate answer."""

    next_question: Question | None = None
    is_complete: bool = False
    is_follow_up: bool = False
    acknowledgment: str | None = None


class SessionProgress(BaseModel):
    """Progress counters for a session."""

    current_question_number: int
    total_questions: int
    questions_asked: int
    questions_answered: int


class SessionStatus(BaseModel):
    """Read-only snapshot of a session."""

    session_id: str
    state: str
    is_complete: bool
    current_question: Question | None
    progress: SessionProgress
    current_topic: str
    topic_history: list[str] = Field(default_factory=list)


class InterviewSummary(BaseModel):
    """Summary of an interview produced at the end of a session."""

    session_id: str
    questions_asked: int
    questions_answered: int
    duration_seconds: float
    average_response_length: int
    topics_covered: list[str] = Field(default_factory=list)
    quality: ConversationQuality
    skills: list[str] = Field(default_factory=list)
    domain: str = ""
    completed_at: datetime = Field(default_factory=_now_utc)
