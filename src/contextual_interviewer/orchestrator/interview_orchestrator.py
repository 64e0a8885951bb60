"""
Interview orchestrator.

Coordinates the contextual interview: session lifecycle, per-turn decisions
(follow-up, next planned question, redirection or completion) and the
reads and writes against the conversation store.
"""

import logging
import random
from datetime import datetime, timezone
from uuid import uuid4

from contextual_interviewer.agents.completion_evaluator import CompletionEvaluator
from contextual_interviewer.agents.flow_monitor import FlowMonitor
from contextual_interviewer.agents.follow_up_classifier import FollowUpClassifier
from contextual_interviewer.agents.prompt_composer import PromptComposer
from contextual_interviewer.agents.question_generator import QuestionGenerator
from contextual_interviewer.agents.question_planner import QuestionPlanner, QuestionPlannerBase
from contextual_interviewer.config import Settings, get_settings
from contextual_interviewer.errors import NoAnswersYet, SessionNotFound
from contextual_interviewer.memory.conversation_store import (
    ConversationStore,
    create_conversation_store,
)
from contextual_interviewer.models.generation_client import GenerationClient
from contextual_interviewer.models.llm_client import BackendUnavailable
from contextual_interviewer.orchestrator.interview_state import InterviewSession
from contextual_interviewer.orchestrator.session_registry import (
    InMemorySessionRegistry,
    SessionRegistry,
)
from contextual_interviewer.schemas import (
    CandidateProfile,
    ConversationContext,
    CreateSessionResult,
    InterviewSummary,
    Message,
    MessageRole,
    SessionStatus,
    SubmitResponseResult,
)

SESSION_ID_PREFIX = "contextual-interview-"


class SessionOrchestrator:
    """
    Orchestrates contextual interview sessions.

    The conversation store is the source of truth; the session registry is
    a cache reconciled against it on every turn. Callers are expected to
    serialize ``submit_response`` calls for the same session.
    """

    def __init__(
        self,
        store: ConversationStore | None = None,
        generation_client: GenerationClient | None = None,
        registry: SessionRegistry | None = None,
        settings: Settings | None = None,
        rng: random.Random | None = None,
        planner: QuestionPlannerBase | None = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            store: Conversation store. Built from settings if None.
            generation_client: Generation client. Creates default if None.
            registry: Session cache. Creates an in-memory registry if None.
            settings: Application settings (uses cached settings if None).
            rng: Random source for follow-up sampling and utterance picks.
            planner: Question-count planner. Creates default if None.
        """
        self._logger = logging.getLogger(__name__)
        self._settings = settings or get_settings()
        self._rng = rng or random.Random()

        self._store = store or create_conversation_store(self._settings)
        self._generation_client = generation_client or GenerationClient(settings=self._settings)
        self._registry = registry or InMemorySessionRegistry()

        self._planner = planner or QuestionPlanner()
        self._generator = QuestionGenerator(
            self._generation_client,
            composer=PromptComposer(),
            settings=self._settings,
            rng=self._rng,
        )
        self._classifier = FollowUpClassifier(
            sample_rate=self._settings.followup_sample_rate,
            rng=self._rng,
        )
        self._flow_monitor = FlowMonitor()
        self._evaluator = CompletionEvaluator()

    @property
    def store(self) -> ConversationStore:
        """Get the conversation store."""
        return self._store

    @property
    def registry(self) -> SessionRegistry:
        """Get the session registry."""
        return self._registry

    async def close(self) -> None:
        """Release backend and store resources."""
        await self._generation_client.close()
        await self._store.close()

    async def health_check(self) -> bool:
        """
        Check that the generation backend and the store are usable.

        Never raises.
        """
        backend_ok = await self._generation_client.health_check()
        store_ok = await self._store.ping()
        if not backend_ok:
            self._logger.warning("Generation backend health check failed")
        if not store_ok:
            self._logger.warning("Conversation store health check failed")
        return backend_ok and store_ok

    async def create_session(
        self,
        profile: CandidateProfile,
        session_id: str | None = None,
    ) -> CreateSessionResult:
        """
        Start a new interview session and ask the first question.

        Args:
            profile: Candidate profile.
            session_id: Optional caller-chosen identifier.

        Returns:
            The session identifier, first question and planned question count.

        Raises:
            BackendUnavailable: If the generation backend fails its health check.
        """
        if not await self._generation_client.health_check():
            raise BackendUnavailable("Generation backend is not available")

        planned = self._planner.plan(profile)
        session_id = session_id or f"{SESSION_ID_PREFIX}{uuid4().hex}"
        self._logger.info(f"Creating interview session {session_id} with {planned} planned questions")

        context = await self._store.init(
            session_id,
            profile,
            focus=profile.domain,
            max_questions=planned,
        )

        try:
            question = await self._generator.next_main_question(
                context,
                question_number=0,
                total_questions=planned,
                timeout=self._settings.first_question_timeout,
            )
            await self._store.append(session_id, Message.from_question(question))
        except Exception as e:
            self._logger.error(f"Failed to start session {session_id}: {e}")
            await self._store.delete(session_id)
            raise

        session = InterviewSession(session_id, profile, planned)
        session.record_question(question)
        self._registry.put(session)

        return CreateSessionResult(
            session_id=session_id,
            first_question=question,
            planned_question_count=planned,
        )

    async def _read_context(self, session_id: str) -> ConversationContext:
        context = await self._store.read(session_id)
        if context is None:
            self._registry.remove(session_id)
            raise SessionNotFound(session_id)
        return context

    def _resolve_session(self, context: ConversationContext) -> InterviewSession:
        """Return the cached session, rebuilding it when missing or stale."""
        session = self._registry.get(context.session_id)
        if (
            session is None
            or session.answered_count != len(context.candidate_messages)
            or len(session.asked_questions) != len(context.interviewer_messages)
            or session.is_complete != context.is_complete
        ):
            self._logger.debug(f"Rebuilding session {context.session_id} from stored context")
            session = InterviewSession.from_context(context)
            self._registry.put(session)
        return session

    async def submit_response(self, session_id: str, answer_text: str) -> SubmitResponseResult:
        """
        Record an answer and produce the interviewer's next turn.

        Args:
            session_id: Session identifier.
            answer_text: Candidate's answer.

        Returns:
            The next question and acknowledgment, or a completion result.

        Raises:
            SessionNotFound: If the session's context is absent.
        """
        context = await self._read_context(session_id)
        session = self._resolve_session(context)

        if session.is_terminal:
            return SubmitResponseResult(next_question=None, is_complete=True)

        if session.has_pending_question:
            await self._store.append(session_id, Message(role=MessageRole.CANDIDATE, text=answer_text))
            session.record_answer()
            context = await self._read_context(session_id)
        else:
            # The previous turn stored its answer but never its next question.
            self._logger.warning(
                f"Session {session_id} has no unanswered question, resuming with the next question"
            )

        flow = self._flow_monitor.analyze(context.transcript)

        if self._evaluator.is_complete(
            session.answered_count,
            session.planned_question_count,
            self._settings.minimum_answers,
        ):
            session.complete()
            await self._store.mark_complete(session_id)
            self._logger.info(f"Interview {session_id} complete after {session.answered_count} answers")
            return SubmitResponseResult(
                next_question=None,
                is_complete=True,
                acknowledgment=self._generator.closing(),
            )

        question_number = context.questions_asked
        last_question = context.last_interviewer_message
        last_category = last_question.category if last_question else None

        try:
            if self._classifier.should_follow_up(answer_text, last_category):
                question, acknowledgment = await self._generator.follow_up(
                    context,
                    answer_text,
                    question_number,
                )
            else:
                question = await self._generator.next_main_question(
                    context,
                    question_number,
                    session.planned_question_count,
                )
                if flow.needs_redirection:
                    acknowledgment = self._generator.redirection()
                else:
                    acknowledgment = await self._generator.acknowledge(answer_text)

            await self._store.append(session_id, Message.from_question(question))
            session.record_question(question)
        except Exception as e:
            self._logger.error(
                f"Question generation failed for session {session_id}, ending interview: {e}",
                exc_info=True,
            )
            session.complete()
            await self._store.mark_complete(session_id)
            return SubmitResponseResult(next_question=None, is_complete=True)

        self._logger.debug(
            f"Session {session_id}: asked {question.category.value} question "
            f"(follow-up={question.is_follow_up})"
        )
        return SubmitResponseResult(
            next_question=question,
            is_complete=False,
            is_follow_up=question.is_follow_up,
            acknowledgment=acknowledgment,
        )

    async def get_session(self, session_id: str) -> SessionStatus:
        """
        Get a read-only snapshot of a session.

        Raises:
            SessionNotFound: If the session's context is absent.
        """
        context = await self._read_context(session_id)
        session = self._registry.get(session_id)
        if session is None:
            session = InterviewSession.from_context(context)

        return SessionStatus(
            session_id=session_id,
            state=session.state.value,
            is_complete=context.is_complete,
            current_question=session.current_question,
            progress=session.progress(),
            current_topic=context.current_topic,
            topic_history=list(context.topic_history),
        )

    async def complete_session(self, session_id: str) -> None:
        """
        End a session and discard its context. Safe to call repeatedly.

        A session that had not completed is recorded as abandoned.
        """
        session = self._registry.remove(session_id)
        if session is not None:
            session.abandon()
            self._logger.info(f"Session {session_id} closed in state {session.state.value}")
        await self._store.delete(session_id)

    async def get_transcript(self, session_id: str) -> list[Message]:
        """
        Get the full transcript of a session.

        Raises:
            SessionNotFound: If the session's context is absent.
        """
        context = await self._read_context(session_id)
        return list(context.transcript)

    async def summarize_session(self, session_id: str) -> InterviewSummary:
        """
        Summarize a session: statistics, quality metrics and profile facts.

        Raises:
            SessionNotFound: If the session's context is absent.
            NoAnswersYet: If the candidate has not answered anything.
        """
        context = await self._read_context(session_id)
        answers = context.candidate_messages
        if not answers:
            raise NoAnswersYet(session_id)

        stats = await self._store.stats(session_id)
        if stats is None:
            raise SessionNotFound(session_id)

        return InterviewSummary(
            session_id=session_id,
            questions_asked=stats.questions_asked,
            questions_answered=len(answers),
            duration_seconds=stats.duration_seconds,
            average_response_length=stats.average_response_length,
            topics_covered=stats.topics_covered,
            quality=self._evaluator.assess_quality(context.transcript),
            skills=list(context.candidate_profile.skills),
            domain=context.candidate_profile.domain,
            completed_at=datetime.now(timezone.utc),
        )
