"""
Question generator agent.

Turns a question focus into an interviewer utterance: a generated question
when the backend cooperates, a deterministic template when it does not.
Also produces the short acknowledgments, redirections and closings that
make the interviewer sound conversational.
"""

import logging
import random

from contextual_interviewer.agents.prompt_composer import PromptComposer, QuestionFocus
from contextual_interviewer.config import Settings, get_settings
from contextual_interviewer.models.generation_client import GenerationClient
from contextual_interviewer.models.llm_client import BackendError
from contextual_interviewer.schemas import (
    CandidateProfile,
    ConversationContext,
    Difficulty,
    Question,
    QuestionCategory,
)

logger = logging.getLogger(__name__)

MAX_ACKNOWLEDGMENT_CHARS = 50

FALLBACK_FOLLOW_UP_RESPONSE = "That's interesting."
FALLBACK_FOLLOW_UP_QUESTION = (
    "Could you elaborate on that a bit more? I'd like to understand your approach better."
)

ACKNOWLEDGMENTS = [
    "That's great",
    "I see",
    "Interesting",
    "Good point",
    "Makes sense",
    "Absolutely",
    "Right",
    "Fair enough",
    "Nice",
    "Excellent",
]

REDIRECTIONS = [
    "That's interesting, but let's get back to the technical aspects.",
    "I appreciate that context. Now, let's focus on your professional experience.",
    "Good to know. Let me ask you about something more specific to the role.",
    "Thanks for sharing. Let's dive into the technical side of things.",
    "I see. Let's talk about your work experience instead.",
]

CLOSINGS = [
    "Thank you for your time today. It's been a great conversation!",
    "Excellent! I really enjoyed our discussion about your experience.",
    "That's wonderful. Thank you for walking me through your background.",
    "Great answers! I appreciate you taking the time to share your insights.",
    "Perfect! That gives me a really good understanding of your experience.",
]

FALLBACK_TEMPLATES: dict[QuestionCategory, str] = {
    QuestionCategory.INTRODUCTION: (
        "Could you tell me a bit about yourself and what interests you about {domain}?"
    ),
    QuestionCategory.TECHNICAL: (
        "Can you tell me about your experience with {skill}? What projects have you used it in?"
    ),
    QuestionCategory.PROJECT_SPECIFIC: (
        "Can you walk me through {project}? What was your role and what challenges did you face?"
    ),
    QuestionCategory.BEHAVIORAL: (
        "What's an achievement you're particularly proud of in your career? What impact did it have?"
    ),
    QuestionCategory.PROBLEM_SOLVING: (
        "Describe a complex technical problem you encountered and how you approached solving it."
    ),
    QuestionCategory.LEARNING_GROWTH: (
        "How do you stay updated with the latest developments in {domain}?"
    ),
    QuestionCategory.SITUATIONAL: (
        "Imagine your team disagrees on how to approach a critical deadline. "
        "How would you decide on a path forward and bring everyone along?"
    ),
    QuestionCategory.FOLLOW_UP: FALLBACK_FOLLOW_UP_QUESTION,
    QuestionCategory.GENERAL: (
        "Tell me about your experience in {domain} and what interests you most about this field."
    ),
}


def fallback_question(
    focus: QuestionFocus,
    profile: CandidateProfile,
    question_id: str,
) -> Question:
    """
    Build a deterministic question for a focus from its category template.

    Args:
        focus: Focus the question should have had.
        profile: Candidate profile supplying skill, project and domain.
        question_id: Identifier of the question.

    Returns:
        A question carrying the focus category and difficulty.
    """
    template = FALLBACK_TEMPLATES.get(focus.category, FALLBACK_TEMPLATES[QuestionCategory.GENERAL])
    skill = focus.target_skill or (profile.skills[0] if profile.skills else "programming")
    project = focus.target_project or (profile.projects[0] if profile.projects else "one of your projects")
    text = template.format(domain=profile.domain, skill=skill, project=project)

    return Question(
        id=question_id,
        text=text,
        category=focus.category,
        difficulty=focus.difficulty,
        is_follow_up=focus.category == QuestionCategory.FOLLOW_UP,
    )


class QuestionGenerator:
    """
    Generates interviewer questions and utterances through the backend.

    Backend failures never escape the generation methods: after the
    client's retries are exhausted, fixed templates are used instead.
    """

    def __init__(
        self,
        generation_client: GenerationClient,
        composer: PromptComposer | None = None,
        settings: Settings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """
        Initialize the question generator.

        Args:
            generation_client: Structured generation client.
            composer: Prompt composer. Creates default if None.
            settings: Application settings (uses cached settings if None).
            rng: Random source for fixed utterance picks.
        """
        self._client = generation_client
        self._composer = composer or PromptComposer()
        self._settings = settings or get_settings()
        self._rng = rng or random.Random()

    @property
    def composer(self) -> PromptComposer:
        """Get the prompt composer."""
        return self._composer

    async def next_main_question(
        self,
        context: ConversationContext,
        question_number: int,
        total_questions: int,
        timeout: float | None = None,
    ) -> Question:
        """
        Generate the next planned question.

        Args:
            context: Current conversation context.
            question_number: Zero-based index of the question.
            total_questions: Planned question count.
            timeout: Per-attempt timeout; defaults by question position.

        Returns:
            The generated question, or a template fallback.
        """
        focus = self._composer.determine_focus(context, question_number, total_questions)
        prompt = self._composer.compose_question_prompt(focus, context, question_number, total_questions)
        if timeout is None:
            timeout = (
                self._settings.first_question_timeout
                if question_number == 0
                else self._settings.question_timeout
            )

        try:
            candidate = await self._client.generate_question(prompt, timeout)
        except BackendError as e:
            logger.warning(
                f"Using fallback {focus.category.value} question for session "
                f"{context.session_id}: {e}"
            )
            return fallback_question(
                focus,
                context.candidate_profile,
                f"fallback-{context.session_id}-{question_number + 1}",
            )

        category = candidate.category
        if category != focus.category:
            logger.warning(
                f"Backend returned category {category.value}, expected {focus.category.value}; overriding"
            )
            category = focus.category

        return Question(
            id=f"q-{context.session_id}-{question_number + 1}",
            text=candidate.text,
            category=category,
            difficulty=candidate.difficulty,
        )

    async def follow_up(
        self,
        context: ConversationContext,
        answer: str,
        question_number: int,
    ) -> tuple[Question, str]:
        """
        Generate a follow-up question probing the latest answer.

        Returns:
            The follow-up question and the acknowledgment preceding it.
        """
        prompt = self._composer.compose_follow_up_prompt(context, answer)

        human_response = FALLBACK_FOLLOW_UP_RESPONSE
        question_text = FALLBACK_FOLLOW_UP_QUESTION
        difficulty = Difficulty.MEDIUM
        question_id = f"followup-{context.session_id}-{question_number}"

        try:
            candidate = await self._client.generate_follow_up(prompt, self._settings.follow_up_timeout)
        except BackendError as e:
            logger.warning(f"Using fallback follow-up for session {context.session_id}: {e}")
            question_id = f"fallback-followup-{context.session_id}-{question_number}"
        else:
            if candidate.human_response:
                human_response = candidate.human_response
            if candidate.question_text:
                question_text = candidate.question_text
            difficulty = candidate.difficulty

        question = Question(
            id=question_id,
            text=question_text,
            category=QuestionCategory.FOLLOW_UP,
            difficulty=difficulty,
            is_follow_up=True,
        )
        return question, human_response

    async def acknowledge(self, answer: str) -> str:
        """
        Produce a short acknowledgment of an answer.

        A single attempt is made; overly long or failed generations fall
        back to a fixed acknowledgment.
        """
        if not self._settings.generate_acknowledgments:
            return self.random_acknowledgment()

        prompt = self._composer.compose_acknowledgment_prompt(answer)
        try:
            text = await self._client.generate_text(prompt, self._settings.acknowledgment_timeout)
        except BackendError as e:
            logger.debug(f"Acknowledgment generation failed: {e}")
            return self.random_acknowledgment()

        acknowledgment = text.replace('"', "").replace("'", "").strip()
        if not acknowledgment or len(acknowledgment) > MAX_ACKNOWLEDGMENT_CHARS:
            return self.random_acknowledgment()
        return acknowledgment

    def random_acknowledgment(self) -> str:
        return self._rng.choice(ACKNOWLEDGMENTS)

    def redirection(self) -> str:
        """Utterance steering an off-topic conversation back to the interview."""
        return self._rng.choice(REDIRECTIONS)

    def closing(self) -> str:
        """Utterance ending the interview."""
        return self._rng.choice(CLOSINGS)
