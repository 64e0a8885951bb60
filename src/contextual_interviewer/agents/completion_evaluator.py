"""
Completion evaluator.

Decides when an interview has gathered enough answers, and rates the
candidate's side of the conversation.
"""

from contextual_interviewer.schemas import ConversationQuality, Message, MessageRole

DEFAULT_MINIMUM_ANSWERS = 8

# Quality heuristics
RESPONSIVE_TURNS = 8
DEEP_ANSWER_CHARS = 150
ENGAGEMENT_PER_HIT = 30
ENGAGEMENT_KEYWORDS = ["example", "instance", "experience", "project", "challenge", "learned", "implemented"]


class CompletionEvaluator:
    """Completion rule and conversation-quality heuristics."""

    @staticmethod
    def is_complete(
        answered_count: int,
        planned_question_count: int,
        minimum_floor: int = DEFAULT_MINIMUM_ANSWERS,
    ) -> bool:
        """
        Check whether an interview is complete.

        Both the planned count and the minimum floor must be reached.
        """
        return answered_count >= planned_question_count and answered_count >= minimum_floor

    @staticmethod
    def assess_quality(transcript: list[Message]) -> ConversationQuality:
        """
        Rate the candidate's answers.

        - responsiveness: share of the expected number of answers given
        - depth: average answer length relative to a detailed answer
        - engagement: engagement keywords per answer

        Returns:
            Scores in [0, 100]; all zero when there are no answers.
        """
        answers = [m.text for m in transcript if m.role == MessageRole.CANDIDATE]
        if not answers:
            return ConversationQuality()

        count = len(answers)
        average_length = sum(len(a) for a in answers) / count
        keyword_hits = sum(
            sum(1 for keyword in ENGAGEMENT_KEYWORDS if keyword in a.lower()) for a in answers
        )

        responsiveness = min(count / RESPONSIVE_TURNS, 1.0) * 100
        depth = min(average_length / DEEP_ANSWER_CHARS, 1.0) * 100
        engagement = min(keyword_hits / count * ENGAGEMENT_PER_HIT, 100.0)

        return ConversationQuality(
            score=round((responsiveness + depth + engagement) / 3),
            responsiveness=round(responsiveness),
            depth=round(depth),
            engagement=round(engagement),
        )
