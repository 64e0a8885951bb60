"""
Follow-up classifier.

Decides whether the latest answer deserves a probing follow-up instead of
moving on to the next planned question.
"""

import logging
import random
import re

from contextual_interviewer.schemas import QuestionCategory

logger = logging.getLogger(__name__)

BRIEF_ANSWER_CHARS = 100
DEFAULT_SAMPLE_RATE = 0.3

SPECIFIC_EXAMPLE_RE = re.compile(r"example|instance|time when|situation where", re.IGNORECASE)
TECHNICAL_DETAIL_RE = re.compile(r"implement|code|algorithm|design|architecture", re.IGNORECASE)


class FollowUpClassifier:
    """
    Heuristic follow-up classifier.

    An answer is probed when it is brief, when a behavioral answer offers no
    concrete example, or (sampled) when a technical answer has no
    implementation detail.
    """

    def __init__(
        self,
        sample_rate: float = DEFAULT_SAMPLE_RATE,
        rng: random.Random | None = None,
    ) -> None:
        """
        Initialize the classifier.

        Args:
            sample_rate: Probability of probing a technical answer that lacks detail.
            rng: Random source for the sampling gate.
        """
        if not 0.0 <= sample_rate <= 1.0:
            raise ValueError("sample_rate must be between 0 and 1")
        self._sample_rate = sample_rate
        self._rng = rng or random.Random()

    def should_follow_up(self, answer: str, last_category: QuestionCategory | None) -> bool:
        """
        Decide whether to follow up on an answer.

        Args:
            answer: Candidate's latest answer.
            last_category: Category of the question it answered, or None if
                no question was asked yet.

        Returns:
            True if a follow-up question should be asked.
        """
        if last_category is None:
            return False

        if len(answer.strip()) < BRIEF_ANSWER_CHARS:
            logger.debug("Follow-up: answer is brief")
            return True

        if last_category == QuestionCategory.BEHAVIORAL and not SPECIFIC_EXAMPLE_RE.search(answer):
            logger.debug("Follow-up: behavioral answer without a specific example")
            return True

        if last_category == QuestionCategory.TECHNICAL and not TECHNICAL_DETAIL_RE.search(answer):
            if self._rng.random() < self._sample_rate:
                logger.debug("Follow-up: technical answer without implementation detail (sampled)")
                return True

        return False
