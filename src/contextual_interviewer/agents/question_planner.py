"""
Question planner agent.

Decides how many questions an interview should contain, based on how much
material the candidate profile offers.
"""

import logging
from abc import ABC, abstractmethod

from contextual_interviewer.schemas import CandidateProfile

logger = logging.getLogger(__name__)

BASE_QUESTIONS = 8
MAX_PROJECT_BONUS = 3
EXPERIENCE_BONUS = 2
SKILLS_PER_BONUS = 3
MAX_SKILL_BONUS = 3
MIN_QUESTIONS = 10
MAX_QUESTIONS = 15


class QuestionPlannerBase(ABC):
    """Abstract base class for question planners."""

    @abstractmethod
    def plan(self, profile: CandidateProfile) -> int:
        """
        Plan the number of questions for an interview.

        Args:
            profile: Candidate profile.

        Returns:
            Planned question count.
        """
        ...


class QuestionPlanner(QuestionPlannerBase):
    """
    Rule-based question planner.

    Starts from a base count and adds bonuses for projects, work experience
    and breadth of skills, clamped to a fixed range.
    """

    def __init__(
        self,
        min_questions: int = MIN_QUESTIONS,
        max_questions: int = MAX_QUESTIONS,
    ) -> None:
        if min_questions > max_questions:
            raise ValueError("min_questions must not exceed max_questions")
        self._min_questions = min_questions
        self._max_questions = max_questions

    def plan(self, profile: CandidateProfile) -> int:
        project_bonus = min(len(profile.projects), MAX_PROJECT_BONUS)
        experience_bonus = EXPERIENCE_BONUS if profile.work_experience else 0
        skill_bonus = min(len(profile.skills) // SKILLS_PER_BONUS, MAX_SKILL_BONUS)

        total = BASE_QUESTIONS + project_bonus + experience_bonus + skill_bonus
        planned = max(self._min_questions, min(total, self._max_questions))

        logger.debug(
            f"Planned {planned} questions (base={BASE_QUESTIONS}, projects=+{project_bonus}, "
            f"experience=+{experience_bonus}, skills=+{skill_bonus})"
        )
        return planned
