"""
Prompt composer.

Chooses the focus of the next question from interview progress and topic
coverage, and builds the prompts sent to the generation backend.
"""

import logging

from pydantic import BaseModel, ConfigDict, Field

from contextual_interviewer.schemas import (
    ConversationContext,
    Difficulty,
    MessageRole,
    QuestionCategory,
)

logger = logging.getLogger(__name__)

RECENT_TURNS = 6
MAX_ANSWER_CHARS_IN_ACK_PROMPT = 200

CORE_SKILLS_FOCUS = "core skills"
ADVANCED_CONCEPTS_FOCUS = "advanced concepts"
LEADERSHIP_FOCUS = "leadership and decision making"


class QuestionFocus(BaseModel):
    """What the next question should be about."""

    model_config = ConfigDict(frozen=True)

    category: QuestionCategory = Field(..., description="Required question category")
    difficulty: Difficulty = Field(default=Difficulty.MEDIUM, description="Target difficulty")
    focus_area: str | None = Field(default=None, description="Free-text focus hint")
    target_skill: str | None = Field(default=None, description="Skill the question should probe")
    target_project: str | None = Field(default=None, description="Project the question should probe")


def referenced_items(items: list[str], question_texts: list[str]) -> set[str]:
    """
    Return the items mentioned in any of the question texts.

    Matching is a case-insensitive substring test, so it only approximates
    what was actually discussed.
    """
    lowered = [text.lower() for text in question_texts]
    return {item for item in items if item and any(item.lower() in text for text in lowered)}


def unreferenced_items(items: list[str], question_texts: list[str]) -> list[str]:
    """Items not mentioned in any question text, in their original order."""
    covered = referenced_items(items, question_texts)
    return [item for item in items if item and item not in covered]


class PromptComposer:
    """
    Builds question, follow-up and acknowledgment prompts.

    The question prompt combines a profile excerpt, the recent transcript,
    the target category and difficulty, and the output constraints.
    """

    QUESTION_PROMPT = """You are a professional, conversational interviewer conducting a {domain} interview. Be natural and human-like, not robotic.

{context}

Generate the next question ({question_number}/{total_questions}).

Target:
- Category: {category}
- Difficulty: {difficulty}
- Focus: {focus}

Requirements:
- Ask exactly ONE question
- The category must be "{category}"
- Consider the conversation flow and the candidate's previous answers
- Do not repeat skills or projects already covered: {covered}
- Make the question relevant to their background

Return JSON with this exact format:
{{
    "text": "<your natural, conversational interview question>",
    "category": "{category}",
    "difficulty": "{difficulty}"
}}

Only return valid JSON."""

    FOLLOW_UP_PROMPT = """You are a professional, conversational interviewer. Based on the following conversation context and the candidate's latest response, generate a natural follow-up question and a brief human-like acknowledgment.

{context}

Candidate's latest response: "{answer}"

Return JSON with exactly this format:
{{
    "humanResponse": "<brief, natural acknowledgment such as 'That's interesting' or 'I see'>",
    "followUpQuestion": {{
        "text": "<a natural follow-up question that digs deeper or asks for clarification>",
        "category": "follow-up",
        "difficulty": "medium"
    }}
}}

Only return valid JSON."""

    ACKNOWLEDGMENT_PROMPT = """Generate a brief, natural human acknowledgment (1-5 words) for this response: "{answer}"

Examples: "That's great", "I see", "Interesting", "Good point", "Makes sense", "Absolutely", "Right", "Fair enough"

Response:"""

    def determine_focus(
        self,
        context: ConversationContext,
        question_number: int,
        total_questions: int,
    ) -> QuestionFocus:
        """
        Determine the focus of the next question.

        Args:
            context: Current conversation context.
            question_number: Zero-based index of the question to generate.
            total_questions: Planned question count.

        Returns:
            Category, difficulty and target of the next question.
        """
        if question_number == 0:
            return QuestionFocus(category=QuestionCategory.INTRODUCTION, difficulty=Difficulty.EASY)

        profile = context.candidate_profile
        asked = context.interviewer_messages
        asked_texts = [m.text for m in asked]
        asked_categories = {m.category for m in asked if m.category is not None}
        progress = question_number / total_questions if total_questions > 0 else 1.0

        if progress < 0.3:
            return QuestionFocus(
                category=QuestionCategory.TECHNICAL,
                difficulty=Difficulty.EASY,
                focus_area=CORE_SKILLS_FOCUS,
                target_skill=self._next_skill(profile.skills, asked_texts, question_number),
            )

        if progress < 0.6:
            open_projects = unreferenced_items(profile.projects, asked_texts)
            if open_projects or QuestionCategory.PROJECT_SPECIFIC not in asked_categories:
                target = open_projects[0] if open_projects else (profile.projects[0] if profile.projects else None)
                return QuestionFocus(
                    category=QuestionCategory.PROJECT_SPECIFIC,
                    difficulty=Difficulty.MEDIUM,
                    target_project=target,
                )
            return QuestionFocus(
                category=QuestionCategory.TECHNICAL,
                difficulty=Difficulty.MEDIUM,
                focus_area=ADVANCED_CONCEPTS_FOCUS,
                target_skill=self._next_skill(profile.skills, asked_texts, question_number),
            )

        if progress < 0.8:
            if QuestionCategory.BEHAVIORAL not in asked_categories:
                return QuestionFocus(category=QuestionCategory.BEHAVIORAL, difficulty=Difficulty.MEDIUM)
            return QuestionFocus(category=QuestionCategory.PROBLEM_SOLVING, difficulty=Difficulty.MEDIUM)

        return QuestionFocus(
            category=QuestionCategory.SITUATIONAL,
            difficulty=Difficulty.HARD,
            focus_area=LEADERSHIP_FOCUS,
        )

    @staticmethod
    def _next_skill(skills: list[str], asked_texts: list[str], question_number: int) -> str | None:
        """First skill not yet referenced, cycling through skills once all are."""
        if not skills:
            return None
        open_skills = unreferenced_items(skills, asked_texts)
        if open_skills:
            return open_skills[0]
        return skills[question_number % len(skills)]

    def render_context(self, context: ConversationContext, max_turns: int = RECENT_TURNS) -> str:
        """Render the profile excerpt and the most recent transcript turns."""
        profile = context.candidate_profile
        lines = [
            "Interview Context:",
            f"- Role: {context.interview_focus}",
            f"- Domain: {profile.domain}",
            f"- Candidate experience level: {profile.experience_level}",
            f"- Key skills: {', '.join(profile.skills) or 'None listed'}",
            f"- Projects: {', '.join(profile.projects) or 'None listed'}",
            f"- Work experience: {'; '.join(profile.work_experience) or 'None listed'}",
            f"- Achievements: {'; '.join(profile.achievements) or 'None listed'}",
            f"- Current topic: {context.current_topic}",
            f"- Topics covered: {', '.join(context.topic_history) or 'None yet'}",
            f"- Questions asked: {context.questions_asked}/{context.max_questions}",
            f"- Interview style: {context.interview_style}",
            "",
            "Recent conversation:",
        ]

        recent = context.transcript[-max_turns:] if max_turns > 0 else []
        if not recent:
            lines.append("(Interview just started)")
        for message in recent:
            speaker = "Interviewer" if message.role == MessageRole.INTERVIEWER else "Candidate"
            lines.append(f"{speaker}: {message.text}")

        return "\n".join(lines)

    def compose_question_prompt(
        self,
        focus: QuestionFocus,
        context: ConversationContext,
        question_number: int,
        total_questions: int,
    ) -> str:
        """Build the prompt for the next main question."""
        profile = context.candidate_profile
        asked_texts = [m.text for m in context.interviewer_messages]
        covered = sorted(referenced_items(profile.skills + profile.projects, asked_texts))

        if focus.target_skill:
            focus_text = f"the candidate's experience with {focus.target_skill}"
        elif focus.target_project:
            focus_text = f"the candidate's project {focus.target_project}"
        else:
            focus_text = focus.focus_area or focus.category.value

        prompt = self.QUESTION_PROMPT.format(
            domain=profile.domain,
            context=self.render_context(context),
            question_number=question_number + 1,
            total_questions=total_questions,
            category=focus.category.value,
            difficulty=focus.difficulty.value,
            focus=focus_text,
            covered=", ".join(covered) or "nothing yet",
        )
        logger.debug(f"Composed question prompt ({len(prompt)} chars) for {focus.category.value}")
        return prompt

    def compose_follow_up_prompt(self, context: ConversationContext, answer: str) -> str:
        """Build the prompt for a follow-up question on the latest answer."""
        return self.FOLLOW_UP_PROMPT.format(
            context=self.render_context(context),
            answer=answer.strip(),
        )

    def compose_acknowledgment_prompt(self, answer: str) -> str:
        """Build the prompt for a 1-5 word acknowledgment of an answer."""
        return self.ACKNOWLEDGMENT_PROMPT.format(
            answer=answer.strip()[:MAX_ANSWER_CHARS_IN_ACK_PROMPT],
        )
