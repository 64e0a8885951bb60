"""
Tests for the completion evaluator.
"""

from contextual_interviewer.agents.completion_evaluator import CompletionEvaluator
from contextual_interviewer.schemas import Message, MessageRole


def candidate(text: str) -> Message:
    return Message(role=MessageRole.CANDIDATE, text=text)


class TestIsComplete:
    """Tests for CompletionEvaluator.is_complete."""

    def test_below_planned_count(self) -> None:
        assert CompletionEvaluator.is_complete(7, 10) is False
        assert CompletionEvaluator.is_complete(8, 10) is False

    def test_planned_count_reached(self) -> None:
        assert CompletionEvaluator.is_complete(8, 8) is True
        assert CompletionEvaluator.is_complete(10, 10) is True

    def test_minimum_floor_applies(self) -> None:
        assert CompletionEvaluator.is_complete(5, 5) is False
        assert CompletionEvaluator.is_complete(5, 5, minimum_floor=5) is True


class TestAssessQuality:
    """Tests for CompletionEvaluator.assess_quality."""

    def test_no_answers(self) -> None:
        quality = CompletionEvaluator.assess_quality([Message(role=MessageRole.INTERVIEWER, text="Hi?")])

        assert quality.score == 0
        assert quality.responsiveness == 0
        assert quality.depth == 0
        assert quality.engagement == 0

    def test_scores(self) -> None:
        transcript = [
            candidate("For example, I implemented a scheduler." + "x" * 111),  # 150 chars, 2 keywords
            candidate("x" * 150),  # 0 keywords
        ]

        quality = CompletionEvaluator.assess_quality(transcript)

        assert quality.responsiveness == 25
        assert quality.depth == 100
        assert quality.engagement == 30
        assert quality.score == round((25 + 100 + 30) / 3)

    def test_engagement_is_capped(self) -> None:
        answer = "example instance experience project challenge learned implemented"

        quality = CompletionEvaluator.assess_quality([candidate(answer)] * 8)

        assert quality.responsiveness == 100
        assert quality.engagement == 100
