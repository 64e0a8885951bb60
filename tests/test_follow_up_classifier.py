"""
Tests for the follow-up classifier.
"""

import pytest

from contextual_interviewer.agents.follow_up_classifier import FollowUpClassifier
from contextual_interviewer.schemas import QuestionCategory

LONG_PADDING = " I worked on this with a small team over several months and shipped it to production."


class FixedRandom:
    """Random source returning a fixed value."""

    def __init__(self, value: float) -> None:
        self.value = value

    def random(self) -> float:
        return self.value


class TestFollowUpClassifier:
    """Tests for FollowUpClassifier.should_follow_up."""

    @pytest.fixture
    def classifier(self) -> FollowUpClassifier:
        return FollowUpClassifier(sample_rate=0.3, rng=FixedRandom(0.99))

    def test_no_previous_question(self, classifier: FollowUpClassifier) -> None:
        assert classifier.should_follow_up("Short.", None) is False

    def test_brief_answer(self, classifier: FollowUpClassifier) -> None:
        assert classifier.should_follow_up("I like Python a lot.", QuestionCategory.INTRODUCTION) is True

    def test_brief_answer_is_measured_after_stripping(self, classifier: FollowUpClassifier) -> None:
        answer = "   " + "x" * 99 + "   "

        assert classifier.should_follow_up(answer, QuestionCategory.INTRODUCTION) is True

    def test_behavioral_answer_without_example(self, classifier: FollowUpClassifier) -> None:
        answer = "I generally try to stay calm and communicate clearly with everyone." + LONG_PADDING

        assert classifier.should_follow_up(answer, QuestionCategory.BEHAVIORAL) is True

    def test_behavioral_answer_with_example(self, classifier: FollowUpClassifier) -> None:
        answer = "There was a time when our release slipped and I had to renegotiate scope." + LONG_PADDING

        assert classifier.should_follow_up(answer, QuestionCategory.BEHAVIORAL) is False

    def test_technical_answer_without_detail_is_sampled(self) -> None:
        answer = "I have used Python for many years and I really enjoy working with it daily." + LONG_PADDING

        probing = FollowUpClassifier(sample_rate=0.3, rng=FixedRandom(0.1))
        skipping = FollowUpClassifier(sample_rate=0.3, rng=FixedRandom(0.5))

        assert probing.should_follow_up(answer, QuestionCategory.TECHNICAL) is True
        assert skipping.should_follow_up(answer, QuestionCategory.TECHNICAL) is False

    def test_technical_answer_with_detail(self) -> None:
        answer = "I implemented a caching layer and reworked the architecture of the ingestion service." + LONG_PADDING
        classifier = FollowUpClassifier(sample_rate=1.0, rng=FixedRandom(0.0))

        assert classifier.should_follow_up(answer, QuestionCategory.TECHNICAL) is False

    def test_invalid_sample_rate(self) -> None:
        with pytest.raises(ValueError):
            FollowUpClassifier(sample_rate=1.5)
