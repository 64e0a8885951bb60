"""
Conversation flow monitor.

Detects when the candidate drifts into off-topic subjects so the
interviewer can steer back to the interview.
"""

import logging
import re

from pydantic import BaseModel, Field

from contextual_interviewer.schemas import Message, MessageRole

logger = logging.getLogger(__name__)

RECENT_CANDIDATE_TURNS = 2

OFF_TOPIC_KEYWORDS: dict[str, list[str]] = {
    "personal-life": ["personal life", "family", "hobbies", "weekend", "vacation"],
    "politics": ["politics", "religion"],
    "entertainment": ["sports", "weather", "gossip"],
}

_CATEGORY_PATTERNS = {
    category: re.compile(
        r"\b(?:" + "|".join(re.escape(k) for k in keywords) + r")\b",
        re.IGNORECASE,
    )
    for category, keywords in OFF_TOPIC_KEYWORDS.items()
}


class FlowAnalysis(BaseModel):
    """Result of a flow analysis."""

    is_on_track: bool = Field(default=True)
    needs_redirection: bool = Field(default=False)
    matched_categories: list[str] = Field(default_factory=list)


class FlowMonitor:
    """Keyword-based off-topic detector over the latest candidate turns."""

    def analyze(self, transcript: list[Message]) -> FlowAnalysis:
        """
        Analyze the conversation flow.

        Args:
            transcript: Conversation transcript in order.

        Returns:
            Whether the conversation is on track and which off-topic
            categories were matched.
        """
        if len(transcript) < 2:
            return FlowAnalysis()

        candidate_turns = [m for m in transcript if m.role == MessageRole.CANDIDATE]
        recent = candidate_turns[-RECENT_CANDIDATE_TURNS:]

        matched = [
            category
            for category, pattern in _CATEGORY_PATTERNS.items()
            if any(pattern.search(m.text) for m in recent)
        ]
        if not matched:
            return FlowAnalysis()

        logger.info(f"Off-topic drift detected: {', '.join(matched)}")
        return FlowAnalysis(
            is_on_track=False,
            needs_redirection=True,
            matched_categories=matched,
        )
