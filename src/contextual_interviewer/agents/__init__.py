"""
Agents module containing specialized interview agents.

Each agent handles a specific aspect of the interview process.
"""

from contextual_interviewer.agents.completion_evaluator import CompletionEvaluator
from contextual_interviewer.agents.flow_monitor import FlowAnalysis, FlowMonitor
from contextual_interviewer.agents.follow_up_classifier import FollowUpClassifier
from contextual_interviewer.agents.prompt_composer import PromptComposer, QuestionFocus
from contextual_interviewer.agents.question_generator import QuestionGenerator, fallback_question
from contextual_interviewer.agents.question_planner import QuestionPlanner, QuestionPlannerBase

__all__ = [
    "CompletionEvaluator",
    "FlowAnalysis",
    "FlowMonitor",
    "FollowUpClassifier",
    "PromptComposer",
    "QuestionFocus",
    "QuestionGenerator",
    "QuestionPlanner",
    "QuestionPlannerBase",
    "fallback_question",
]
