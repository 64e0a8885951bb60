"""
Models module for the text-generation backend.

Provides the Ollama client, JSON repair helpers and the retrying
structured generation client.
"""

from contextual_interviewer.models.generation_client import (
    FollowUpCandidate,
    GenerationClient,
    QuestionCandidate,
    RetryPolicy,
)
from contextual_interviewer.models.json_repair import parse_json_loose, parse_json_object
from contextual_interviewer.models.llm_client import (
    DEFAULT_OLLAMA_MODEL,
    BackendError,
    BackendMalformedResponse,
    BackendTimeout,
    BackendUnavailable,
    GenerationOptions,
    LLMClientBase,
    LLMResponse,
    OllamaClient,
)

__all__ = [
    "BackendError",
    "BackendMalformedResponse",
    "BackendTimeout",
    "BackendUnavailable",
    "DEFAULT_OLLAMA_MODEL",
    "FollowUpCandidate",
    "GenerationClient",
    "GenerationOptions",
    "LLMClientBase",
    "LLMResponse",
    "OllamaClient",
    "QuestionCandidate",
    "RetryPolicy",
    "parse_json_loose",
    "parse_json_object",
]
