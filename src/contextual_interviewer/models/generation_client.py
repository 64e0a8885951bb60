"""
Generation client.

Wraps an LLM client with per-call timeouts, a bounded retry policy and
"repair-then-validate" parsing of the structured question payloads the
interviewer prompts ask for.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from pydantic import BaseModel, Field, ValidationError, field_validator

from contextual_interviewer.config import Settings, get_settings
from contextual_interviewer.models.json_repair import parse_json_object
from contextual_interviewer.models.llm_client import (
    BackendError,
    BackendMalformedResponse,
    GenerationOptions,
    LLMClientBase,
    OllamaClient,
)
from contextual_interviewer.schemas import Difficulty, QuestionCategory

logger = logging.getLogger(__name__)

T = TypeVar("T")

HEALTH_CHECK_PROMPT = 'Generate a simple JSON: {"status": "ready"}'


def _normalize_label(value: str) -> str:
    return value.strip().lower().replace("_", "-").replace(" ", "-")


def _strip_quotes(value: str) -> str:
    return value.strip().strip("\"'“”‘’").strip()


class RetryPolicy(BaseModel):
    """Bounded retry policy with a fixed backoff between attempts."""

    max_retries: int = Field(default=2, ge=0, description="Retries after the first attempt")
    backoff_seconds: float = Field(default=1.0, ge=0.0, description="Delay before each retry")

    @property
    def max_attempts(self) -> int:
        """Total number of attempts, first one included."""
        return self.max_retries + 1

    def delay_for(self, attempt: int) -> float:
        """Delay to wait after the given (1-based) failed attempt."""
        return self.backoff_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        return cls(
            max_retries=settings.llm_max_retries,
            backoff_seconds=settings.llm_retry_backoff,
        )


class QuestionCandidate(BaseModel):
    """A validated question payload returned by the backend."""

    text: str = Field(..., min_length=1)
    category: QuestionCategory
    difficulty: Difficulty = Difficulty.MEDIUM

    @field_validator("text", mode="before")
    @classmethod
    def _clean_text(cls, value: Any) -> Any:
        if isinstance(value, str):
            return _strip_quotes(value)
        return value

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, value: Any) -> Any:
        if isinstance(value, str):
            return _normalize_label(value)
        return value

    @field_validator("difficulty", mode="before")
    @classmethod
    def _coerce_difficulty(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = _normalize_label(value)
            if value in {d.value for d in Difficulty}:
                return value
        return Difficulty.MEDIUM


class FollowUpCandidate(BaseModel):
    """
    A follow-up payload returned by the backend.

    The human response and the follow-up question are recovered
    independently; either may be missing.
    """

    human_response: str | None = None
    question_text: str | None = None
    difficulty: Difficulty = Difficulty.MEDIUM


class GenerationClient:
    """
    Structured generation on top of an LLM client.

    Every structured call is retried on timeouts, transport failures and
    malformed output; after the last attempt the final error is raised so
    the caller can substitute a fallback.
    """

    def __init__(
        self,
        llm_client: LLMClientBase | None = None,
        retry_policy: RetryPolicy | None = None,
        options: GenerationOptions | None = None,
        settings: Settings | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """
        Initialize the generation client.

        Args:
            llm_client: Backend client. Creates an OllamaClient if None.
            retry_policy: Retry policy. Built from settings if None.
            options: Sampling options. Built from settings if None.
            settings: Application settings (uses cached settings if None).
            sleep: Coroutine used to wait between retries.
        """
        self._settings = settings or get_settings()
        self._llm_client = llm_client or OllamaClient(
            base_url=self._settings.ollama_url,
            model=self._settings.ollama_model,
        )
        self._retry_policy = retry_policy or RetryPolicy.from_settings(self._settings)
        self._options = options or GenerationOptions(
            temperature=self._settings.llm_temperature,
            num_predict=self._settings.llm_num_predict,
        )
        self._sleep = sleep

    @property
    def llm_client(self) -> LLMClientBase:
        """Get the underlying LLM client."""
        return self._llm_client

    @property
    def retry_policy(self) -> RetryPolicy:
        """Get the retry policy."""
        return self._retry_policy

    async def close(self) -> None:
        await self._llm_client.close()

    async def _with_retries(
        self,
        operation: str,
        attempt_once: Callable[[], Awaitable[T]],
    ) -> T:
        max_attempts = self._retry_policy.max_attempts
        attempt = 1

        while True:
            try:
                return await attempt_once()
            except BackendError as e:
                if attempt >= max_attempts:
                    logger.warning(f"{operation} failed after {max_attempts} attempts: {e}")
                    raise
                delay = self._retry_policy.delay_for(attempt)
                logger.warning(
                    f"{operation} attempt {attempt}/{max_attempts} failed: {e}. "
                    f"Retrying in {delay}s"
                )
                await self._sleep(delay)
            attempt += 1

    async def generate_question(self, prompt: str, timeout: float) -> QuestionCandidate:
        """
        Generate a single validated question.

        Args:
            prompt: Question prompt asking for ``{text, category, difficulty}``.
            timeout: Per-attempt timeout in seconds.

        Raises:
            BackendError: When every attempt failed.
        """

        async def attempt() -> QuestionCandidate:
            response = await self._llm_client.complete(prompt, timeout, self._options)
            return self.parse_question(response.content)

        return await self._with_retries("Question generation", attempt)

    async def generate_follow_up(self, prompt: str, timeout: float) -> FollowUpCandidate:
        """
        Generate a follow-up response and question.

        Raises:
            BackendError: When every attempt failed.
        """

        async def attempt() -> FollowUpCandidate:
            response = await self._llm_client.complete(prompt, timeout, self._options)
            return self.parse_follow_up(response.content)

        return await self._with_retries("Follow-up generation", attempt)

    async def generate_text(
        self,
        prompt: str,
        timeout: float,
        options: GenerationOptions | None = None,
    ) -> str:
        """Generate free text with a single attempt and no retries."""
        response = await self._llm_client.complete(prompt, timeout, options or self._options)
        return response.content

    async def health_check(self, deep: bool | None = None) -> bool:
        """
        Check that the backend is reachable and, optionally, generating.

        Args:
            deep: Also run a tiny test generation (uses config if None).

        Returns:
            True if the backend is usable. Never raises.
        """
        if not await self._llm_client.health_check(self._settings.health_check_timeout):
            return False

        if deep is None:
            deep = self._settings.health_check_generation
        if not deep:
            return True

        try:
            text = await self._llm_client.complete(
                HEALTH_CHECK_PROMPT,
                self._settings.health_check_generation_timeout,
                GenerationOptions(temperature=0.1, num_predict=20),
            )
        except BackendError as e:
            logger.warning(f"Backend test generation failed: {e}")
            return False

        return bool(text.content.strip())

    @staticmethod
    def parse_question(raw: str) -> QuestionCandidate:
        """
        Repair and validate a question payload.

        Raises:
            BackendMalformedResponse: With the reason the payload was rejected.
        """
        data = parse_json_object(raw)
        if data is None:
            logger.debug(f"Raw question output: {raw[:200]}")
            raise BackendMalformedResponse("No JSON object in question output")

        try:
            return QuestionCandidate.model_validate(data)
        except ValidationError as e:
            reasons = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'payload'}: {err['msg']}"
                for err in e.errors()
            )
            raise BackendMalformedResponse(f"Invalid question payload ({reasons})") from e

    @staticmethod
    def parse_follow_up(raw: str) -> FollowUpCandidate:
        """
        Repair a follow-up payload of shape
        ``{"humanResponse": ..., "followUpQuestion": {"text": ...}}``.

        Raises:
            BackendMalformedResponse: If neither part can be recovered.
        """
        data = parse_json_object(raw)
        if data is None:
            logger.debug(f"Raw follow-up output: {raw[:200]}")
            raise BackendMalformedResponse("No JSON object in follow-up output")

        human = data.get("humanResponse")
        human_response = _strip_quotes(human) if isinstance(human, str) else ""

        follow = data.get("followUpQuestion")
        question_text = ""
        difficulty: Any = None
        if isinstance(follow, dict):
            text = follow.get("text")
            question_text = _strip_quotes(text) if isinstance(text, str) else ""
            difficulty = follow.get("difficulty")
        elif isinstance(follow, str):
            question_text = _strip_quotes(follow)

        if not human_response and not question_text:
            raise BackendMalformedResponse("Follow-up output has neither response nor question")

        if isinstance(difficulty, str) and _normalize_label(difficulty) in {d.value for d in Difficulty}:
            resolved = Difficulty(_normalize_label(difficulty))
        else:
            resolved = Difficulty.MEDIUM

        return FollowUpCandidate(
            human_response=human_response or None,
            question_text=question_text or None,
            difficulty=resolved,
        )
