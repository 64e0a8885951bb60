"""
LLM client abstraction.

Provides a unified interface for talking to the text-generation backend.
The default implementation calls a local Ollama server over its HTTP API.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx
from pydantic import BaseModel, Field

from contextual_interviewer.config import get_settings

logger = logging.getLogger(__name__)

# Default model for Ollama
DEFAULT_OLLAMA_MODEL = "gemma3"


class BackendError(Exception):
    """Exception raised when the generation backend fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BackendUnavailable(BackendError):
    """The backend failed its pre-flight health check."""


class BackendTimeout(BackendError):
    """A generation request exceeded its timeout."""


class BackendMalformedResponse(BackendError):
    """The backend replied, but the reply could not be used."""


class GenerationOptions(BaseModel):
    """Sampling parameters sent with each generation request."""

    temperature: float = Field(default=0.7, description="Sampling temperature")
    top_p: float | None = Field(default=0.9, description="Top-p sampling parameter")
    top_k: int | None = Field(default=40, description="Top-k sampling parameter")
    num_predict: int | None = Field(default=300, description="Maximum tokens to generate")
    num_ctx: int | None = Field(default=None, description="Context window size")
    repeat_penalty: float | None = Field(default=None, description="Repetition penalty")
    stop: list[str] = Field(default_factory=list, description="Stop sequences")

    def to_ollama(self) -> dict[str, Any]:
        """Render as the ``options`` object of an Ollama request."""
        options = self.model_dump(exclude_none=True)
        if not options.get("stop"):
            options.pop("stop", None)
        return options


class LLMResponse(BaseModel):
    """Response from an LLM."""

    content: str = Field(..., description="Generated text content")
    finish_reason: str = Field(default="stop", description="Reason for completion")
    usage: dict[str, int] = Field(
        default_factory=dict,
        description="Token usage information",
    )
    model: str = Field(default="", description="Model used for generation")
    raw_response: dict[str, Any] = Field(
        default_factory=dict,
        description="Raw response from the API",
    )


class LLMClientBase(ABC):
    """Abstract base class for LLM clients."""

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        timeout: float,
        options: GenerationOptions | None = None,
    ) -> LLMResponse:
        """
        Generate a text completion with a single request.

        Args:
            prompt: Input prompt.
            timeout: Total time allowed for the request, in seconds.
            options: Sampling parameters.

        Returns:
            Generated response.

        Raises:
            BackendTimeout: If the request exceeded its timeout.
            BackendMalformedResponse: If the reply carries no text.
            BackendError: On any other transport or HTTP failure.
        """
        ...

    @abstractmethod
    async def health_check(self, timeout: float = 5.0) -> bool:
        """
        Check whether the backend is reachable.

        Returns:
            True if the backend answered successfully.
        """
        ...

    async def close(self) -> None:
        """Close the client and release resources."""
        return None


class OllamaClient(LLMClientBase):
    """
    Ollama-based LLM client.

    Issues non-streaming requests to ``/api/generate`` and probes
    availability through ``/api/tags``.
    """

    def __init__(
        self,
        base_url: str | None = None,
        model: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the Ollama client.

        Args:
            base_url: Ollama server URL (uses config if not provided).
            model: Model name (uses config if not provided).
            transport: Optional httpx transport, used by tests.
        """
        settings = get_settings()
        self._base_url = (base_url or settings.ollama_url).rstrip("/")
        self._model = model or settings.ollama_model or DEFAULT_OLLAMA_MODEL
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

        logger.info(f"Initialized Ollama client for {self._base_url} with model: {self._model}")

    @property
    def model(self) -> str:
        """Get the model name."""
        return self._model

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def complete(
        self,
        prompt: str,
        timeout: float,
        options: GenerationOptions | None = None,
    ) -> LLMResponse:
        options = options or GenerationOptions()
        payload = {
            "model": self._model,
            "prompt": prompt,
            "stream": False,
            "options": options.to_ollama(),
        }

        logger.debug(f"Querying Ollama with timeout {timeout}s, prompt length {len(prompt)} chars")
        client = self._get_client()
        try:
            response = await asyncio.wait_for(
                client.post("/api/generate", json=payload, timeout=timeout),
                timeout=timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise BackendTimeout(f"Request timed out after {timeout}s") from e
        except httpx.HTTPError as e:
            raise BackendError(f"Ollama request failed: {e}") from e

        if response.status_code != 200:
            raise BackendError(
                f"Ollama returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise BackendMalformedResponse("Ollama returned a non-JSON body") from e

        text = data.get("response") if isinstance(data, dict) else None
        if not isinstance(text, str):
            raise BackendMalformedResponse("Ollama response has no 'response' text")

        usage = {
            key: int(data[key])
            for key in ("prompt_eval_count", "eval_count")
            if isinstance(data.get(key), int)
        }
        logger.debug(f"Ollama response length: {len(text)} chars")

        return LLMResponse(
            content=text.strip(),
            finish_reason=str(data.get("done_reason") or "stop"),
            usage=usage,
            model=str(data.get("model") or self._model),
            raw_response=data,
        )

    async def health_check(self, timeout: float = 5.0) -> bool:
        try:
            response = await self._get_client().get("/api/tags", timeout=timeout)
        except httpx.HTTPError as e:
            logger.warning(f"Ollama health check failed: {e}")
            return False
        if response.status_code != 200:
            logger.warning(f"Ollama health check returned HTTP {response.status_code}")
            return False
        return True
