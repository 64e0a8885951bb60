"""
Application configuration using pydantic-settings.

Loads configuration from environment variables and .env files.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Generation backend (Ollama HTTP API)
    ollama_url: str = Field(
        default="http://localhost:11434",
        description="Base URL of the Ollama server",
    )
    ollama_model: str = Field(
        default="gemma3",
        description="Ollama model name used for question generation",
    )
    llm_temperature: float = Field(
        default=0.7,
        description="Sampling temperature for generation requests",
    )
    llm_num_predict: int = Field(
        default=300,
        description="Maximum tokens the backend may generate per request",
    )

    # Per-call timeouts (seconds)
    first_question_timeout: float = Field(
        default=45.0,
        description="Timeout for the first question (covers backend cold start)",
    )
    question_timeout: float = Field(
        default=25.0,
        description="Timeout for subsequent main questions",
    )
    follow_up_timeout: float = Field(
        default=20.0,
        description="Timeout for follow-up question generation",
    )
    acknowledgment_timeout: float = Field(
        default=8.0,
        description="Timeout for short acknowledgment generation",
    )
    health_check_timeout: float = Field(
        default=5.0,
        description="Timeout for the backend availability probe",
    )
    health_check_generation_timeout: float = Field(
        default=15.0,
        description="Timeout for the test generation issued by the health check",
    )
    health_check_generation: bool = Field(
        default=True,
        description="Whether the health check also runs a tiny test generation",
    )

    # Retry policy
    llm_max_retries: int = Field(
        default=2,
        ge=0,
        description="Number of retries on generation failure",
    )
    llm_retry_backoff: float = Field(
        default=1.0,
        ge=0.0,
        description="Fixed delay in seconds between generation retries",
    )

    # Conversation store
    redis_url: str | None = Field(
        default=None,
        description="Redis connection URL; in-memory store is used when unset",
    )
    session_ttl_seconds: int = Field(
        default=3600,
        gt=0,
        description="TTL of a conversation context, refreshed on every write",
    )

    # Interview flow
    minimum_answers: int = Field(
        default=8,
        ge=0,
        description="Minimum number of answers before an interview may complete",
    )
    followup_sample_rate: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Probability of probing a technical answer lacking implementation detail",
    )
    generate_acknowledgments: bool = Field(
        default=True,
        description="Ask the backend for a short acknowledgment before each main question",
    )

    # Application
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application settings instance.
    """
    return Settings()
