"""
Central application configuration using pydantic-settings.

This module provides typed access to environment-based configuration for:
- Match rules and host timings (prefix TYCOON_)
- LLM decision providers (prefix LLM_)
- The relay server (prefix RELAY_)
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GameSettings(BaseSettings):
    """
    Match defaults read from the environment.

    Environment variables (prefix: TYCOON_):
        TYCOON_STARTING_CASH             - Cash dealt to each player (default: 1500)
        TYCOON_GO_SALARY                 - Pass-start bonus (default: 200)
        TYCOON_BAIL_FEE                  - Jail bail fee (default: 50)
        TYCOON_CARD_REVEAL_DELAY_SECONDS - Card display time before it applies (default: 2.0)
        TYCOON_AUTOMATION_DELAY_SECONDS  - Pause between automated actions (default: 1.0)
        TYCOON_SEED                      - Optional RNG seed for reproducible games
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="TYCOON_",
    )

    starting_cash: int = Field(default=1500, gt=0)
    go_salary: int = Field(default=200, ge=0)
    bail_fee: int = Field(default=50, ge=0)
    card_reveal_delay_seconds: float = Field(
        default=2.0,
        ge=0,
        description="Seconds a drawn card is displayed before its effect is applied.",
    )
    automation_delay_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Pause between consecutive automated seat actions.",
    )
    seed: Optional[int] = Field(default=None, description="Seed for dice and card draws.")


class LLMProvider(str, Enum):
    """Supported LLM backends."""

    OLLAMA = "ollama"
    VLLM = "vllm"
    OPENAI = "openai"
    CUSTOM = "custom"


class LLMSettings(BaseSettings):
    """
    Configuration for the LLM decision provider.

    Environment variables (prefix: LLM_):
        LLM_PROVIDER       - ollama | vllm | openai | custom (default: ollama)
        LLM_BASE_URL       - Base URL for OpenAI-compatible API
        LLM_MODEL          - Model name or identifier
        LLM_API_KEY        - Optional API key for authenticated providers
        LLM_TIMEOUT_SECONDS- Request timeout in seconds (default: 30)
        LLM_MAX_TOKENS     - Max response tokens (default: 256)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="LLM_",
    )

    provider: LLMProvider = Field(default=LLMProvider.OLLAMA)
    base_url: Optional[str] = Field(
        default=None,
        description="Base URL for OpenAI-compatible API, e.g. http://localhost:11434/v1.",
    )
    model: str = Field(default="gemma3:4b")
    api_key: Optional[SecretStr] = Field(default=None)
    timeout_seconds: float = Field(default=30.0, gt=0)
    max_tokens: int = Field(default=256, gt=0)

    @field_validator("base_url", mode="before")
    @classmethod
    def default_base_url(cls, value: Optional[str], info):
        """
        Provide defaults for base_url depending on the provider.

        - ollama -> http://localhost:11434/v1
        - vllm   -> http://localhost:8000/v1
        - openai/custom -> must be provided explicitly
        """
        if value:
            return value

        provider = info.data.get("provider", LLMProvider.OLLAMA)
        if isinstance(provider, str):
            try:
                provider = LLMProvider(provider)
            except ValueError:
                provider = LLMProvider.OLLAMA

        if provider == LLMProvider.OLLAMA:
            return "http://localhost:11434/v1"
        if provider == LLMProvider.VLLM:
            return "http://localhost:8000/v1"
        return value


class ServerSettings(BaseSettings):
    """
    Relay server options.

    Environment variables (prefix: RELAY_):
        RELAY_HOST      - Bind address (default: 127.0.0.1)
        RELAY_PORT      - Bind port (default: 8000)
        RELAY_LOG_LEVEL - Root logging level (default: INFO)
        RELAY_USE_LLM   - Drive automated seats with the LLM provider (default: false)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="RELAY_",
    )

    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000, gt=0, lt=65536)
    log_level: str = Field(default="INFO")
    use_llm: bool = Field(default=False)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: Optional[str]) -> str:
        return (value or "INFO").upper()


@lru_cache
def get_game_settings() -> GameSettings:
    """Return cached game settings instance."""
    return GameSettings()


@lru_cache
def get_llm_settings() -> LLMSettings:
    """Return cached LLM settings instance."""
    return LLMSettings()


@lru_cache
def get_server_settings() -> ServerSettings:
    """Return cached server settings instance."""
    return ServerSettings()
