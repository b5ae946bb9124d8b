"""Configuration module for ollama-mobile using pydantic-settings."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ollama_mobile.models.generate import SamplingOptions

DEFAULT_SERVER_URL = "http://localhost:11434"
DEFAULT_TIMEOUT = 120.0
AVAILABILITY_TIMEOUT = 5.0

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def normalize_base_url(url: str) -> str:
    """Strip whitespace and trailing slashes from a server URL.

    Raises:
        ValueError: If nothing is left of the URL.
    """
    cleaned = url.strip().rstrip("/")
    if not cleaned:
        raise ValueError("Server URL cannot be empty")
    return cleaned


class ClientConfig(BaseModel):
    """Connection settings a ServerClient is constructed with.

    Attributes:
        base_url: Root address of the Ollama server
        timeout: Timeout in seconds for regular requests
        availability_timeout: Timeout in seconds for the liveness probe
    """

    base_url: str = DEFAULT_SERVER_URL
    timeout: float = DEFAULT_TIMEOUT
    availability_timeout: float = AVAILABILITY_TIMEOUT

    model_config = ConfigDict(frozen=True)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, value: str) -> str:
        return normalize_base_url(value)


class OllamaMobileSettings(BaseSettings):
    """Settings record for ollama-mobile.

    All settings can be overridden via environment variables with the
    OLLAMA_MOBILE_ prefix. For example, OLLAMA_MOBILE_SERVER_URL will override
    the server_url setting. Anything not set falls back to the defaults below.
    """

    # Server
    server_url: str = DEFAULT_SERVER_URL
    timeout: float = DEFAULT_TIMEOUT
    availability_timeout: float = AVAILABILITY_TIMEOUT

    # Chat
    default_model: str = "llama3.2"
    stream_response: bool = True

    # Sampling defaults
    temperature: float = 0.7
    top_p: float = 0.9
    top_k: int = 40
    repeat_penalty: float | None = None

    # Logging
    log_level: LogLevel = "WARNING"

    model_config = SettingsConfigDict(env_prefix="OLLAMA_MOBILE_")

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value

    def client_config(self) -> ClientConfig:
        """Build the ClientConfig for these settings."""
        return ClientConfig(
            base_url=self.server_url,
            timeout=self.timeout,
            availability_timeout=self.availability_timeout,
        )

    def sampling_options(self) -> SamplingOptions:
        """Get the default sampling options sent with chat and generate calls."""
        return SamplingOptions(
            temperature=self.temperature,
            top_p=self.top_p,
            top_k=self.top_k,
            repeat_penalty=self.repeat_penalty,
        )
