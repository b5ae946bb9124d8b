"""Pydantic models for the model management endpoints.

This module contains the response schemas for /api/tags and /api/pull.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

SIZE_UNITS = ("B", "KB", "MB", "GB")


def format_size(size: str) -> str:
    """Format a byte count for display.

    Args:
        size: Byte count as a decimal string

    Returns:
        str: Size with one decimal in the largest unit up to GB
             (e.g. "4.3 GB"), or the input unchanged if it is not a number
    """
    try:
        value = float(int(size))
    except (TypeError, ValueError):
        return size

    unit_index = 0
    while value >= 1024 and unit_index < len(SIZE_UNITS) - 1:
        value /= 1024
        unit_index += 1

    return f"{value:.1f} {SIZE_UNITS[unit_index]}"


class ModelDetails(BaseModel):
    """Format and architecture details of a model.

    Attributes:
        format: Model format (e.g., "gguf")
        family: Model family (e.g., "llama")
        families: All families the model belongs to
        parameter_size: Human-readable parameter count (e.g., "3.2B")
        quantization_level: Quantization level (e.g., "Q4_K_M")
    """

    format: str = ""
    family: str = ""
    families: list[str] = Field(default_factory=list)
    parameter_size: str = ""
    quantization_level: str = ""

    model_config = ConfigDict(frozen=True)

    @field_validator("families", mode="before")
    @classmethod
    def none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class ModelDescriptor(BaseModel):
    """A model installed on the server, as reported by /api/tags.

    Attributes:
        name: Full model name (e.g., "llama3.2:latest")
        size: Size on disk in bytes, as a decimal string
        digest: Content digest
        modified_at: Last modification timestamp
        details: Format and architecture details
    """

    name: str = Field(..., description="Full model name")
    size: str = Field(default="0", description="Size in bytes")
    digest: str = Field(default="", description="Content digest")
    modified_at: str = Field(default="", description="Last modified timestamp")
    details: ModelDetails = Field(default_factory=ModelDetails)

    model_config = ConfigDict(frozen=True)

    @field_validator("size", mode="before")
    @classmethod
    def size_as_string(cls, value: Any) -> Any:
        # The server sends a number
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return str(value)
        if isinstance(value, float):
            return str(int(value)) if value.is_integer() else str(value)
        return value

    @field_validator("details", mode="before")
    @classmethod
    def none_as_default_details(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def size_bytes(self) -> int | None:
        """Size in bytes, or None if the server sent something non-numeric."""
        try:
            return int(self.size)
        except ValueError:
            return None

    @property
    def display_size(self) -> str:
        return format_size(self.size)


class ModelListResponse(BaseModel):
    """Response body of GET /api/tags."""

    models: list[ModelDescriptor] = Field(default_factory=list)

    @field_validator("models", mode="before")
    @classmethod
    def none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class PullStatus(BaseModel):
    """A status record emitted by POST /api/pull.

    Attributes:
        status: Progress message, "success" once the pull has completed
        digest: Digest of the layer being downloaded
        total: Total bytes of the layer
        completed: Bytes downloaded so far
    """

    status: str = ""
    digest: str | None = None
    total: int | None = None
    completed: int | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == "success"


def filter_models(
    models: list[ModelDescriptor], query: str
) -> list[ModelDescriptor]:
    """Filter models by a case-insensitive substring of their name.

    An empty or blank query returns all models.
    """
    needle = query.strip().lower()
    if not needle:
        return list(models)
    return [model for model in models if needle in model.name.lower()]
