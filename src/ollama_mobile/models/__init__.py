"""Pydantic models for the Ollama REST API.

This package contains the request and response schemas exchanged with the
server, plus the ChatMessage records a conversation is built from.
"""

from ollama_mobile.models.chat import ChatMessage, ChatRequest
from ollama_mobile.models.generate import (
    GenerationRequest,
    GenerationResponse,
    SamplingOptions,
)
from ollama_mobile.models.models import (
    ModelDescriptor,
    ModelDetails,
    ModelListResponse,
    PullStatus,
    filter_models,
    format_size,
)

__all__ = [
    "ChatMessage",
    "ChatRequest",
    "GenerationRequest",
    "GenerationResponse",
    "ModelDescriptor",
    "ModelDetails",
    "ModelListResponse",
    "PullStatus",
    "SamplingOptions",
    "filter_models",
    "format_size",
]
