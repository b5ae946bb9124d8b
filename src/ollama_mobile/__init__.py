"""ollama-mobile: Async client for a local Ollama server.

This package provides a typed client for listing, pulling and deleting
models, single-shot generation, and streaming chat, plus a small
command-line interface on top of it.
"""

from ollama_mobile.client import ChatStream, ServerClient
from ollama_mobile.config import ClientConfig, OllamaMobileSettings
from ollama_mobile.errors import (
    ChatStartFailed,
    ChatStreamInterrupted,
    GenerationFailed,
    ModelDeleteFailed,
    ModelPullFailed,
    OllamaMobileError,
    ServerUnreachable,
)
from ollama_mobile.models import (
    ChatMessage,
    ChatRequest,
    GenerationRequest,
    GenerationResponse,
    ModelDescriptor,
    SamplingOptions,
)

__version__ = "0.1.0"

__all__ = [
    "ChatMessage",
    "ChatRequest",
    "ChatStartFailed",
    "ChatStream",
    "ChatStreamInterrupted",
    "ClientConfig",
    "GenerationFailed",
    "GenerationRequest",
    "GenerationResponse",
    "ModelDeleteFailed",
    "ModelDescriptor",
    "ModelPullFailed",
    "OllamaMobileError",
    "OllamaMobileSettings",
    "SamplingOptions",
    "ServerClient",
    "ServerUnreachable",
    "__version__",
]
