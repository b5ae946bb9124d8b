"""Pydantic models for chat requests.

A ChatRequest is built from the ordered ChatMessage history of a
conversation and always goes over the wire in streaming mode.
"""

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from ollama_mobile.models.generate import SamplingOptions

Role = Literal["user", "assistant", "system"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChatMessage(BaseModel):
    """A single turn of a conversation.

    Attributes:
        role: Who wrote the message ("user", "assistant" or "system")
        content: Message text
        timestamp: When the message was created
    """

    role: Role
    content: str = ""
    timestamp: datetime = Field(default_factory=_utcnow)

    model_config = ConfigDict(frozen=True)

    def to_wire(self) -> dict[str, str]:
        """Get the message in Ollama format (timestamp is local only)."""
        return {"role": self.role, "content": self.content}


class ChatRequest(BaseModel):
    """Request body for POST /api/chat."""

    model: str = Field(..., description="Model to chat with")
    messages: list[ChatMessage] = Field(
        default_factory=list, description="Conversation history, oldest first"
    )
    stream: bool | None = Field(
        default=None,
        description="Ignored by ServerClient.chat, which always streams",
    )
    options: SamplingOptions | None = Field(
        default=None, description="Sampling options for this request"
    )

    def to_payload(self, stream: bool) -> dict[str, Any]:
        """Build the JSON body sent to the server.

        Args:
            stream: Value sent as the "stream" flag, overriding self.stream

        Returns:
            dict: The request body with unset options omitted
        """
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [message.to_wire() for message in self.messages],
            "stream": stream,
        }
        if self.options is not None:
            options = self.options.to_wire()
            if options:
                payload["options"] = options
        return payload
