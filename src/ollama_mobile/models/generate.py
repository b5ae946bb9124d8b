"""Pydantic models for text generation requests and responses.

GenerationResponse is shared by the single-shot /api/generate endpoint and
the fragments of a streamed /api/chat reply.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SamplingOptions(BaseModel):
    """Model sampling parameters. Unset values are left to the server."""

    temperature: float | None = None
    top_p: float | None = None
    top_k: int | None = None
    repeat_penalty: float | None = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class GenerationRequest(BaseModel):
    """Request body for POST /api/generate."""

    model: str = Field(..., description="Model to generate with")
    prompt: str = Field(..., description="Prompt text")
    stream: bool | None = Field(
        default=None,
        description="Ignored by ServerClient.generate, which never streams",
    )
    context: list[int] | None = Field(
        default=None,
        description="Context returned by a previous response, for continuation",
    )
    options: SamplingOptions | None = Field(
        default=None, description="Sampling options for this request"
    )

    def to_payload(self, stream: bool) -> dict[str, Any]:
        """Build the JSON body sent to the server.

        Args:
            stream: Value sent as the "stream" flag, overriding self.stream

        Returns:
            dict: The request body with unset fields omitted
        """
        payload = self.model_dump(exclude_none=True, exclude={"options"})
        payload["stream"] = stream
        if self.options is not None:
            options = self.options.to_wire()
            if options:
                payload["options"] = options
        return payload


class FragmentMessage(BaseModel):
    """The message carried by a chat fragment."""

    role: str = "assistant"
    content: str = ""


class GenerationResponse(BaseModel):
    """A single-shot generation result or one fragment of a chat stream.

    Attributes:
        model: Name of the model that produced the fragment
        response: Text fragment from /api/generate
        message: Message fragment from /api/chat
        done: True on the final fragment
        context: Continuation context (single-shot responses only)
        created_at: Server timestamp of the fragment
        done_reason: Why generation stopped (final fragment only)
        total_duration: Total time spent, in nanoseconds
        load_duration: Time spent loading the model, in nanoseconds
        prompt_eval_count: Number of tokens in the prompt
        prompt_eval_duration: Time spent evaluating the prompt, in nanoseconds
        eval_count: Number of tokens generated
        eval_duration: Time spent generating, in nanoseconds
    """

    model: str = ""
    response: str = ""
    message: FragmentMessage | None = None
    done: bool = False
    context: list[int] | None = None
    created_at: str | None = None
    done_reason: str | None = None
    total_duration: int | None = None
    load_duration: int | None = None
    prompt_eval_count: int | None = None
    prompt_eval_duration: int | None = None
    eval_count: int | None = None
    eval_duration: int | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def text(self) -> str:
        """The text carried by this fragment, whichever endpoint produced it."""
        if self.message is not None:
            return self.message.content
        return self.response
