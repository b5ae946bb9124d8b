"""Lazy, closable sequence of chat response fragments.

A ChatStream wraps a response whose headers have already been received and
decodes its newline-delimited JSON body one line at a time as it arrives.
"""

import json
import logging

import httpx
from pydantic import ValidationError

from ollama_mobile.errors import ChatStreamInterrupted
from ollama_mobile.models.chat import ChatMessage
from ollama_mobile.models.generate import GenerationResponse

logger = logging.getLogger(__name__)


class ChatStream:
    """Async iterator over the fragments of one streamed chat reply.

    The stream owns the HTTP connection it reads from. The connection is
    released when the final fragment (done=True) has been yielded, when the
    server closes the connection, when decoding fails, or when aclose() is
    called, whichever happens first. A stream can only be iterated once.

    Attributes:
        model: The model the chat request was sent to
        url: The URL of the chat endpoint
        fragments_received: Number of fragments yielded so far

    Example:
        >>> async with await client.chat(request) as stream:
        ...     async for fragment in stream:
        ...         print(fragment.text, end="")
    """

    def __init__(
        self,
        model: str,
        url: str,
        http: httpx.AsyncClient,
        response: httpx.Response,
    ) -> None:
        self.model = model
        self.url = url
        self.fragments_received = 0
        self._http = http
        self._response = response
        self._lines = response.aiter_lines()
        self._chunks: list[str] = []
        self._done = False
        self._finished = False
        self._closed = False

    @property
    def text(self) -> str:
        """The reply text received so far."""
        return "".join(self._chunks)

    @property
    def done(self) -> bool:
        """Whether the final fragment has been received."""
        return self._done

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> "ChatStream":
        return self

    async def __anext__(self) -> GenerationResponse:
        if self._finished:
            raise StopAsyncIteration

        try:
            fragment = await self._next_fragment()
        except Exception:
            # Also reached on StopAsyncIteration at end of body
            await self.aclose()
            raise

        self.fragments_received += 1
        self._chunks.append(fragment.text)

        if fragment.done:
            self._done = True
            logger.debug(
                f"Chat stream completed after {self.fragments_received} fragments"
            )
            await self.aclose()

        return fragment

    async def __aenter__(self) -> "ChatStream":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Stop the stream and release the connection. Safe to call twice."""
        self._finished = True
        if self._closed:
            return
        self._closed = True

        try:
            close_lines = getattr(self._lines, "aclose", None)
            if close_lines is not None:
                await close_lines()
            await self._response.aclose()
        finally:
            await self._http.aclose()
            logger.debug(f"Chat stream closed: {self.url}")

    async def collect(self) -> ChatMessage:
        """Drain the remaining fragments and return the full assistant reply.

        Returns:
            ChatMessage: Assistant message whose content is the concatenation
                         of every fragment's text in arrival order

        Raises:
            ChatStreamInterrupted: If the stream fails before it ends
        """
        async for _ in self:
            pass
        return ChatMessage(role="assistant", content=self.text)

    async def _next_fragment(self) -> GenerationResponse:
        while True:
            try:
                line = await anext(self._lines)
            except httpx.HTTPError as e:
                logger.error(f"Chat stream with model {self.model} failed: {e}")
                raise ChatStreamInterrupted(
                    self.model,
                    url=self.url,
                    fragments_received=self.fragments_received,
                    reason=str(e) or type(e).__name__,
                ) from e

            line = line.strip()
            if not line:
                continue
            return self._decode(line)

    def _decode(self, line: str) -> GenerationResponse:
        try:
            data = json.loads(line)
        except json.JSONDecodeError as e:
            raise self._interrupted(f"invalid JSON fragment: {e.msg}") from e

        if not isinstance(data, dict):
            raise self._interrupted("fragment is not a JSON object")

        if data.get("error"):
            raise self._interrupted(str(data["error"]))

        try:
            return GenerationResponse.model_validate(data)
        except ValidationError as e:
            raise self._interrupted(f"malformed fragment: {e}") from e

    def _interrupted(self, reason: str) -> ChatStreamInterrupted:
        logger.error(f"Chat stream with model {self.model} interrupted: {reason}")
        return ChatStreamInterrupted(
            self.model,
            url=self.url,
            fragments_received=self.fragments_received,
            reason=reason,
        )
