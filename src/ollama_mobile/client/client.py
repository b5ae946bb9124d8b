"""Async client for the Ollama REST API.

This module provides ServerClient, a thin typed wrapper around the JSON/REST
surface of an Ollama server. Every operation is an independent exchange made
with its own short-lived httpx.AsyncClient: there is no connection pool, no
retry and no caching. The only state is the configured base URL.
"""

import json
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from ollama_mobile.client.stream import ChatStream
from ollama_mobile.config import ClientConfig, normalize_base_url
from ollama_mobile.errors import (
    ChatStartFailed,
    GenerationFailed,
    ModelDeleteFailed,
    ModelPullFailed,
    ServerUnreachable,
)
from ollama_mobile.models.chat import ChatRequest
from ollama_mobile.models.generate import GenerationRequest, GenerationResponse
from ollama_mobile.models.models import ModelDescriptor, ModelListResponse, PullStatus

logger = logging.getLogger(__name__)

TAGS_PATH = "/api/tags"
GENERATE_PATH = "/api/generate"
CHAT_PATH = "/api/chat"
PULL_PATH = "/api/pull"
DELETE_PATH = "/api/delete"


def _describe(error: Exception) -> str:
    return str(error) or type(error).__name__


class ServerClient:
    """Async client for interacting with an Ollama server.

    The client is constructed from an explicit ClientConfig and passed to
    whoever needs it. Each operation resolves its URL from the configuration
    when it starts, so configure_endpoint() never affects requests that are
    already in flight.

    Attributes:
        config: The current connection configuration
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Connection configuration (defaults to ClientConfig())
            transport: Optional httpx transport used for every request,
                       e.g. httpx.MockTransport in tests
        """
        self.config = config or ClientConfig()
        self._transport = transport
        logger.info(f"ServerClient initialized with base URL: {self.base_url}")

    @property
    def base_url(self) -> str:
        return self.config.base_url

    def configure_endpoint(self, url: str) -> None:
        """Replace the base URL used by all subsequent calls.

        Args:
            url: New server URL

        Raises:
            ValueError: If the URL is empty
        """
        self.config = self.config.model_copy(
            update={"base_url": normalize_base_url(url)}
        )
        logger.info(f"Server endpoint configured: {self.base_url}")

    def _url(self, path: str) -> str:
        return f"{self.config.base_url}{path}"

    def _http(self, timeout: float | None = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.config.timeout if timeout is None else timeout,
            transport=self._transport,
        )

    async def check_availability(self) -> bool:
        """Check if the server is reachable.

        Lists models with a short timeout and only looks at the status code.

        Returns:
            bool: True if the server answered with a 2xx status in time,
                  False on any failure
        """
        url = self._url(TAGS_PATH)
        try:
            async with self._http(timeout=self.config.availability_timeout) as http:
                response = await http.get(url)
        except Exception as e:
            logger.warning(f"Server availability check failed for {url}: {e!r}")
            return False

        if not response.is_success:
            logger.warning(
                f"Server availability check for {url} "
                f"returned HTTP {response.status_code}"
            )
            return False

        logger.debug(f"Server availability check: {url} is up")
        return True

    async def list_models(self) -> list[ModelDescriptor]:
        """List the models installed on the server.

        Returns:
            list[ModelDescriptor]: Installed models, empty if there are none

        Raises:
            ServerUnreachable: If the request fails, the server answers with
                               a non-2xx status, or the body can't be decoded
        """
        url = self._url(TAGS_PATH)
        logger.debug(f"Listing models: GET {url}")
        try:
            async with self._http() as http:
                response = await http.get(url)
        except httpx.HTTPError as e:
            logger.error(f"Failed to list models: {e!r}")
            raise ServerUnreachable(url, reason=_describe(e)) from e

        if not response.is_success:
            logger.error(f"Failed to list models: HTTP {response.status_code}")
            raise ServerUnreachable(
                url,
                status_code=response.status_code,
                reason=f"HTTP {response.status_code}",
            )

        try:
            listing = ModelListResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Failed to decode model list: {e}")
            raise ServerUnreachable(
                url,
                status_code=response.status_code,
                reason="unexpected response body",
            ) from e

        logger.info(f"Listed {len(listing.models)} models")
        return listing.models

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        """Generate a complete response to a prompt in one exchange.

        The request is always sent with stream=False.

        Args:
            request: The generation request

        Returns:
            GenerationResponse: The full response, with done=True

        Raises:
            GenerationFailed: If the request fails, the server answers with a
                              non-2xx status or an error, or the body can't
                              be decoded
        """
        url = self._url(GENERATE_PATH)
        payload = request.to_payload(stream=False)
        logger.debug(f"Generating with model {request.model}: POST {url}")
        try:
            async with self._http() as http:
                response = await http.post(url, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Generation with model {request.model} failed: {e!r}")
            raise GenerationFailed(request.model, url=url, reason=_describe(e)) from e

        if not response.is_success:
            logger.error(
                f"Generation with model {request.model} failed: "
                f"HTTP {response.status_code}"
            )
            raise GenerationFailed(
                request.model,
                url=url,
                status_code=response.status_code,
                reason=self._error_detail(response),
            )

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Failed to decode generation response: {e}")
            raise GenerationFailed(
                request.model,
                url=url,
                status_code=response.status_code,
                reason="unexpected response body",
            ) from e

        if isinstance(data, dict) and data.get("error"):
            logger.error(
                f"Generation with model {request.model} failed: {data['error']}"
            )
            raise GenerationFailed(
                request.model,
                url=url,
                status_code=response.status_code,
                reason=str(data["error"]),
            )

        try:
            result = GenerationResponse.model_validate(data)
        except ValidationError as e:
            logger.error(f"Failed to decode generation response: {e}")
            raise GenerationFailed(
                request.model,
                url=url,
                status_code=response.status_code,
                reason="unexpected response body",
            ) from e

        logger.info(
            f"Generated {result.eval_count or 0} tokens with model {request.model}"
        )
        return result

    async def chat(self, request: ChatRequest) -> ChatStream:
        """Start a streaming chat exchange.

        The request is always sent with stream=True, whatever request.stream
        says. Awaiting this method performs the handshake only; fragments are
        decoded lazily while the returned stream is iterated.

        Args:
            request: The chat request

        Returns:
            ChatStream: Lazy sequence of response fragments. Close it (or use
                        it as an async context manager) to release the
                        connection early.

        Raises:
            ChatStartFailed: If the connection fails or the server answers
                             with a non-2xx status
        """
        url = self._url(CHAT_PATH)
        payload = request.to_payload(stream=True)
        logger.debug(
            f"Starting chat stream with model {request.model}: POST {url} "
            f"({len(request.messages)} messages)"
        )

        http = self._http()
        try:
            response = await http.send(
                http.build_request("POST", url, json=payload), stream=True
            )
        except httpx.HTTPError as e:
            await http.aclose()
            logger.error(f"Chat with model {request.model} failed to start: {e!r}")
            raise ChatStartFailed(request.model, url=url, reason=_describe(e)) from e
        except BaseException:
            await http.aclose()
            raise

        if not response.is_success:
            try:
                await response.aread()
                reason = self._error_detail(response)
            except httpx.HTTPError:
                reason = f"HTTP {response.status_code}"
            finally:
                await response.aclose()
                await http.aclose()
            logger.error(
                f"Chat with model {request.model} failed to start: "
                f"HTTP {response.status_code}"
            )
            raise ChatStartFailed(
                request.model,
                url=url,
                status_code=response.status_code,
                reason=reason,
            )

        return ChatStream(request.model, url, http, response)

    async def pull_model(self, name: str) -> PullStatus:
        """Download a model to the server.

        The server streams progress records while it downloads; they are read
        and discarded, and the call only returns once the server reports
        success.

        Args:
            name: Name of the model to pull (e.g. "llama3.2")

        Returns:
            PullStatus: The final status record

        Raises:
            ModelPullFailed: If the request fails, the server reports an error,
                             or the exchange ends without a success status
        """
        url = self._url(PULL_PATH)
        logger.info(f"Pulling model {name}: POST {url}")
        last: PullStatus | None = None
        try:
            async with self._http() as http:
                async with http.stream("POST", url, json={"name": name}) as response:
                    if not response.is_success:
                        await response.aread()
                        raise ModelPullFailed(
                            name,
                            url=url,
                            status_code=response.status_code,
                            reason=self._error_detail(response),
                        )
                    async for line in response.aiter_lines():
                        if not line.strip():
                            continue
                        last = self._decode_pull_status(name, url, line)
                        logger.debug(f"Pull {name}: {last.status}")
                        if last.succeeded:
                            break
        except httpx.HTTPError as e:
            logger.error(f"Failed to pull model {name}: {e!r}")
            raise ModelPullFailed(name, url=url, reason=_describe(e)) from e
        except ModelPullFailed as e:
            logger.error(f"Failed to pull model {name}: {e}")
            raise

        if last is None or not last.succeeded:
            logger.error(f"Pull of model {name} ended before completion")
            raise ModelPullFailed(
                name, url=url, reason="stream ended before the pull completed"
            )

        logger.info(f"Pulled model {name}")
        return last

    async def delete_model(self, name: str) -> None:
        """Delete a model from the server.

        Args:
            name: Name of the model to delete

        Raises:
            ModelDeleteFailed: If the request fails or the server answers with
                               a non-2xx status (e.g. 404 for an unknown model)
        """
        url = self._url(DELETE_PATH)
        logger.info(f"Deleting model {name}: DELETE {url}")
        try:
            async with self._http() as http:
                response = await http.request("DELETE", url, json={"name": name})
        except httpx.HTTPError as e:
            logger.error(f"Failed to delete model {name}: {e!r}")
            raise ModelDeleteFailed(name, url=url, reason=_describe(e)) from e

        if not response.is_success:
            logger.error(
                f"Failed to delete model {name}: HTTP {response.status_code}"
            )
            raise ModelDeleteFailed(
                name,
                url=url,
                status_code=response.status_code,
                reason=self._error_detail(response),
            )

        logger.info(f"Deleted model {name}")

    @staticmethod
    def _decode_pull_status(name: str, url: str, line: str) -> PullStatus:
        try:
            data: Any = json.loads(line)
        except json.JSONDecodeError as e:
            raise ModelPullFailed(
                name, url=url, reason=f"invalid JSON status: {e.msg}"
            ) from e

        if not isinstance(data, dict):
            raise ModelPullFailed(name, url=url, reason="status is not a JSON object")
        if data.get("error"):
            raise ModelPullFailed(name, url=url, reason=str(data["error"]))

        try:
            return PullStatus.model_validate(data)
        except ValidationError as e:
            raise ModelPullFailed(name, url=url, reason="malformed status") from e

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        """Get the server's error message from a failed response, if it sent one."""
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict) and data.get("error"):
            return f"HTTP {response.status_code}: {data['error']}"
        return f"HTTP {response.status_code}"
