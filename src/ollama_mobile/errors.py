"""Error types raised by the ServerClient.

Every failure of a data operation is surfaced as a subclass of
OllamaMobileError carrying the operation name, the URL that was requested
and, where one is involved, the model name.
"""


class OllamaMobileError(Exception):
    """Base class for all ServerClient errors.

    Attributes:
        operation: Name of the client operation that failed
        url: The URL the operation was sent to
        model: Model name involved in the operation, if any
        status_code: HTTP status returned by the server, if one was received
        reason: Short description of the underlying failure
    """

    operation = "request"

    def __init__(
        self,
        message: str,
        *,
        url: str,
        model: str | None = None,
        status_code: int | None = None,
        reason: str | None = None,
    ) -> None:
        self.url = url
        self.model = model
        self.status_code = status_code
        self.reason = reason
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ServerUnreachable(OllamaMobileError):
    """The server could not be reached or returned an error on a read path."""

    operation = "list_models"
    hint = "Make sure the Ollama server is running."

    def __init__(
        self, url: str, *, status_code: int | None = None, reason: str | None = None
    ) -> None:
        super().__init__(
            f"Failed to fetch models from {url}. {self.hint}",
            url=url,
            status_code=status_code,
            reason=reason,
        )


class GenerationFailed(OllamaMobileError):
    operation = "generate"

    def __init__(
        self,
        model: str,
        *,
        url: str,
        status_code: int | None = None,
        reason: str | None = None,
    ) -> None:
        super().__init__(
            f"Failed to generate response with model: {model}",
            url=url,
            model=model,
            status_code=status_code,
            reason=reason,
        )


class ChatStartFailed(OllamaMobileError):
    """The chat request was not accepted by the server."""

    operation = "chat"

    def __init__(
        self,
        model: str,
        *,
        url: str,
        status_code: int | None = None,
        reason: str | None = None,
    ) -> None:
        super().__init__(
            f"Failed to start chat with model: {model}",
            url=url,
            model=model,
            status_code=status_code,
            reason=reason,
        )


class ChatStreamInterrupted(OllamaMobileError):
    """A chat stream failed after the server accepted the request.

    Attributes:
        fragments_received: Number of fragments yielded before the failure
    """

    operation = "chat"

    def __init__(
        self,
        model: str,
        *,
        url: str,
        fragments_received: int = 0,
        reason: str | None = None,
    ) -> None:
        self.fragments_received = fragments_received
        super().__init__(
            f"Chat stream with model {model} interrupted "
            f"after {fragments_received} fragment(s)",
            url=url,
            model=model,
            reason=reason,
        )


class ModelPullFailed(OllamaMobileError):
    operation = "pull_model"

    def __init__(
        self,
        model: str,
        *,
        url: str,
        status_code: int | None = None,
        reason: str | None = None,
    ) -> None:
        super().__init__(
            f"Failed to pull model: {model}",
            url=url,
            model=model,
            status_code=status_code,
            reason=reason,
        )


class ModelDeleteFailed(OllamaMobileError):
    operation = "delete_model"

    def __init__(
        self,
        model: str,
        *,
        url: str,
        status_code: int | None = None,
        reason: str | None = None,
    ) -> None:
        super().__init__(
            f"Failed to delete model: {model}",
            url=url,
            model=model,
            status_code=status_code,
            reason=reason,
        )
