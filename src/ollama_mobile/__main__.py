"""CLI entry point for ollama-mobile.

This module provides the command-line interface for talking to an Ollama
server. It can be invoked as `ollama-mobile` (via the script entry point) or
`python -m ollama_mobile`.
"""

import argparse
import asyncio
import logging
import sys
from typing import Awaitable, Callable, TextIO

from ollama_mobile import __version__
from ollama_mobile.client import ServerClient
from ollama_mobile.config import OllamaMobileSettings
from ollama_mobile.errors import OllamaMobileError
from ollama_mobile.models import (
    ChatMessage,
    ChatRequest,
    GenerationRequest,
    filter_models,
)

logger = logging.getLogger(__name__)

Command = Callable[
    [ServerClient, OllamaMobileSettings, argparse.Namespace, TextIO],
    Awaitable[int],
]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ollama-mobile",
        description="Chat with and manage models on a local Ollama server",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"ollama-mobile {__version__}",
    )

    parser.add_argument(
        "--server-url",
        type=str,
        default=None,
        help="Ollama server URL (default: http://localhost:11434, can be set via OLLAMA_MOBILE_SERVER_URL)",
    )

    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help="Model for generate and chat (default: llama3.2, can be set via OLLAMA_MOBILE_DEFAULT_MODEL)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: WARNING, can be set via OLLAMA_MOBILE_LOG_LEVEL)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("status", help="Check whether the server is reachable")

    models_parser = subparsers.add_parser("models", help="List installed models")
    models_parser.add_argument(
        "--filter",
        type=str,
        default="",
        help="Only show models whose name contains this text",
    )

    pull_parser = subparsers.add_parser("pull", help="Download a model")
    pull_parser.add_argument("name", help="Model to pull, e.g. llama3.2")

    delete_parser = subparsers.add_parser("delete", help="Delete a model")
    delete_parser.add_argument("name", help="Model to delete")

    generate_parser = subparsers.add_parser(
        "generate", help="Generate a single response to a prompt"
    )
    generate_parser.add_argument("prompt", help="Prompt text")

    chat_parser = subparsers.add_parser(
        "chat",
        help="Chat with a model (interactive when no prompt is given)",
    )
    chat_parser.add_argument("prompt", nargs="?", default=None, help="Prompt text")
    chat_parser.add_argument(
        "--no-stream",
        action="store_true",
        help="Print the reply only once it is complete",
    )

    return parser


async def run_status(
    client: ServerClient,
    settings: OllamaMobileSettings,
    args: argparse.Namespace,
    out: TextIO,
) -> int:
    if await client.check_availability():
        print(f"connected: {client.base_url}", file=out)
        return 0
    print(f"disconnected: {client.base_url}", file=out)
    return 1


async def run_models(
    client: ServerClient,
    settings: OllamaMobileSettings,
    args: argparse.Namespace,
    out: TextIO,
) -> int:
    models = filter_models(await client.list_models(), args.filter)
    if not models:
        print("No models found", file=out)
        return 0

    for model in models:
        details = model.details
        columns = [
            model.name,
            details.parameter_size,
            model.display_size,
            details.family,
        ]
        if details.quantization_level:
            columns.append(details.quantization_level)
        print("  ".join(column for column in columns if column), file=out)
    return 0


async def run_pull(
    client: ServerClient,
    settings: OllamaMobileSettings,
    args: argparse.Namespace,
    out: TextIO,
) -> int:
    name = args.name.strip()
    await client.pull_model(name)
    print(f'Model "{name}" pulled successfully', file=out)
    return 0


async def run_delete(
    client: ServerClient,
    settings: OllamaMobileSettings,
    args: argparse.Namespace,
    out: TextIO,
) -> int:
    name = args.name.strip()
    await client.delete_model(name)
    print(f'Model "{name}" deleted', file=out)
    return 0


async def run_generate(
    client: ServerClient,
    settings: OllamaMobileSettings,
    args: argparse.Namespace,
    out: TextIO,
) -> int:
    response = await client.generate(
        GenerationRequest(
            model=args.model or settings.default_model,
            prompt=args.prompt,
            options=settings.sampling_options(),
        )
    )
    print(response.response, file=out)
    return 0


async def stream_reply(
    client: ServerClient,
    request: ChatRequest,
    out: TextIO,
    stream_output: bool = True,
) -> ChatMessage:
    """Send a chat request and print the reply.

    Args:
        client: The server client
        request: The chat request to send
        out: Where to print the reply
        stream_output: Print fragments as they arrive instead of all at once

    Returns:
        ChatMessage: The complete assistant reply
    """
    async with await client.chat(request) as stream:
        if stream_output:
            async for fragment in stream:
                print(fragment.text, end="", file=out, flush=True)
            reply = ChatMessage(role="assistant", content=stream.text)
        else:
            reply = await stream.collect()
            print(reply.content, end="", file=out)
    print(file=out)
    return reply


async def run_chat(
    client: ServerClient,
    settings: OllamaMobileSettings,
    args: argparse.Namespace,
    out: TextIO,
) -> int:
    model = args.model or settings.default_model
    options = settings.sampling_options()
    stream_output = settings.stream_response and not args.no_stream

    if args.prompt is not None:
        request = ChatRequest(
            model=model,
            messages=[ChatMessage(role="user", content=args.prompt)],
            options=options,
        )
        await stream_reply(client, request, out, stream_output)
        return 0

    print(
        f"Chatting with {model}. /clear resets the conversation, /exit quits.",
        file=out,
    )
    history: list[ChatMessage] = []
    while True:
        try:
            line = await asyncio.to_thread(input, "> ")
        except EOFError:
            break

        text = line.strip()
        if not text:
            continue
        if text == "/exit":
            break
        if text == "/clear":
            history.clear()
            print("(conversation cleared)", file=out)
            continue

        history.append(ChatMessage(role="user", content=text))
        request = ChatRequest(model=model, messages=history, options=options)
        try:
            reply = await stream_reply(client, request, out, stream_output)
        except OllamaMobileError as e:
            # The conversation survives a failed turn
            print(f"\nError: {e}", file=sys.stderr)
            history.pop()
            continue
        history.append(reply)

    return 0


COMMANDS: dict[str, Command] = {
    "status": run_status,
    "models": run_models,
    "pull": run_pull,
    "delete": run_delete,
    "generate": run_generate,
    "chat": run_chat,
}


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the ollama-mobile CLI.

    Parses command-line arguments, builds the settings and client, and runs
    the selected command.

    Returns:
        int: Process exit status
    """
    args = build_parser().parse_args(argv)

    # Build settings, CLI args override environment variables
    settings_kwargs = {}
    if args.server_url is not None:
        settings_kwargs["server_url"] = args.server_url
    if args.log_level is not None:
        settings_kwargs["log_level"] = args.log_level

    try:
        settings = OllamaMobileSettings(**settings_kwargs)
        client_config = settings.client_config()
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    client = ServerClient(client_config)
    command = COMMANDS[args.command]

    try:
        return asyncio.run(command(client, settings, args, sys.stdout))
    except OllamaMobileError as e:
        logger.debug(f"{e.operation} failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
