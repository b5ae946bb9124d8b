"""Pytest configuration for integration tests.

This module provides a fake Ollama server built with FastAPI. The client
under test talks to it through httpx.ASGITransport, so every request goes
through real HTTP semantics (methods, status codes, JSON and NDJSON bodies)
without opening a socket.
"""

import json
from typing import AsyncIterator

import httpx
import pytest
from fastapi import FastAPI
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel

from ollama_mobile import ClientConfig, ServerClient

FAKE_BASE_URL = "http://ollama.local:11434"

LLAMA = {
    "name": "llama3.2:latest",
    "model": "llama3.2:latest",
    "size": 2019393189,
    "digest": "a80c4f17acd55265feec403c7aef86be0c25983ab279d83f3bcd3abbcb5b8b72",
    "modified_at": "2025-01-15T10:35:00.000000Z",
    "details": {
        "format": "gguf",
        "family": "llama",
        "families": ["llama"],
        "parameter_size": "3.2B",
        "quantization_level": "Q4_K_M",
    },
}


class NameBody(BaseModel):
    name: str


class ChatBody(BaseModel):
    model: str
    messages: list[dict]
    stream: bool = True
    options: dict | None = None


class GenerateBody(BaseModel):
    model: str
    prompt: str
    stream: bool = True
    context: list[int] | None = None
    options: dict | None = None


def not_found(name: str) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": f"model '{name}' not found"})


def create_fake_ollama() -> FastAPI:
    """Create a FastAPI app answering like a small Ollama server.

    The installed models live in app.state.models and every received JSON
    body is recorded in app.state.requests.
    """
    app = FastAPI(title="fake-ollama")
    app.state.models = {LLAMA["name"]: dict(LLAMA)}
    app.state.requests = []

    def find(name: str) -> dict | None:
        models = app.state.models
        return models.get(name) or models.get(f"{name}:latest")

    @app.get("/api/tags")
    async def tags() -> dict:
        return {"models": list(app.state.models.values())}

    @app.post("/api/generate")
    async def generate(body: GenerateBody):
        app.state.requests.append(body.model_dump())
        if find(body.model) is None:
            return not_found(body.model)
        return {
            "model": body.model,
            "created_at": "2025-01-15T10:35:00Z",
            "response": f"You said: {body.prompt}",
            "done": True,
            "done_reason": "stop",
            "context": (body.context or []) + [1, 2, 3],
            "total_duration": 5_000_000,
            "eval_count": 3,
        }

    @app.post("/api/chat")
    async def chat(body: ChatBody):
        app.state.requests.append(body.model_dump())
        if find(body.model) is None:
            return not_found(body.model)

        reply = f"You said: {body.messages[-1]['content']}"
        words = reply.split(" ")

        async def fragments() -> AsyncIterator[str]:
            for index, word in enumerate(words):
                text = word if index == 0 else f" {word}"
                yield json.dumps(
                    {
                        "model": body.model,
                        "message": {"role": "assistant", "content": text},
                        "done": False,
                    }
                ) + "\n"
            yield json.dumps(
                {
                    "model": body.model,
                    "message": {"role": "assistant", "content": ""},
                    "done": True,
                    "done_reason": "stop",
                    "eval_count": len(words),
                }
            ) + "\n"

        return StreamingResponse(fragments(), media_type="application/x-ndjson")

    @app.post("/api/pull")
    async def pull(body: NameBody):
        app.state.requests.append(body.model_dump())
        name = body.name if ":" in body.name else f"{body.name}:latest"

        async def progress() -> AsyncIterator[str]:
            yield json.dumps({"status": "pulling manifest"}) + "\n"
            if body.name.startswith("missing"):
                yield json.dumps(
                    {"error": "pull model manifest: file does not exist"}
                ) + "\n"
                return
            yield json.dumps(
                {"status": "pulling abc", "digest": "abc", "total": 10, "completed": 10}
            ) + "\n"
            app.state.models[name] = dict(LLAMA, name=name, model=name)
            yield json.dumps({"status": "success"}) + "\n"

        return StreamingResponse(progress(), media_type="application/x-ndjson")

    @app.delete("/api/delete")
    async def delete(body: NameBody):
        app.state.requests.append(body.model_dump())
        model = find(body.name)
        if model is None:
            return not_found(body.name)
        del app.state.models[model["name"]]
        return JSONResponse(status_code=200, content=None)

    return app


@pytest.fixture
def fake_ollama() -> FastAPI:
    """Create a fresh fake Ollama server."""
    return create_fake_ollama()


@pytest.fixture
def server_client(fake_ollama) -> ServerClient:
    """Create a ServerClient wired to the fake Ollama server.

    Args:
        fake_ollama: Fake server fixture.

    Returns:
        ServerClient: Client whose requests are served by the fake app.
    """
    return ServerClient(
        ClientConfig(base_url=FAKE_BASE_URL),
        transport=httpx.ASGITransport(app=fake_ollama),
    )
