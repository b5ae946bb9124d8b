"""Pytest configuration and shared fixtures for ollama-mobile tests.

This module provides common fixtures used across all test modules,
including client configuration and clients backed by mock transports.
"""

from typing import Callable

import httpx
import pytest

from ollama_mobile import ClientConfig, ServerClient

TEST_BASE_URL = "http://ollama.test:11434"


@pytest.fixture
def client_config() -> ClientConfig:
    """Create a client configuration pointing at a fake host.

    Returns:
        ClientConfig: Configuration with short timeouts for testing.
    """
    return ClientConfig(base_url=TEST_BASE_URL, timeout=10.0)


@pytest.fixture
def make_client(
    client_config,
) -> Callable[[Callable[[httpx.Request], httpx.Response]], ServerClient]:
    """Create a factory for ServerClients that answer through a handler.

    Args:
        client_config: Client configuration fixture.

    Returns:
        Callable: Takes an httpx.MockTransport handler and returns a
                  ServerClient whose requests are served by it.
    """

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> ServerClient:
        return ServerClient(client_config, transport=httpx.MockTransport(handler))

    return _make
