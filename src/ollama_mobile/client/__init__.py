"""Client for the Ollama REST API.

This package provides the async ServerClient and the ChatStream it returns
for streamed chat replies.
"""

from ollama_mobile.client.client import ServerClient
from ollama_mobile.client.stream import ChatStream

__all__ = ["ChatStream", "ServerClient"]
