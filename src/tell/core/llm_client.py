"""
Streaming client for a local Ollama server.

This module contains:
- Endpoint: where the server lives
- Session: optional continuation state threaded between requests
- Fragment / Batch: the units a generation stream is made of
- OllamaLanguageModel: opens generation streams for a prompt
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, List, Optional

import httpx
from ollama import AsyncClient, ResponseError

from tell.core.errors import RequestError

logger = logging.getLogger(__name__)

DEFAULT_HOST = "http://127.0.0.1:11434"


@dataclass(frozen=True)
class Endpoint:
    """Address of the inference server."""

    host: str = DEFAULT_HOST

    @classmethod
    def from_env(cls) -> "Endpoint":
        """Use OLLAMA_HOST when set, otherwise the local default."""
        host = os.getenv("OLLAMA_HOST", "").strip()
        return cls(host=host or DEFAULT_HOST)


@dataclass(frozen=True)
class Fragment:
    """One piece of generated text, with the server's context if it sent one."""

    text: str
    context: Optional[List[int]] = None


@dataclass
class Batch:
    """A unit of the generation stream: fragments, or the error that replaced them."""

    fragments: List[Fragment] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class Session:
    """
    Conversation state returned by the server.

    Passing a session to generate_stream() continues the conversation it
    came from. A fresh Session() (or None) starts a new one.
    """

    context: Optional[List[int]] = None

    def advance(self, fragment: Fragment) -> "Session":
        if fragment.context is None:
            return self
        return Session(context=list(fragment.context))


class OllamaLanguageModel:
    """Language model served by Ollama, bound to one model name."""

    def __init__(self, model: str, endpoint: Optional[Endpoint] = None, client: Any = None):
        """
        Args:
            model: Model identifier known to the server (e.g. gemma2:2b)
            endpoint: Server address (defaults to the local server)
            client: Object with ollama.AsyncClient's generate() signature;
                    built from endpoint when omitted
        """
        self.model = model
        self.endpoint = endpoint or Endpoint()
        self.client = client if client is not None else AsyncClient(host=self.endpoint.host)

    async def generate_stream(
        self,
        prompt: str,
        session: Optional[Session] = None,
    ) -> AsyncIterator[Batch]:
        """
        Open a streaming generation request for prompt.

        The first response is awaited here so that an unreachable server or a
        rejected request fails now instead of on first iteration.

        Args:
            prompt: Text to send to the model
            session: Conversation to continue, if any

        Returns:
            Async iterator of Batch items. Failures after the stream is open
            are yielded as Batch(error=...) instead of being raised.

        Raises:
            RequestError: If the stream cannot be opened
        """
        kwargs = {"model": self.model, "prompt": prompt, "stream": True}
        if session is not None and session.context:
            kwargs["context"] = session.context

        logger.info(
            f"Opening generation stream: model={self.model} host={self.endpoint.host} "
            f"prompt_chars={len(prompt)}"
        )

        try:
            parts = await self.client.generate(**kwargs)
            parts = aiter(parts)
            first = await anext(parts)
        except StopAsyncIteration:
            logger.warning("Server returned an empty stream")
            return _empty()
        except ResponseError as e:
            raise RequestError(f"Server rejected request for model '{self.model}': {e.error}") from e
        except (ConnectionError, httpx.HTTPError) as e:
            raise RequestError(f"Could not reach inference server at {self.endpoint.host}: {e}") from e
        except ValueError as e:
            raise RequestError(f"Malformed response from inference server at {self.endpoint.host}: {e}") from e

        return _batches(first, parts)


def _to_batch(part) -> Batch:
    text = getattr(part, "response", None) or ""
    context = getattr(part, "context", None)
    return Batch(fragments=[Fragment(text=text, context=list(context) if context else None)])


async def _batches(first, parts) -> AsyncIterator[Batch]:
    yield _to_batch(first)
    while True:
        try:
            part = await anext(parts)
        except StopAsyncIteration:
            break
        except (ResponseError, httpx.HTTPError, ValueError) as e:
            logger.error(f"Stream batch failed: {e}")
            yield Batch(error=e)
            continue
        yield _to_batch(part)


async def _empty() -> AsyncIterator[Batch]:
    return
    yield
