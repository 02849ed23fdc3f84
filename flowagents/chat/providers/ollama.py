"""Ollama chat model provider for local models."""

from __future__ import annotations

from collections.abc import Sequence
import logging
from typing import TYPE_CHECKING, Any

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from flowagents.chat.messages import ChatMessage, MessageRole
from flowagents.chat.providers.base import BaseChatModelConnection, BaseChatModelSetup
from flowagents.core.exceptions import ChatModelError
from flowagents.core.resources import parse_duration

if TYPE_CHECKING:
    from flowagents.chat.tools import ToolMetadata
    from flowagents.core.resources import GetResource

logger = logging.getLogger(__name__)

DEFAULT_OLLAMA_URL = "http://localhost:11434"


class OllamaChatModelConnection(BaseChatModelConnection):
    """
    Connection to an Ollama server (/api/chat, non-streaming).

    Safe to share across concurrent runs: one httpx.AsyncClient pools the
    underlying HTTP connections.
    """

    def __init__(
        self,
        base_url: str | None = None,
        request_timeout: str | float = "120s",
        max_retries: int = 2,
        retry_backoff: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
        get_resource: GetResource | None = None,
        **kwargs: Any,
    ) -> None:
        """
        Initialize Ollama connection.

        Args:
            base_url: Ollama server URL (default: http://localhost:11434)
            request_timeout: Timeout per request, seconds or a duration string ("120s")
            max_retries: Retries on transport errors (connect/read failures)
            retry_backoff: Multiplier for the exponential wait between retries
            transport: Custom httpx transport (tests)
        """
        super().__init__(get_resource=get_resource, **kwargs)
        self.base_url = (base_url or DEFAULT_OLLAMA_URL).rstrip("/")
        self.timeout = parse_duration(request_timeout)
        self.max_retries = int(max_retries)
        self.retry_backoff = float(retry_backoff)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
            logger.info("Ollama client initialized (url=%s, timeout=%.1fs)", self.base_url, self.timeout)
        return self._client

    async def _post_chat(self, payload: dict[str, Any]) -> httpx.Response:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.retry_backoff, max=10),
            retry=retry_if_exception_type(httpx.TransportError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        return await retrying(self.client.post, "/api/chat", json=payload)

    async def chat(
        self,
        messages: Sequence[ChatMessage],
        tools: Sequence[ToolMetadata] | None = None,
        *,
        model: str,
        **options: Any,
    ) -> ChatMessage:
        """Generate a reply using the Ollama chat API."""
        payload: dict[str, Any] = {
            "model": model,
            "messages": [message.to_ollama() for message in messages],
            "stream": False,
        }
        if tools:
            payload["tools"] = [tool.to_ollama() for tool in tools]

        keep_alive = options.pop("keep_alive", None)
        if keep_alive is not None:
            payload["keep_alive"] = keep_alive
        think = options.pop("think", None)
        if think is not None:
            payload["think"] = think
        sampling = {key: value for key, value in options.items() if value is not None}
        if sampling:
            payload["options"] = sampling

        try:
            response = await self._post_chat(payload)
            response.raise_for_status()
            result = response.json()
        except httpx.HTTPStatusError as e:
            error_msg = f"Ollama HTTP {e.response.status_code} for model {model}: {e.response.text}"
            logger.error(error_msg)
            raise ChatModelError(error_msg, status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            error_msg = f"Ollama request to {self.base_url} failed: {e!r}"
            logger.error(error_msg)
            raise ChatModelError(error_msg) from e
        except ValueError as e:
            raise ChatModelError(f"Ollama returned invalid JSON: {e}") from e

        message = result.get("message") if isinstance(result, dict) else None
        if not isinstance(message, dict):
            raise ChatModelError(f"Ollama response has no message: {result!r}")

        metadata = {
            "provider": "ollama",
            "model": model,
            "prompt_eval_count": result.get("prompt_eval_count") or 0,
            "eval_count": result.get("eval_count") or 0,
            "total_duration_ms": (result.get("total_duration") or 0) / 1_000_000,
        }
        logger.debug(
            "Ollama generation complete: %d tokens, %.2fms",
            metadata["eval_count"],
            metadata["total_duration_ms"],
        )

        reply = ChatMessage.from_ollama({**message, "role": MessageRole.ASSISTANT.value})
        return reply.model_copy(update={"extra_args": {**reply.extra_args, **metadata}})

    def get_provider_name(self) -> str:
        return "ollama"

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


class OllamaChatModelSetup(BaseChatModelSetup):
    """
    Chat model setup for Ollama models (llama3.2, gemma2, mistral, ...).

    Example descriptor:
        >>> ResourceDescriptor.of(
        ...     "ollama_setup",
        ...     connection="ollamaChatModelConnection",
        ...     model="llama3.2:latest",
        ...     prompt="sentimentPrompt",
        ...     tools=["logEmotion"],
        ... )
    """

    def __init__(
        self,
        connection: str,
        model: str = "llama3.2:latest",
        prompt: str | None = None,
        tools: list[str] | None = None,
        temperature: float | None = None,
        num_ctx: int | None = None,
        keep_alive: str | None = None,
        think: bool | None = None,
        get_resource: GetResource | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            connection=connection,
            model=model,
            prompt=prompt,
            tools=tools,
            get_resource=get_resource,
            **kwargs,
        )
        self.temperature = temperature
        self.num_ctx = num_ctx
        self.keep_alive = keep_alive
        self.think = think

    def model_options(self) -> dict[str, Any]:
        return {
            "temperature": self.temperature,
            "num_ctx": self.num_ctx,
            "keep_alive": self.keep_alive,
            "think": self.think,
        }
