"""OpenAI-compatible chat provider.

Covers OpenAI itself and any Chat Completions compatible endpoint
(DeepSeek, Ollama, vLLM) through ``base_url``. Reasoning output is read from
the non-standard ``reasoning_content`` / ``reasoning`` delta fields those
backends use.
"""

from collections.abc import AsyncIterator
from typing import Any

import openai
from openai import AsyncOpenAI

from ...errors import ChatTransportError
from ...streaming import StreamFragment
from ..base import ChatService, make_fragment, to_provider_messages
from ..models import THINK_LEVELS, ChatRequest


def _reasoning_text(delta: Any) -> str | None:
    """Extract reasoning text from a streamed delta, if the backend sent any."""
    for field in ("reasoning_content", "reasoning"):
        value = getattr(delta, field, None)
        if value is None and getattr(delta, "model_extra", None):
            value = delta.model_extra.get(field)
        if isinstance(value, str) and value:
            return value
    return None


class OpenAIChatService(ChatService):
    """OpenAI chat service implementation.

    Hidden design decisions:
    - OpenAI API client initialization
    - Message format conversion
    - Mapping reasoning deltas onto the thinking channel
    - Authentication mechanism
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        base_url: str | None = None,
        organization: str | None = None,
        provider_name: str = "openai",
        **client_kwargs: Any
    ):
        """Initialize OpenAI chat service.

        Args:
            api_key: OpenAI API key
            model: Default model, used when the request names none
            base_url: Optional custom API base URL
            organization: Optional organization ID
            provider_name: Identifier reported by ``service_type``
            **client_kwargs: Additional kwargs for AsyncOpenAI client
        """
        self._model = model
        self._provider_name = provider_name
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            organization=organization,
            **client_kwargs
        )

    @property
    def model(self) -> str:
        """Get the default model name."""
        return self._model

    @property
    def service_type(self) -> str:
        return self._provider_name

    def _request_params(self, request: ChatRequest) -> dict[str, Any]:
        # Build request params, only including optional values if set
        params: dict[str, Any] = {
            "model": request.model or self._model,
            "messages": to_provider_messages(request),
            "stream": True,
        }
        if request.temperature is not None:
            params["temperature"] = request.temperature
        if request.top_p is not None:
            params["top_p"] = request.top_p
        if request.max_tokens is not None:
            params["max_tokens"] = request.max_tokens
        if isinstance(request.think, str) and request.think in THINK_LEVELS:
            params["reasoning_effort"] = request.think
        return params

    async def stream_chat(self, request: ChatRequest) -> AsyncIterator[StreamFragment | None]:
        params = self._request_params(request)
        try:
            stream = await self._client.chat.completions.create(**params)
            async for chunk in stream:
                if not chunk.choices:
                    # Usage-only or keep-alive chunk
                    yield None
                    continue

                delta = chunk.choices[0].delta
                reasoning = _reasoning_text(delta)
                if reasoning:
                    yield make_fragment(request, chunk.id, reasoning, is_thinking=True)
                if delta.content:
                    yield make_fragment(request, chunk.id, delta.content)
        except openai.APIError as e:
            raise ChatTransportError(str(e)) from e

    async def close(self) -> None:
        await self._client.close()
