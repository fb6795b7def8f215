"""Anthropic Claude chat provider.

Uses the official Anthropic Python SDK streaming API. Extended thinking is
requested when the request enables it; ``thinking_delta`` events feed the
thinking channel and ``text_delta`` events feed the answer.
Reference: https://github.com/anthropics/anthropic-sdk-python
"""

from collections.abc import AsyncIterator
from typing import Any

import anthropic
from anthropic import AsyncAnthropic

from ...errors import ChatTransportError
from ...streaming import StreamFragment
from ..base import ChatService, make_fragment, to_provider_messages
from ..models import ChatRequest

# Thinking token budgets per effort level
THINKING_BUDGETS = {"low": 1024, "medium": 4096, "high": 16384}


def _thinking_budget(request: ChatRequest) -> int | None:
    """Token budget for extended thinking, or None if thinking is off."""
    if isinstance(request.think, str):
        return THINKING_BUDGETS.get(request.think)
    if request.think or request.enable_thinking:
        return THINKING_BUDGETS["medium"]
    return None


class AnthropicChatService(ChatService):
    """Anthropic Claude chat service implementation.

    Hidden design decisions:
    - Anthropic API client initialization
    - Message format conversion (system message handling)
    - Extended thinking budget selection
    - Authentication mechanism
    """

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
        base_url: str | None = None,
        **client_kwargs: Any
    ):
        """Initialize Anthropic chat service.

        Args:
            api_key: Anthropic API key
            model: Default model to use (default: claude-sonnet-4-20250514)
            base_url: Optional custom API base URL
            **client_kwargs: Additional kwargs for AsyncAnthropic client
        """
        self._model = model
        self._client = AsyncAnthropic(
            api_key=api_key,
            base_url=base_url,
            **client_kwargs
        )

    @property
    def model(self) -> str:
        """Get the default model name."""
        return self._model

    @property
    def service_type(self) -> str:
        return "anthropic"

    def _request_params(self, request: ChatRequest) -> dict[str, Any]:
        # Extract system message and convert to Anthropic format
        system_message = None
        anthropic_messages = []
        for msg in to_provider_messages(request):
            if msg["role"] == "system":
                system_message = msg["content"]
            else:
                anthropic_messages.append(msg)

        budget = _thinking_budget(request)
        max_tokens = request.max_tokens or 4096  # Anthropic requires max_tokens

        params: dict[str, Any] = {
            "model": request.model or self._model,
            "messages": anthropic_messages,
        }
        if budget is not None:
            # Temperature must stay at its default while thinking
            params["thinking"] = {"type": "enabled", "budget_tokens": budget}
            params["max_tokens"] = max(max_tokens, budget + 1024)
        else:
            params["max_tokens"] = max_tokens
            if request.temperature is not None:
                params["temperature"] = request.temperature
            if request.top_p is not None:
                params["top_p"] = request.top_p

        if system_message:
            params["system"] = system_message
        return params

    async def stream_chat(self, request: ChatRequest) -> AsyncIterator[StreamFragment | None]:
        params = self._request_params(request)
        message_id = ""
        try:
            async with self._client.messages.stream(**params) as stream:
                async for event in stream:
                    event_type = getattr(event, "type", None)
                    if event_type == "message_start":
                        message_id = event.message.id
                    elif event_type == "content_block_delta":
                        delta = event.delta
                        if delta.type == "thinking_delta" and delta.thinking:
                            yield make_fragment(request, message_id, delta.thinking, is_thinking=True)
                        elif delta.type == "text_delta" and delta.text:
                            yield make_fragment(request, message_id, delta.text)
        except anthropic.APIError as e:
            raise ChatTransportError(str(e)) from e

    async def close(self) -> None:
        await self._client.close()
