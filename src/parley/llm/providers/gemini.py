"""Google Gemini chat provider.

Uses the official Google GenAI SDK streaming API.
Reference: https://github.com/googleapis/python-genai

Thought summaries are requested when thinking is enabled; parts flagged
``thought`` go to the thinking channel.
"""

from collections.abc import AsyncIterator
from typing import Any
from uuid import uuid4

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ...errors import ChatTransportError
from ...streaming import StreamFragment
from ..base import ChatService, make_fragment, to_provider_messages
from ..models import ChatRequest

# Default safety settings - relaxed to avoid blocking code-related content
DEFAULT_SAFETY_SETTINGS = [
    types.SafetySetting(category="HARM_CATEGORY_HARASSMENT", threshold="BLOCK_ONLY_HIGH"),
    types.SafetySetting(category="HARM_CATEGORY_HATE_SPEECH", threshold="BLOCK_ONLY_HIGH"),
    types.SafetySetting(category="HARM_CATEGORY_SEXUALLY_EXPLICIT", threshold="BLOCK_ONLY_HIGH"),
    types.SafetySetting(category="HARM_CATEGORY_DANGEROUS_CONTENT", threshold="BLOCK_ONLY_HIGH"),
]


class GeminiChatService(ChatService):
    """Google Gemini chat service implementation.

    Hidden design decisions:
    - Google GenAI client initialization
    - Message format conversion (system instruction, "model" role)
    - Thought summary extraction
    - Relaxed safety settings to avoid blocking code content
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        **client_kwargs: Any
    ):
        """Initialize Gemini chat service.

        Args:
            api_key: Google AI API key
            model: Default model (gemini-2.5-flash, gemini-2.5-pro)
            **client_kwargs: Additional kwargs for Client
        """
        self._model = model
        self._client = genai.Client(api_key=api_key, **client_kwargs)

    @property
    def model(self) -> str:
        """Get the default model name."""
        return self._model

    @property
    def service_type(self) -> str:
        return "gemini"

    def _convert_messages(self, request: ChatRequest) -> tuple[str | None, list[types.Content]]:
        """Convert the request conversation to Gemini format.

        Returns:
            Tuple of (system_instruction, contents)
        """
        system_instruction = None
        contents = []

        for msg in to_provider_messages(request):
            if msg["role"] == "system":
                system_instruction = msg["content"]
            elif msg["role"] == "user":
                contents.append(types.Content(
                    role="user",
                    parts=[types.Part(text=msg["content"])]
                ))
            elif msg["role"] == "assistant":
                contents.append(types.Content(
                    role="model",
                    parts=[types.Part(text=msg["content"])]
                ))

        return system_instruction, contents

    def _build_config(self, request: ChatRequest, system_instruction: str | None) -> types.GenerateContentConfig:
        # Use tool_config with mode=NONE to disable automatic function detection
        tool_config = types.ToolConfig(
            function_calling_config=types.FunctionCallingConfig(mode="NONE")
        )
        config = types.GenerateContentConfig(
            temperature=request.temperature,
            top_p=request.top_p,
            system_instruction=system_instruction,
            safety_settings=DEFAULT_SAFETY_SETTINGS,
            tool_config=tool_config,
        )
        if request.max_tokens is not None:
            config.max_output_tokens = request.max_tokens
        if request.think or request.enable_thinking:
            config.thinking_config = types.ThinkingConfig(include_thoughts=True)
        return config

    async def stream_chat(self, request: ChatRequest) -> AsyncIterator[StreamFragment | None]:
        system_instruction, contents = self._convert_messages(request)
        config = self._build_config(request, system_instruction)
        completion_id = str(uuid4())

        try:
            stream = await self._client.aio.models.generate_content_stream(
                model=request.model or self._model, contents=contents, config=config
            )
            async for chunk in stream:
                if not chunk.candidates or not chunk.candidates[0].content:
                    yield None
                    continue

                for part in chunk.candidates[0].content.parts or []:
                    if part.text:
                        yield make_fragment(request, completion_id, part.text, is_thinking=bool(part.thought))
        except genai_errors.APIError as e:
            raise ChatTransportError(str(e)) from e

    async def close(self) -> None:
        """Close the Gemini client.

        Note: The Google GenAI client doesn't require explicit closing,
        but we implement this for interface consistency.
        """
        pass
