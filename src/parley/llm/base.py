from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any

from ..conversation import Role, get_content_with_file_display
from ..streaming import FragmentDelta, StreamFragment
from .models import ChatRequest


def to_provider_messages(request: ChatRequest) -> list[dict[str, str]]:
    """Convert the request conversation to plain role/content dicts.

    File reference tags are only understood by the inference service, so
    third-party providers see a readable "The file is: ..." line instead.
    """
    return [
        {
            "role": msg.role.value,
            "content": get_content_with_file_display(msg) if msg.role is Role.USER else msg.content,
        }
        for msg in request.messages
    ]


def make_fragment(
    request: ChatRequest,
    completion_id: str,
    text: str,
    is_thinking: bool = False,
) -> StreamFragment:
    """Build a fragment in the inference service's wire shape.

    Providers stamp every fragment with the request title so the title
    policy applies the same way regardless of backend.
    """
    delta = FragmentDelta(
        content=None if is_thinking else text,
        thoughts_content=text if is_thinking else None,
    )
    return StreamFragment(
        id=completion_id,
        chat_session_id=request.chat_session_id,
        title=request.title,
        conversation_id=request.conversation.id,
        delta=delta,
        is_thinking=is_thinking,
    )


class ChatService(ABC):
    """Abstract base class for chat services.

    This module hides the design decision of which backend produces the
    response stream. Implementations must handle backend-specific details like:
    - Client setup and authentication
    - Request format conversion
    - Mapping backend events onto thinking and answer channels
    - Wrapping transport errors in ChatTransportError

    Implementations never retry or reconnect: a broken stream simply ends
    (by raising) and the consumer keeps whatever it accumulated.

    Supports async context manager protocol for proper resource cleanup:
        async with service:
            async for fragment in service.stream_chat(request):
                ...
        # Automatically cleaned up
    """

    @abstractmethod
    def stream_chat(self, request: ChatRequest) -> AsyncIterator[StreamFragment | None]:
        """Stream a chat completion.

        Args:
            request: Conversation, model and options

        Returns:
            Lazy async iterator of fragments; ``None`` entries are keep-alives

        Raises:
            ChatTransportError: While iterating, if the backend fails
        """

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""

    @property
    @abstractmethod
    def service_type(self) -> str:
        """Get the service type identifier."""

    async def __aenter__(self) -> "ChatService":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors during cleanup.
        This is a known harmless race condition in httpx/anyio cleanup:
        https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise
