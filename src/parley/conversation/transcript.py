"""Ordered conversation transcript.

Hides how the messages of one chat session are stored and truncated.
The transcript holds at most one system message and it is always first.
"""

from collections.abc import Iterable, Iterator

from .models import ChatMessage, Role


class TranscriptInvariantError(ValueError):
    """Raised when an operation would break the single system message rule."""


class ConversationTranscript:
    """Mutable, ordered sequence of chat messages.

    Lookups are identity based: :meth:`index_of` finds the exact message
    object, never an equal copy. Only the owning session controller should
    mutate a transcript; the UI reads it.
    """

    def __init__(self, messages: Iterable[ChatMessage] | None = None) -> None:
        self._messages: list[ChatMessage] = []
        for message in messages or ():
            self.append(message)

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        """Read-only snapshot of the messages in conversational order."""
        return tuple(self._messages)

    @property
    def system_message(self) -> ChatMessage | None:
        """The leading system message, if any."""
        if self._messages and self._messages[0].role is Role.SYSTEM:
            return self._messages[0]
        return None

    def append(self, message: ChatMessage) -> None:
        """Add a message to the end of the transcript.

        Raises:
            TranscriptInvariantError: If a system message would not be first
        """
        if message.role is Role.SYSTEM and self._messages:
            raise TranscriptInvariantError(
                "A system message can only be the first message of a transcript"
            )
        self._messages.append(message)

    def replace_system_message(self, message: ChatMessage) -> None:
        """Install ``message`` as the leading system message."""
        if message.role is not Role.SYSTEM:
            raise TranscriptInvariantError(f"Expected a system message, got {message.role.value}")
        if self.system_message is not None:
            self._messages[0] = message
        else:
            self._messages.insert(0, message)

    def remove_suffix_from(self, index: int) -> list[ChatMessage]:
        """Remove the message at ``index`` and everything after it.

        Args:
            index: First position to discard

        Returns:
            The removed messages, empty if ``index`` is out of bounds
        """
        if index < 0 or index >= len(self._messages):
            return []
        removed = self._messages[index:]
        del self._messages[index:]
        return removed

    def index_of(self, message: ChatMessage) -> int:
        """Position of this exact message object, or -1."""
        for i, candidate in enumerate(self._messages):
            if candidate is message:
                return i
        return -1

    def messages_from(self, index: int) -> tuple[ChatMessage, ...]:
        """Read-only view of the messages a truncation at ``index`` would drop."""
        if index < 0:
            return ()
        return tuple(self._messages[index:])

    def last_user_message(self) -> ChatMessage | None:
        """Most recent user message, if any."""
        for message in reversed(self._messages):
            if message.role is Role.USER:
                return message
        return None

    def preceding_user_message(self, index: int) -> ChatMessage | None:
        """Nearest user message strictly before ``index``."""
        for i in range(min(index, len(self._messages)) - 1, -1, -1):
            if self._messages[i].role is Role.USER:
                return self._messages[i]
        return None

    def clear(self) -> None:
        """Remove every message."""
        self._messages.clear()

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[ChatMessage]:
        return iter(tuple(self._messages))

    def __getitem__(self, index: int) -> ChatMessage:
        return self._messages[index]
