"""Error types raised by parley.

Only selection state and transport problems surface as exceptions; codec and
transcript operations degrade to no-ops instead.
"""


class ChatError(Exception):
    """Base class for chat errors."""

    def is_retryable(self) -> bool:
        """Override in subclasses to control retry behavior."""
        return False


class NoActiveAgentError(ChatError):
    """A send or regeneration was requested with no agent selected."""

    def __init__(self, message: str = "Please select an agent before sending a message."):
        super().__init__(message)


class ChatTransportError(ChatError):
    """The inference backend could not be reached or failed mid-request (retryable)."""

    def __init__(self, message: str):
        super().__init__(f"Transport error: {message}")

    def is_retryable(self) -> bool:
        return True


class StreamInterruptedError(ChatError):
    """A response stream ended abnormally.

    The partial result is kept: ``title`` holds whatever title was captured
    before the failure and the assembler still holds the partial buffers.
    """

    def __init__(self, message: str, title: str = ""):
        super().__init__(f"Stream interrupted: {message}")
        self.title = title

    def is_retryable(self) -> bool:
        return True


class SessionNotFoundError(ChatError):
    """A chat session id is not present in the history store."""

    def __init__(self, session_id: str):
        super().__init__(f"Chat session not found: {session_id}")
        self.session_id = session_id
