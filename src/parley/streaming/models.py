"""Data models for streamed responses.

Hides the wire shape of one element of the response stream produced by the
inference service, and the shape of the buffer update events the assembler
publishes to the presentation layer.
"""

from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

# Placeholder titles the server and client use before a real title exists
SERVER_PLACEHOLDER_TITLE = "Chat Session (Server)"
CLIENT_PLACEHOLDER_TITLE = "Chat Session (Client)"
PLACEHOLDER_TITLES = frozenset({SERVER_PLACEHOLDER_TITLE, CLIENT_PLACEHOLDER_TITLE})


class FragmentDelta(BaseModel):
    """The text increment carried by one fragment."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    role: str = Field(default="assistant", description="Role of the partial message")
    content: str | None = Field(default=None, description="Answer channel increment")
    thoughts_content: str | None = Field(default=None, description="Thinking channel increment")


class StreamFragment(BaseModel):
    """One element of the asynchronous response stream."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(default="", description="Completion id shared by a response")
    chat_session_id: UUID | None = Field(default=None)
    title: str | None = Field(default=None, description="Candidate session title")
    conversation_id: str = Field(default="")
    delta: FragmentDelta = Field(default_factory=FragmentDelta)
    is_thinking: bool = Field(default=False, description="Delta belongs to the thinking channel")

    @property
    def text(self) -> str:
        """Increment for the channel selected by ``is_thinking``."""
        if self.is_thinking:
            return self.delta.thoughts_content or self.delta.content or ""
        return self.delta.content or ""

    @property
    def is_empty(self) -> bool:
        """True for keep-alive fragments that carry neither text nor a title."""
        return not self.text and not self.title


class Channel(str, Enum):
    """Output channel of a buffer update."""

    THINKING = "thinking"
    CONTENT = "content"


@dataclass(frozen=True)
class BufferUpdate:
    """Snapshot published after each applied fragment."""

    channel: Channel
    text: str
    html: str
    is_thinking: bool
    is_collecting_thoughts: bool
