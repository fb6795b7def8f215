"""Data models for conversation messages.

Hides the representation of a chat message and how new messages of each
role are constructed. The wire field names match the inference service JSON.
"""

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

_OPENING_TAG = re.compile(r"<(\w+)")

# File references look like containers but carry the attachment name
_PRESERVED_TAGS = frozenset({"file"})


class Role(str, Enum):
    """Role of the message sender."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """A single message in a conversation.

    Messages are mutable: the file reference codec rewrites ``content`` of
    user messages in place. Transcript lookups are identity based, so two
    messages with equal fields are still distinct entries.
    """

    model_config = ConfigDict(validate_assignment=True)

    role: Role = Field(description="Role of the message sender")
    content: str = Field(default="", description="Message text")
    thoughts_content: str | None = Field(
        default=None,
        description="Reasoning output, only populated for assistant messages"
    )

    def to_wire(self) -> dict[str, str]:
        """Convert to the JSON shape sent to the inference service."""
        payload = {"role": self.role.value, "content": self.content}
        if self.thoughts_content:
            payload["thoughts_content"] = self.thoughts_content
        return payload


def normalize_content(content: str) -> str:
    """Strip outer HTML container tags and surrounding whitespace.

    Text pasted from a rendered message arrives wrapped as ``<p>...</p>``.
    Containers are unwrapped recursively as long as the opening tag has a
    matching closing tag at the very end. ``<file>`` references are kept.
    """
    if not content or not content.strip():
        return content

    trimmed = content.strip()
    while trimmed.startswith("<") and trimmed.endswith(">"):
        first_tag_end = trimmed.find(">")
        match = _OPENING_TAG.match(trimmed[: first_tag_end + 1])
        if first_tag_end <= 0 or not match or match.group(1).lower() in _PRESERVED_TAGS:
            break

        closing_tag = f"</{match.group(1)}>"
        if not trimmed.lower().endswith(closing_tag.lower()):
            break

        inner = trimmed[first_tag_end + 1 : len(trimmed) - len(closing_tag)]
        # Sibling containers such as "<p>a</p><p>b</p>" are not one wrapper
        if closing_tag.lower() in inner.lower():
            break
        trimmed = inner.strip()

    return trimmed


def new_user_message(content: str) -> ChatMessage:
    """Create a user message from raw input text."""
    return ChatMessage(role=Role.USER, content=normalize_content(content or ""))


def new_assistant_message(content: str = "", thoughts_content: str | None = None) -> ChatMessage:
    """Create an assistant message."""
    return ChatMessage(
        role=Role.ASSISTANT,
        content=content,
        thoughts_content=thoughts_content or None,
    )


def new_system_message(content: str) -> ChatMessage:
    """Create a system message with already rendered prompt text.

    Persona lookup lives in :mod:`parley.prompts`; see
    :func:`parley.prompts.build_system_message`.
    """
    return ChatMessage(role=Role.SYSTEM, content=content)
