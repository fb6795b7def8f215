"""Conversation module for parley.

Messages, the inline file reference codec and the ordered transcript.
"""

from .file_reference import (
    FILE_TAG_PATTERN,
    add_file,
    get_content_with_file_display,
    get_content_without_file,
    get_file_name,
    has_file,
)
from .models import (
    ChatMessage,
    Role,
    new_assistant_message,
    new_system_message,
    new_user_message,
    normalize_content,
)
from .transcript import ConversationTranscript, TranscriptInvariantError

__all__ = [
    "ChatMessage",
    "ConversationTranscript",
    "FILE_TAG_PATTERN",
    "Role",
    "TranscriptInvariantError",
    "add_file",
    "get_content_with_file_display",
    "get_content_without_file",
    "get_file_name",
    "has_file",
    "new_assistant_message",
    "new_system_message",
    "new_user_message",
    "normalize_content",
]
