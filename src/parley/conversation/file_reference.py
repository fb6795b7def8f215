"""Inline file reference tags inside user message content.

A user message may name one attached file with a ``<file>NAME</file>``
marker embedded in its text. This module hides the marker format:

- detection is case-insensitive and non-greedy, first match wins
- emitted tags are always lowercase and placed at the start of content
- display helpers strip every marker, not just the first

All functions are no-ops (or return the content unchanged) for messages
that are not from the user.
"""

import re

from .models import ChatMessage, Role

FILE_TAG_PATTERN = re.compile(r"<file>(.*?)</file>", re.IGNORECASE | re.DOTALL)
FILE_DISPLAY_PREFIX = "The file is: "


def _file_tag(filename: str) -> str:
    return f"<file>{filename}</file>"


def has_file(message: ChatMessage) -> bool:
    """Check whether a user message carries a file reference."""
    if message.role is not Role.USER:
        return False
    return FILE_TAG_PATTERN.search(message.content) is not None


def add_file(message: ChatMessage, filename: str) -> ChatMessage:
    """Attach a file reference to a user message.

    An existing tag is replaced in place; otherwise the tag is prepended.
    Calling this twice with the same name leaves the content unchanged.

    Args:
        message: Message to decorate (modified in place)
        filename: Name of the attached file

    Returns:
        The same message, for chaining
    """
    if message.role is not Role.USER:
        return message

    # A callable replacement keeps backslashes in filenames literal
    replaced, count = FILE_TAG_PATTERN.subn(
        lambda _: _file_tag(filename), message.content, count=1
    )
    if count:
        message.content = replaced
    else:
        message.content = f"{_file_tag(filename)}{message.content}"
    return message


def get_file_name(message: ChatMessage) -> str | None:
    """Get the name inside the first file reference tag, if any."""
    if message.role is not Role.USER:
        return None
    match = FILE_TAG_PATTERN.search(message.content)
    return match.group(1) if match else None


def get_content_without_file(message: ChatMessage) -> str:
    """Get the message text with every file reference tag removed."""
    if not has_file(message):
        return message.content
    return FILE_TAG_PATTERN.sub("", message.content).strip()


def get_content_with_file_display(message: ChatMessage) -> str:
    """Get the message text with the tag replaced by a readable file line.

    Example:
        ``"<file>report.pdf</file>Summarize"`` becomes
        ``"The file is: report.pdf\\nSummarize"``.
    """
    if not has_file(message):
        return message.content
    remaining = get_content_without_file(message)
    return f"{FILE_DISPLAY_PREFIX}{get_file_name(message)}\n{remaining}".strip()
