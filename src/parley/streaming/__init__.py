"""Streaming module for parley.

Turns the inference service's fragment stream into an assistant message.
"""

from .assembler import AssemblerState, StreamAssembler
from .models import (
    CLIENT_PLACEHOLDER_TITLE,
    PLACEHOLDER_TITLES,
    SERVER_PLACEHOLDER_TITLE,
    BufferUpdate,
    Channel,
    FragmentDelta,
    StreamFragment,
)
from .presenter import EventLoopPresenter, InlinePresenter, Presenter
from .title import TitleExtractor, is_meaningful_title

__all__ = [
    "AssemblerState",
    "BufferUpdate",
    "CLIENT_PLACEHOLDER_TITLE",
    "Channel",
    "EventLoopPresenter",
    "FragmentDelta",
    "InlinePresenter",
    "PLACEHOLDER_TITLES",
    "Presenter",
    "SERVER_PLACEHOLDER_TITLE",
    "StreamAssembler",
    "StreamFragment",
    "TitleExtractor",
    "is_meaningful_title",
]
