"""
Parley: a streaming chat client with thinking output, file references,
regeneration and persistent session history.

This package follows Parnas's information hiding principles,
where each module hides a specific design decision.
"""

__version__ = "0.1.0"

from .conversation import ChatMessage, ConversationTranscript, Role
from .errors import (
    ChatError,
    ChatTransportError,
    NoActiveAgentError,
    SessionNotFoundError,
    StreamInterruptedError,
)
from .llm import ChatRequest, ChatService, create_chat_service
from .session import AgentProfile, ChatSessionController
from .streaming import StreamAssembler, StreamFragment

__all__ = [
    "AgentProfile",
    "ChatError",
    "ChatMessage",
    "ChatRequest",
    "ChatService",
    "ChatSessionController",
    "ChatTransportError",
    "ConversationTranscript",
    "NoActiveAgentError",
    "Role",
    "SessionNotFoundError",
    "StreamAssembler",
    "StreamFragment",
    "StreamInterruptedError",
    "create_chat_service",
]
