"""Session module for parley.

Hides how a chat session's transcript, its observable views and the
in-flight response cycle are kept consistent.
"""

from .controller import ChatSessionController
from .models import AgentProfile
from .views import MessageView, MessageViewList, ViewEvent, ViewListener

__all__ = [
    "AgentProfile",
    "ChatSessionController",
    "MessageView",
    "MessageViewList",
    "ViewEvent",
    "ViewListener",
]
