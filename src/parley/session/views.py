"""Observable message views.

The UI mirrors the conversation through a list of views: one per
transcript message, plus a trailing placeholder while an assistant answer
is streaming. Views carry display state (rendered HTML, loading and
thinking flags); the transcript carries the messages themselves.
"""

from collections.abc import Callable, Iterator
from enum import Enum
from itertools import count

from ..conversation import ChatMessage, Role, get_content_without_file, get_file_name
from ..rendering import MarkdownRenderer, normalize_display_text
from ..streaming import BufferUpdate, Channel

_view_ids = count(1)


class MessageView:
    """Display state of one conversation entry."""

    def __init__(
        self,
        role: Role,
        message: ChatMessage | None = None,
        is_loaded: bool = True,
    ) -> None:
        self.id = next(_view_ids)
        self.role = role
        self.message = message
        self.is_loaded = is_loaded
        self.text = ""
        self.html = ""
        self.thoughts_text = ""
        self.thoughts_html = ""
        self.file_name: str | None = None
        self.is_thinking = False
        self.is_collecting_thoughts = False

    @classmethod
    def placeholder(cls) -> "MessageView":
        """An assistant entry awaiting its streamed answer."""
        return cls(Role.ASSISTANT, is_loaded=False)

    @classmethod
    def from_message(cls, message: ChatMessage, renderer: MarkdownRenderer) -> "MessageView":
        view = cls(message.role)
        view.bind(message, renderer)
        return view

    def bind(self, message: ChatMessage, renderer: MarkdownRenderer) -> None:
        """Attach a completed message and render it for display.

        User views show the text without the file tag and expose the
        file name separately.
        """
        self.message = message
        self.role = message.role
        self.is_loaded = True
        self.is_collecting_thoughts = False

        if message.role is Role.USER:
            self.file_name = get_file_name(message)
            self.text = get_content_without_file(message)
        else:
            self.text = normalize_display_text(message.content)
        self.html = renderer.render_html(self.text)

        self.thoughts_text = normalize_display_text(message.thoughts_content or "")
        self.thoughts_html = renderer.render_html(self.thoughts_text) if self.thoughts_text else ""
        self.is_thinking = bool(self.thoughts_text)

    def apply(self, update: BufferUpdate) -> None:
        """Apply a streamed buffer snapshot."""
        if update.channel is Channel.THINKING:
            self.thoughts_text = update.text
            self.thoughts_html = update.html
        else:
            self.text = update.text
            self.html = update.html
        self.is_thinking = update.is_thinking
        self.is_collecting_thoughts = update.is_collecting_thoughts

    def __repr__(self) -> str:
        return f"MessageView(id={self.id}, role={self.role.value}, loaded={self.is_loaded})"


class ViewEvent(str, Enum):
    """Change notifications published by MessageViewList."""

    ADDED = "added"
    REMOVED = "removed"
    UPDATED = "updated"
    CLEARED = "cleared"


ViewListener = Callable[[ViewEvent, int, MessageView | None], None]


class MessageViewList:
    """Ordered, observable list of message views.

    Listeners are called synchronously with ``(event, index, view)``.
    ``CLEARED`` is sent with index -1 and no view.
    """

    def __init__(self) -> None:
        self._views: list[MessageView] = []
        self._listeners: list[ViewListener] = []

    def add_listener(self, listener: ViewListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: ViewListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event: ViewEvent, index: int, view: MessageView | None) -> None:
        for listener in list(self._listeners):
            listener(event, index, view)

    def append(self, view: MessageView) -> None:
        self._views.append(view)
        self._emit(ViewEvent.ADDED, len(self._views) - 1, view)

    def insert(self, index: int, view: MessageView) -> None:
        self._views.insert(index, view)
        self._emit(ViewEvent.ADDED, self._views.index(view), view)

    def remove(self, view: MessageView) -> bool:
        """Remove a view if present."""
        index = self.index_of(view)
        if index < 0:
            return False
        del self._views[index]
        self._emit(ViewEvent.REMOVED, index, view)
        return True

    def remove_from(self, index: int) -> list[MessageView]:
        """Remove the view at ``index`` and everything after it.

        Removal notifications are sent from the end backwards so indexes
        stay valid for listeners mirroring the list.
        """
        if index < 0 or index >= len(self._views):
            return []
        removed = self._views[index:]
        del self._views[index:]
        for offset in range(len(removed) - 1, -1, -1):
            self._emit(ViewEvent.REMOVED, index + offset, removed[offset])
        return removed

    def notify_updated(self, view: MessageView) -> None:
        index = self.index_of(view)
        if index >= 0:
            self._emit(ViewEvent.UPDATED, index, view)

    def clear(self) -> None:
        self._views.clear()
        self._emit(ViewEvent.CLEARED, -1, None)

    def index_of(self, view: MessageView) -> int:
        for i, candidate in enumerate(self._views):
            if candidate is view:
                return i
        return -1

    def find_by_message(self, message: ChatMessage) -> MessageView | None:
        for view in self._views:
            if view.message is message:
                return view
        return None

    @property
    def last(self) -> MessageView | None:
        return self._views[-1] if self._views else None

    def __len__(self) -> int:
        return len(self._views)

    def __iter__(self) -> Iterator[MessageView]:
        return iter(tuple(self._views))

    def __getitem__(self, index: int) -> MessageView:
        return self._views[index]
