"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Input history management
- Message rendering (thinking section, file reference, loading state)
- Mirroring the observable view list into mounted widgets
- Log rendering and level filtering
"""

from datetime import datetime

from rich.markup import escape
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.events import Click
from textual.message import Message
from textual.widgets import Button, Collapsible, LoadingIndicator, Markdown, RichLog, Static, TextArea

from ..conversation import Role
from ..session import MessageView, MessageViewList, ViewEvent
from .config import (
    COMPONENT_COLORS,
    INPUT_HISTORY_MAX_SIZE,
    LOG_MAX_MESSAGE_LENGTH,
    LOG_TIMESTAMP_FORMAT,
    LogLevel,
)

_ROLE_LABELS = {
    Role.USER: ("> You", "user-message"),
    Role.ASSISTANT: ("< Assistant", "assistant-message"),
    Role.SYSTEM: ("System", "system-message"),
}


class ChatInputBar(Horizontal):
    """Chat input bar with TextArea and Send button."""

    class Submitted(Message):
        """Message sent when user submits input."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._history: list[str] = []
        self._history_index: int = -1

    def compose(self) -> ComposeResult:
        text_area = TextArea(id="chat-input", show_line_numbers=False)
        text_area.cursor_blink = False
        yield text_area
        yield Button("Send", id="send-btn", variant="success").with_tooltip(
            "Submit message (Ctrl+J)"
        )

    def on_mount(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        text_area.highlight_cursor_line = False
        text_area.focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            self._submit()

    def on_key(self, event) -> None:
        """Handle keyboard shortcuts.

        Note: terminals do not report modifiers with Enter, so ctrl+j is
        the submit shortcut.
        """
        if event.key == "ctrl+j":
            self._submit()
            event.prevent_default()
            event.stop()
        elif event.key == "up" and self._cursor_location() == (0, 0):
            self._navigate_history(-1)
            event.prevent_default()
            event.stop()
        elif event.key == "down" and self._is_cursor_at_end():
            self._navigate_history(1)
            event.prevent_default()
            event.stop()

    def _cursor_location(self) -> tuple[int, int]:
        return self.query_one("#chat-input", TextArea).cursor_location

    def _is_cursor_at_end(self) -> bool:
        lines = self.query_one("#chat-input", TextArea).text.split("\n")
        return self._cursor_location() == (len(lines) - 1, len(lines[-1]))

    def _navigate_history(self, direction: int) -> None:
        if not self._history:
            return
        text_area = self.query_one("#chat-input", TextArea)
        if direction < 0:
            if self._history_index == -1:
                self._history_index = len(self._history) - 1
            elif self._history_index > 0:
                self._history_index -= 1
        elif self._history_index < len(self._history) - 1:
            self._history_index += 1
        else:
            self._history_index = -1
            text_area.text = ""
            return
        text_area.text = self._history[self._history_index]

    def _submit(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        value = text_area.text.strip()
        if not value:
            return
        if not self._history or self._history[-1] != value:
            self._history.append(value)
            del self._history[:-INPUT_HISTORY_MAX_SIZE]
        self._history_index = -1
        text_area.text = ""
        self.post_message(self.Submitted(value))

    def focus_input(self) -> None:
        self.query_one("#chat-input", TextArea).focus()


class MessageWidget(Vertical):
    """Renders one message view.

    Clicking the widget copies the message text.
    """

    def __init__(self, view: MessageView, **kwargs) -> None:
        label, role_class = _ROLE_LABELS[view.role]
        super().__init__(classes=role_class, **kwargs)
        self.view = view
        self._label = label

    def compose(self) -> ComposeResult:
        timestamp = datetime.now().strftime("%H:%M")
        yield Static(f"{self._label} [{timestamp}]", classes="message-header", markup=False)
        yield Static("", classes="message-file", markup=False)
        with Collapsible(title="Thinking", collapsed=True, id=f"thinking-{self.view.id}"):
            yield Markdown("", classes="message-thoughts")
        yield Markdown("", classes="message-content")
        yield LoadingIndicator()

    def on_mount(self) -> None:
        self.refresh_view()

    def refresh_view(self) -> None:
        """Sync the widgets with the view state."""
        view = self.view

        file_label = self.query_one(".message-file", Static)
        file_label.display = bool(view.file_name)
        if view.file_name:
            file_label.update(f"[file] {view.file_name}")

        thinking = self.query_one(Collapsible)
        thinking.display = bool(view.thoughts_text)
        if view.thoughts_text:
            self.query_one(".message-thoughts", Markdown).update(view.thoughts_text)
            thinking.collapsed = not view.is_collecting_thoughts

        self.query_one(".message-content", Markdown).update(view.text)
        self.query_one(LoadingIndicator).display = not view.is_loaded and not view.text
        self.set_class(not view.is_loaded, "-streaming")

    def on_click(self, event: Click) -> None:
        event.stop()
        if self.view.text:
            self.app.copy_to_clipboard(self.view.text)
            self.app.notify("Copied to clipboard", timeout=2)


class ConversationPane(VerticalScroll):
    """Scrollable conversation that mirrors a MessageViewList."""

    BORDER_TITLE = "Chat"
    BORDER_SUBTITLE = "New session"
    ALLOW_MAXIMIZE = True

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._widgets: dict[int, MessageWidget] = {}
        self._views: MessageViewList | None = None

    def bind(self, views: MessageViewList) -> None:
        """Mirror ``views`` from now on."""
        if self._views is not None:
            self._views.remove_listener(self._on_view_event)
        self._views = views
        views.add_listener(self._on_view_event)
        self._rebuild()

    def _rebuild(self) -> None:
        self.remove_children()
        self._widgets.clear()
        for view in self._views or ():
            self._mount_view(view)

    def _mount_view(self, view: MessageView, index: int | None = None) -> None:
        widget = MessageWidget(view)
        self._widgets[view.id] = widget
        if index is not None and index < len(self.children):
            self.mount(widget, before=index)
        else:
            self.mount(widget)
        self.scroll_end(animate=False)

    def _on_view_event(self, event: ViewEvent, index: int, view: MessageView | None) -> None:
        if event is ViewEvent.CLEARED:
            self.remove_children()
            self._widgets.clear()
        elif event is ViewEvent.ADDED and view is not None:
            self._mount_view(view, index)
        elif event is ViewEvent.REMOVED and view is not None:
            widget = self._widgets.pop(view.id, None)
            if widget is not None:
                widget.remove()
        elif event is ViewEvent.UPDATED and view is not None:
            widget = self._widgets.get(view.id)
            if widget is not None and widget.is_mounted:
                widget.refresh_view()
                self.scroll_end(animate=False)


class DebugPanel(RichLog):
    """Log panel for debug callbacks with level filtering.

    Hidden by default, shown with --log-level or toggled with Ctrl+D.
    """

    BORDER_TITLE = "Log"
    BORDER_SUBTITLE = "Hidden"

    def __init__(self, *args, log_level: int = LogLevel.DEBUG, **kwargs) -> None:
        super().__init__(
            *args,
            markup=True,
            highlight=False,
            auto_scroll=True,
            wrap=True,
            **kwargs
        )
        self._log_level = log_level

    @property
    def log_level(self) -> int:
        return self._log_level

    @log_level.setter
    def log_level(self, level: int) -> None:
        self._log_level = level
        self._update_subtitle()

    def _update_subtitle(self) -> None:
        if self.display:
            self.border_subtitle = f"Level: {LogLevel.name(self._log_level)}"
        else:
            self.border_subtitle = "Hidden"

    def on_mount(self) -> None:
        self.display = False

    def log(self, component: str, message: str, level: int = LogLevel.DEBUG) -> None:
        """Add a log entry if it meets the current level threshold."""
        if level < self._log_level:
            return

        level_colors = {
            LogLevel.DEBUG: "dim white",
            LogLevel.INFO: "cyan",
            LogLevel.WARNING: "yellow",
            LogLevel.ERROR: "red",
        }
        if len(message) > LOG_MAX_MESSAGE_LENGTH:
            message = message[:LOG_MAX_MESSAGE_LENGTH] + "..."
        timestamp = datetime.now().strftime(LOG_TIMESTAMP_FORMAT)
        level_color = level_colors.get(level, "white")
        comp_color = COMPONENT_COLORS.get(component, "white")

        self.write(
            f"[dim]{timestamp}[/] "
            f"[{level_color}]{LogLevel.name(level):<5}[/] "
            f"[{comp_color}]{escape(f'[{component}]')}[/] {escape(message)}"
        )

    def debug(self, component: str, message: str) -> None:
        self.log(component, message, LogLevel.DEBUG)

    def info(self, component: str, message: str) -> None:
        self.log(component, message, LogLevel.INFO)

    def warning(self, component: str, message: str) -> None:
        self.log(component, message, LogLevel.WARNING)

    def error(self, component: str, message: str) -> None:
        self.log(component, message, LogLevel.ERROR)

    def show(self) -> None:
        self.display = True
        self._update_subtitle()

    def hide(self) -> None:
        self.display = False
        self._update_subtitle()

    def toggle(self) -> bool:
        """Toggle visibility. Returns new state."""
        if self.display:
            self.hide()
            return False
        self.show()
        return True
