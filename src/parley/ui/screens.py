"""Modal screens for the TUI.

This module hides how stored sessions are presented for selection.
"""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import OptionList, Static
from textual.widgets.option_list import Option

from ..memory import ChatSessionItem
from .config import SESSION_TITLE_MAX_LENGTH


class SessionsScreen(ModalScreen[str | None]):
    """Pick a stored chat session.

    Dismisses with the selected session id, or None when cancelled.
    """

    CSS = """
    SessionsScreen {
        align: center middle;
        background: $background 70%;
    }

    #sessions-dialog {
        width: 80;
        height: auto;
        max-height: 24;
        border: tall $accent;
        background: $surface;
        padding: 1 2;
    }

    #sessions-title {
        width: 100%;
        text-align: center;
        text-style: bold;
        color: $accent;
        padding: 0 0 1 0;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=False),
    ]

    def __init__(self, sessions: list[ChatSessionItem]) -> None:
        super().__init__()
        self._sessions = sessions

    def compose(self) -> ComposeResult:
        with Vertical(id="sessions-dialog"):
            yield Static("Chat Sessions", id="sessions-title")
            if not self._sessions:
                yield Static("No stored sessions.")
                return
            options = []
            for item in self._sessions:
                title = item.title
                if len(title) > SESSION_TITLE_MAX_LENGTH:
                    title = title[:SESSION_TITLE_MAX_LENGTH - 3] + "..."
                stamp = item.updated_at.astimezone().strftime("%Y-%m-%d %H:%M")
                options.append(Option(f"{stamp}  {title}", id=str(item.id)))
            yield OptionList(*options, id="sessions-list")

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        self.dismiss(event.option.id)

    def action_cancel(self) -> None:
        self.dismiss(None)
