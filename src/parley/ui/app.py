"""Main Textual TUI application.

Orchestrates the UI components and drives a ChatSessionController.
"""

import asyncio
import contextlib

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Footer, Header, Static

from ..errors import ChatError, NoActiveAgentError, StreamInterruptedError
from ..llm import ChatService
from ..memory import ChatHistoryStore
from ..session import AgentProfile, ChatSessionController
from .callbacks import DebugRouter, TextualPresenter
from .commands import parse_file_command
from .config import SESSION_LIST_LIMIT, STREAM_PACING_DELAY, LogLevel
from .screens import SessionsScreen
from .styles import APP_CSS
from .themes import PARLEY_MACCHIATO
from .widgets import ChatInputBar, ConversationPane, DebugPanel


class ParleyApp(App):
    """Textual TUI for chatting with an agent."""

    CSS = APP_CSS
    TITLE = "Parley"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("ctrl+r", "regenerate", "Regenerate"),
        Binding("escape", "cancel_stream", "Cancel"),
        Binding("ctrl+n", "new_session", "New"),
        Binding("ctrl+o", "open_sessions", "Sessions"),
        Binding("ctrl+b", "toggle_maximize_chat", "Max Chat"),
        Binding("ctrl+d", "toggle_debug", "Debug"),
    ]

    def __init__(
        self,
        service: ChatService,
        agent: AgentProfile | None = None,
        history: ChatHistoryStore | None = None,
        user: str | None = None,
        log_level: str | None = None,
    ) -> None:
        super().__init__()
        self._log_level = log_level
        self._pending_file: str | None = None
        self.controller = ChatSessionController(
            service,
            history=history,
            presenter=TextualPresenter(self),
            user=user,
            pacing_delay=STREAM_PACING_DELAY,
        )
        if agent is not None:
            self.controller.select_agent(agent)

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield ConversationPane(id="conversation")
        yield DebugPanel(id="debug-panel")
        with Vertical(id="bottom-bar"):
            yield Static("", id="status-line")
            yield ChatInputBar(id="chat-input-bar")
        yield Footer()

    async def on_mount(self) -> None:
        self.register_theme(PARLEY_MACCHIATO)
        self.theme = "parley-macchiato"

        log_panel = self.query_one("#debug-panel", DebugPanel)
        router = DebugRouter(log_panel, app=self)
        self.controller.set_debug_callback(router)
        if hasattr(self.controller.service, "set_debug_callback"):
            self.controller.service.set_debug_callback(router)

        if self._log_level is not None:
            log_panel.log_level = LogLevel.from_string(self._log_level)
            log_panel.show()
            log_panel.info("TUI", f"Log panel enabled with level: {self._log_level.upper()}")
        self._sync_layout()

        if self.controller.history is not None:
            await self.controller.history.connect()
            log_panel.info("TUI", f"History backend: {self.controller.history.backend_type}")

        await self.controller.new_session()
        self.query_one("#conversation", ConversationPane).bind(self.controller.views)
        self._update_status()
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    def _log(self, level: str, message: str) -> None:
        self.query_one("#debug-panel", DebugPanel).log("TUI", message, LogLevel.from_string(level))

    def _update_status(self) -> None:
        agent = self.controller.agent
        agent_text = f"{agent.name} ({agent.model})" if agent else "no agent selected"
        self.sub_title = self.controller.title
        self.query_one("#conversation", ConversationPane).border_subtitle = self.controller.title

        parts = [agent_text, self.controller.service.service_type]
        if self._pending_file:
            parts.append(f"file: {self._pending_file}")
        if self.controller.is_streaming:
            parts.append("streaming...")
        self.query_one("#status-line", Static).update("  |  ".join(parts))

    def _sync_layout(self) -> None:
        log_panel = self.query_one("#debug-panel", DebugPanel)
        conversation = self.query_one("#conversation", ConversationPane)
        conversation.set_class(not log_panel.display, "-maximized")

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        """Handle user input submission."""
        file_name, text = parse_file_command(event.value)
        if file_name is not None:
            self._pending_file = file_name
            if not text:
                self.notify(f"File attached: {file_name}", timeout=2)
                self._update_status()
                return
        if not text.strip():
            return

        attached = self._pending_file
        self._pending_file = None
        self._send(text, attached)

    async def _run_turn(self, operation) -> None:
        try:
            self._update_status()
            await operation
        except NoActiveAgentError as e:
            self.notify(str(e), severity="warning", timeout=4)
        except StreamInterruptedError as e:
            self._log("warning", str(e))
            self.notify(f"{e} (partial answer kept)", severity="warning", timeout=5)
        except ChatError as e:
            self._log("error", str(e))
            self.notify(str(e)[:80], severity="error", timeout=5)
        finally:
            self._update_status()

    @work(exclusive=True, group="chat")
    async def _send(self, text: str, file_name: str | None) -> None:
        await self._run_turn(self.controller.send_message(text, file_name))

    @work(exclusive=True, group="chat")
    async def _regenerate(self) -> None:
        await self._run_turn(self.controller.regenerate_last())

    @work(exclusive=True, group="chat")
    async def _new_session(self) -> None:
        await self._run_turn(self.controller.new_session())
        self.notify("New session", timeout=2)

    @work(exclusive=True, group="chat")
    async def _load_session(self, session_id: str) -> None:
        await self._run_turn(self.controller.load_session(session_id))

    @work(group="control")
    async def _cancel(self) -> None:
        if await self.controller.cancel():
            self.notify("Cancelled", severity="warning", timeout=2)
        self._update_status()

    @work(group="control")
    async def _open_sessions(self) -> None:
        history = self.controller.history
        if history is None:
            self.notify("No history store configured", severity="warning", timeout=3)
            return
        items = await history.list_sessions(limit=SESSION_LIST_LIMIT)

        def _on_selected(session_id: str | None) -> None:
            if session_id:
                self._load_session(session_id)

        self.push_screen(SessionsScreen(items), _on_selected)

    def action_regenerate(self) -> None:
        self._regenerate()

    def action_cancel_stream(self) -> None:
        self._cancel()

    def action_new_session(self) -> None:
        self._new_session()

    def action_open_sessions(self) -> None:
        self._open_sessions()

    def action_toggle_debug(self) -> None:
        """Toggle the log panel visibility."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        is_visible = log_panel.toggle()
        self._sync_layout()
        self.notify(f"Log panel {'shown' if is_visible else 'hidden'}", timeout=2)

    def action_toggle_maximize_chat(self) -> None:
        """Toggle maximize for the conversation pane."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        if log_panel.display:
            log_panel.hide()
        else:
            log_panel.show()
        self._sync_layout()


async def run_textual_tui(
    service: ChatService,
    agent: AgentProfile | None = None,
    history: ChatHistoryStore | None = None,
    user: str | None = None,
    log_level: str | None = None,
) -> None:
    """Run the Textual TUI.

    Args:
        service: Chat backend
        agent: Agent to select on startup
        history: Optional chat history store
        user: User id recorded on new sessions
        log_level: Log level for panel (debug/info/warning/error), None to hide
    """
    app = ParleyApp(
        service=service,
        agent=agent,
        history=history,
        user=user,
        log_level=log_level,
    )
    try:
        await app.run_async()
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
    finally:
        with contextlib.suppress(RuntimeError):
            await app.controller.cancel()
        if history is not None:
            await history.disconnect()
        await service.close()
