"""Main CLI application using Typer."""
import asyncio
from uuid import UUID

import typer
from dotenv import load_dotenv
from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..conversation import Role
from ..errors import ChatError, NoActiveAgentError, SessionNotFoundError, StreamInterruptedError
from ..memory import ChatHistoryStore
from ..rendering import render_rich
from ..session import ChatSessionController, MessageView, ViewEvent
from ..ui.commands import parse_file_command
from ..ui.config import COMPONENT_COLORS, STREAM_PACING_DELAY, LogLevel
from .providers import get_agent, get_history_store, require_chat_service

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="parley",
    help="Streaming chat client with thinking output, regeneration and session history",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()

_QUIT_COMMANDS = ("/quit", "/exit", "exit", "quit", "q")


def _console_debug_callback(min_level: int):
    """Debug callback printing to the console at or above ``min_level``."""
    def _callback(level: str, component: str, message: str) -> None:
        value = LogLevel.from_string(level)
        if value < min_level:
            return
        color = COMPONENT_COLORS.get(component, "white")
        console.print(
            Text.assemble(
                (f"{LogLevel.name(value):<5} ", "dim"),
                (f"[{component}] ", color),
                (message, "dim"),
            )
        )
    return _callback


class _StreamDisplay:
    """Live rendering of the streaming assistant view."""

    def __init__(self) -> None:
        self._live: Live | None = None

    def _renderable(self, view: MessageView):
        parts = []
        if view.thoughts_text:
            parts.append(
                Panel(
                    Text(view.thoughts_text, style="dim italic"),
                    title="Thinking",
                    title_align="left",
                    border_style="dim",
                )
            )
        parts.append(render_rich(view.text) if view.text else Text("...", style="dim"))
        return Group(*parts)

    def __call__(self, event: ViewEvent, index: int, view: MessageView | None) -> None:
        if view is None or view.role is not Role.ASSISTANT:
            return
        if event is ViewEvent.ADDED and not view.is_loaded:
            console.print("[bold green]Assistant:[/bold green]")
            self._live = Live(self._renderable(view), console=console, refresh_per_second=12)
            self._live.start()
        elif event is ViewEvent.UPDATED and self._live is not None:
            self._live.update(self._renderable(view))
            if view.is_loaded:
                self.stop()
        elif event is ViewEvent.REMOVED and self._live is not None and not view.is_loaded:
            self.stop()

    def stop(self) -> None:
        if self._live is not None:
            self._live.stop()
            self._live = None
            console.print()


async def _print_sessions(history: ChatHistoryStore, limit: int) -> None:
    items = await history.list_sessions(limit=limit)
    if not items:
        console.print("[dim]No stored sessions.[/dim]")
        return

    table = Table(title="Chat Sessions")
    table.add_column("Updated", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("ID", style="dim")
    for item in items:
        table.add_row(
            item.updated_at.astimezone().strftime("%Y-%m-%d %H:%M"),
            item.title,
            str(item.id),
        )
    console.print(table)


@app.command()
def chat(
    history_backend: str | None = typer.Option(
        None,
        "--history",
        "-m",
        help="Chat history: 'memory' (session-only) or 'sqlite' (persistent)"
    ),
    history_path: str | None = typer.Option(
        None,
        "--history-path",
        help="Path for the SQLite history database"
    ),
    session_id: str | None = typer.Option(
        None,
        "--session",
        "-s",
        help="Resume a stored chat session by id"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Print debug trace messages"
    ),
):
    """Interactive console chat with streamed answers."""
    async def _chat():
        service = require_chat_service(console)
        agent = get_agent(console)
        history = get_history_store(history_backend, history_path)
        controller = ChatSessionController(
            service,
            history=history,
            pacing_delay=STREAM_PACING_DELAY,
        )
        if verbose:
            callback = _console_debug_callback(LogLevel.DEBUG)
            controller.set_debug_callback(callback)
            if hasattr(service, "set_debug_callback"):
                service.set_debug_callback(callback)

        display = _StreamDisplay()
        controller.views.add_listener(display)
        controller.select_agent(agent)

        try:
            await history.connect()
            if session_id:
                session = await controller.load_session(session_id)
                console.print(f"[dim]Resumed: {session.title}[/dim]")
            else:
                await controller.new_session()

            console.print("[bold cyan]Parley Chat[/bold cyan]")
            console.print(f"[dim]{agent.name} ({agent.model}) via {service.service_type}[/dim]")
            console.print(
                "[dim]Commands: /file NAME \\[message], /regen, /new, /sessions, "
                "/load ID, /quit[/dim]\n"
            )

            pending_file: str | None = None
            while True:
                try:
                    user_input = console.input("[bold yellow]You:[/bold yellow] ").strip()
                except (KeyboardInterrupt, EOFError):
                    console.print("\n[dim]Goodbye![/dim]")
                    break

                if not user_input:
                    continue
                command = user_input.split(maxsplit=1)[0].lower()

                try:
                    if user_input.lower() in _QUIT_COMMANDS:
                        console.print("[dim]Goodbye![/dim]")
                        break
                    elif command == "/regen":
                        await controller.regenerate_last()
                    elif command == "/new":
                        await controller.new_session()
                        console.print("[dim]New session started.[/dim]")
                    elif command == "/sessions":
                        await _print_sessions(history, limit=20)
                    elif command == "/load":
                        parts = user_input.split(maxsplit=1)
                        if len(parts) < 2:
                            console.print("[yellow]Usage: /load SESSION_ID[/yellow]")
                            continue
                        session = await controller.load_session(parts[1])
                        console.print(f"[dim]Loaded: {session.title} ({len(controller.transcript)} messages)[/dim]")
                    else:
                        file_name, text = parse_file_command(user_input)
                        if file_name is not None:
                            pending_file = file_name
                            if not text:
                                console.print(f"[dim]File attached: {file_name}[/dim]")
                                continue
                        attached, pending_file = pending_file, None
                        await controller.send_message(text, attached)
                except StreamInterruptedError as e:
                    console.print(f"[yellow]{e} (partial answer kept, /regen to retry)[/yellow]")
                except (NoActiveAgentError, SessionNotFoundError) as e:
                    console.print(f"[yellow]{e}[/yellow]")
                except ValueError as e:
                    console.print(f"[red]Error: {e}[/red]")
                except ChatError as e:
                    console.print(f"[red]Error: {e}[/red]")
                finally:
                    display.stop()

        except ChatError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await controller.cancel()
            await history.disconnect()
            await service.close()

    asyncio.run(_chat())


@app.command(name="tui")
def tui_command(
    history_backend: str | None = typer.Option(
        None,
        "--history",
        "-m",
        help="Chat history: 'memory' (session-only) or 'sqlite' (persistent)"
    ),
    history_path: str | None = typer.Option(
        None,
        "--history-path",
        help="Path for the SQLite history database"
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Show log panel with level: debug (all), info, warning, or error"
    ),
):
    """Launch the interactive TUI chat interface."""
    async def _tui():
        from ..ui import run_textual_tui

        service = require_chat_service(console)
        agent = get_agent(console)
        history = get_history_store(history_backend, history_path)

        try:
            await run_textual_tui(
                service=service,
                agent=agent,
                history=history,
                log_level=log_level,
            )
        finally:
            console.print("\n[dim]Goodbye![/dim]")

    try:
        asyncio.run(_tui())
    except KeyboardInterrupt:
        pass


@app.command()
def sessions(
    history_path: str | None = typer.Option(
        None,
        "--history-path",
        help="Path for the SQLite history database"
    ),
    limit: int = typer.Option(
        20,
        "--limit",
        "-l",
        help="Maximum number of sessions to list"
    ),
    delete: str | None = typer.Option(
        None,
        "--delete",
        "-d",
        help="Delete the session with this id"
    ),
):
    """List stored chat sessions."""
    async def _sessions():
        history = get_history_store("sqlite", history_path)
        try:
            await history.connect()
            if delete:
                try:
                    deleted = await history.delete_session(UUID(delete))
                except ValueError:
                    console.print(f"[red]Error: invalid session id: {delete}[/red]")
                    raise typer.Exit(code=1)
                if not deleted:
                    console.print(f"[yellow]Session not found: {delete}[/yellow]")
                    raise typer.Exit(code=1)
                console.print(f"[green]Deleted session {delete}[/green]")
                return
            await _print_sessions(history, limit)
        finally:
            await history.disconnect()

    asyncio.run(_sessions())


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
