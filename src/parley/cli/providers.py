"""Factory functions for the CLI.

Centralizes creation of the chat service, agent profile and history store
from environment variables. Hides configuration details from command
implementations.
"""

import os

import typer
from pydantic import ValidationError
from rich.console import Console

from ..llm import ChatService, create_chat_service
from ..memory import ChatHistoryStore, create_chat_history_store
from ..prompts import PromptPersona
from ..session import AgentProfile

# Default console for output
_console = Console()

# Model used when PARLEY_MODEL is unset, per provider
DEFAULT_MODELS = {
    "server": "default",
    "openai": "gpt-4o",
    "deepseek": "deepseek-reasoner",
    "ollama": "llama3.1",
    "anthropic": "claude-sonnet-4-20250514",
    "gemini": "gemini-2.5-flash",
}

# API key environment variable per provider
API_KEY_VARS = {
    "openai": "OPENAI_API_KEY",
    "deepseek": "DEEPSEEK_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "gemini": "GEMINI_API_KEY",
}


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def get_provider_name() -> str:
    return os.getenv("PARLEY_PROVIDER", "server").lower()


def get_chat_service(console: Console | None = None) -> ChatService | None:
    """Create the chat service from environment variables.

    Args:
        console: Optional Rich console for output

    Returns:
        Chat service instance, or None if not configured

    Environment variables:
        PARLEY_PROVIDER: server, openai, deepseek, ollama, anthropic, gemini (default: server)
        PARLEY_BASE_URL: Inference service URL, or OpenAI-compatible base URL override
        OPENAI_API_KEY, DEEPSEEK_API_KEY, ANTHROPIC_API_KEY, GEMINI_API_KEY
    """
    con = console or _console
    provider = get_provider_name()
    config: dict = {}

    base_url = os.getenv("PARLEY_BASE_URL")
    if base_url and provider in ("server", "openai", "deepseek", "ollama"):
        config["base_url"] = base_url

    key_var = API_KEY_VARS.get(provider)
    if key_var is not None:
        api_key = os.getenv(key_var)
        if not api_key:
            con.print(f"[yellow]Warning: {key_var} not set, {provider} provider unavailable[/yellow]")
            return None
        config["api_key"] = api_key

    if provider != "server":
        config["model"] = get_model_name(provider)

    try:
        return create_chat_service(provider, **config)
    except (ValueError, TypeError) as e:
        con.print(f"[red]Error: {e}[/red]")
        return None


def require_chat_service(console: Console | None = None) -> ChatService:
    """Get the chat service, exiting if it is not configured."""
    con = console or _console
    service = get_chat_service(con)
    if service is None:
        con.print("[red]Error: chat provider not configured[/red]")
        raise typer.Exit(code=1)
    return service


def get_model_name(provider: str | None = None) -> str:
    provider = provider or get_provider_name()
    return os.getenv("PARLEY_MODEL", DEFAULT_MODELS.get(provider, "default"))


def get_agent(console: Console | None = None) -> AgentProfile:
    """Build the active agent from environment variables.

    Environment variables:
        PARLEY_AGENT_NAME: Display name (default: Assistant)
        PARLEY_MODEL: Model identifier
        PARLEY_PERSONA: business, military or custom (default: business)
        PARLEY_CUSTOM_PROMPT: Prompt text, or @path to read it from a file
        PARLEY_ENABLE_THINKING: Request reasoning output (default: false)
        PARLEY_THINK: low, medium, high, or a boolean
    """
    con = console or _console

    custom_prompt = os.getenv("PARLEY_CUSTOM_PROMPT")
    if custom_prompt and custom_prompt.startswith("@"):
        try:
            with open(custom_prompt[1:], encoding="utf-8") as f:
                custom_prompt = f.read()
        except OSError as e:
            con.print(f"[red]Error: cannot read custom prompt: {e}[/red]")
            raise typer.Exit(code=1)

    think: bool | str | None = os.getenv("PARLEY_THINK")
    if isinstance(think, str) and think.lower() in ("true", "false"):
        think = think.lower() == "true"

    try:
        return AgentProfile(
            name=os.getenv("PARLEY_AGENT_NAME", "Assistant"),
            model=get_model_name(),
            persona=PromptPersona(os.getenv("PARLEY_PERSONA", "business").lower()),
            custom_prompt=custom_prompt,
            allow_thinking=_env_flag("PARLEY_ENABLE_THINKING") or bool(think),
            think=think,
        )
    except (ValueError, ValidationError) as e:
        con.print(f"[red]Error: invalid agent configuration: {e}[/red]")
        raise typer.Exit(code=1)


def get_history_store(backend: str | None = None, path: str | None = None) -> ChatHistoryStore:
    """Create the chat history store.

    Environment variables:
        PARLEY_HISTORY_BACKEND: memory or sqlite (default: sqlite)
        PARLEY_HISTORY_PATH: SQLite database path (default: ./parley_history.db)
    """
    backend = backend or os.getenv("PARLEY_HISTORY_BACKEND", "sqlite")
    config = {}
    if backend == "sqlite":
        db_path = path or os.getenv("PARLEY_HISTORY_PATH")
        if db_path:
            config["path"] = db_path
    return create_chat_history_store(backend, **config)
