"""Unit tests for CLI configuration and input commands."""
import pytest
import typer
from rich.console import Console
from typer.testing import CliRunner

from parley.cli import app
from parley.cli.providers import get_agent, get_chat_service, get_history_store, get_model_name
from parley.llm import OpenAIChatService, ServerChatService
from parley.memory import InMemoryChatHistoryStore, SQLiteChatHistoryStore
from parley.prompts import PromptPersona
from parley.ui.commands import parse_file_command
from parley.ui.config import LogLevel

_ENV_VARS = (
    "PARLEY_PROVIDER",
    "PARLEY_BASE_URL",
    "PARLEY_MODEL",
    "PARLEY_AGENT_NAME",
    "PARLEY_PERSONA",
    "PARLEY_CUSTOM_PROMPT",
    "PARLEY_ENABLE_THINKING",
    "PARLEY_THINK",
    "PARLEY_HISTORY_BACKEND",
    "PARLEY_HISTORY_PATH",
    "OPENAI_API_KEY",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove parley configuration from the environment."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def quiet_console():
    """Return a console that records instead of printing."""
    return Console(record=True, width=120)


class TestParseFileCommand:
    """Tests for the /file input command."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("/file report.pdf Summarize it", ("report.pdf", "Summarize it")),
            ("/FILE report.pdf", ("report.pdf", "")),
            ("  /file a.txt  ", ("a.txt", "")),
            ("/file", (None, "")),
            ("/filex a.txt", (None, "/filex a.txt")),
            ("hello /file a.txt", (None, "hello /file a.txt")),
        ],
    )
    def test_parse(self, text, expected):
        """Test splitting the command from the message."""
        assert parse_file_command(text) == expected


class TestLogLevel:
    """Tests for LogLevel conversions."""

    def test_from_string(self):
        """Test parsing level names."""
        assert LogLevel.from_string("WARN") == LogLevel.WARNING
        assert LogLevel.from_string("error") == LogLevel.ERROR
        assert LogLevel.from_string("bogus") == LogLevel.DEBUG

    def test_name(self):
        """Test level display names."""
        assert LogLevel.name(LogLevel.WARNING) == "WARN"
        assert LogLevel.name(99) == "UNKNOWN"


class TestProviders:
    """Tests for environment-driven configuration."""

    def test_default_service_is_inference_server(self, clean_env, quiet_console):
        """Test that the server provider needs no key."""
        clean_env.setenv("PARLEY_BASE_URL", "http://inference.test/chat/completions")
        service = get_chat_service(quiet_console)

        assert isinstance(service, ServerChatService)
        assert service.base_url == "http://inference.test/chat/completions/"

    def test_missing_api_key_returns_none(self, clean_env, quiet_console):
        """Test that a keyed provider without a key is unavailable."""
        clean_env.setenv("PARLEY_PROVIDER", "openai")

        assert get_chat_service(quiet_console) is None
        assert "OPENAI_API_KEY" in quiet_console.export_text()

    def test_openai_service_from_env(self, clean_env, quiet_console):
        """Test creating a keyed provider."""
        clean_env.setenv("PARLEY_PROVIDER", "OpenAI")
        clean_env.setenv("OPENAI_API_KEY", "sk-test")
        clean_env.setenv("PARLEY_MODEL", "gpt-4o-mini")

        service = get_chat_service(quiet_console)

        assert isinstance(service, OpenAIChatService)
        assert service.model == "gpt-4o-mini"

    def test_model_defaults_per_provider(self, clean_env):
        """Test default model names."""
        assert get_model_name("anthropic").startswith("claude")
        assert get_model_name("server") == "default"

    def test_agent_from_env(self, clean_env, quiet_console):
        """Test building the agent profile."""
        clean_env.setenv("PARLEY_AGENT_NAME", "Analyst")
        clean_env.setenv("PARLEY_PERSONA", "military")
        clean_env.setenv("PARLEY_THINK", "medium")

        agent = get_agent(quiet_console)

        assert agent.name == "Analyst"
        assert agent.persona == PromptPersona.MILITARY
        assert agent.think == "medium"
        assert agent.allow_thinking

    def test_agent_boolean_think(self, clean_env, quiet_console):
        """Test that true/false strings become booleans."""
        clean_env.setenv("PARLEY_THINK", "false")
        agent = get_agent(quiet_console)

        assert agent.think is False
        assert not agent.allow_thinking

    def test_custom_prompt_from_file(self, clean_env, quiet_console, tmp_path):
        """Test reading a custom prompt with the @path form."""
        prompt_file = tmp_path / "prompt.txt"
        prompt_file.write_text("Answer in haiku.")
        clean_env.setenv("PARLEY_PERSONA", "custom")
        clean_env.setenv("PARLEY_CUSTOM_PROMPT", f"@{prompt_file}")

        agent = get_agent(quiet_console)

        assert agent.system_message().content == "Answer in haiku."

    def test_invalid_agent_exits(self, clean_env, quiet_console):
        """Test that a custom persona without a prompt exits."""
        clean_env.setenv("PARLEY_PERSONA", "custom")
        with pytest.raises(typer.Exit):
            get_agent(quiet_console)

    def test_history_store_selection(self, clean_env, tmp_path):
        """Test choosing the history backend."""
        assert isinstance(get_history_store("memory"), InMemoryChatHistoryStore)

        store = get_history_store(path=str(tmp_path / "h.db"))
        assert isinstance(store, SQLiteChatHistoryStore)
        assert store.db_path == tmp_path / "h.db"


class TestCliApp:
    """Tests for the Typer application."""

    def test_sessions_command_lists_empty_store(self, tmp_path):
        """Test listing sessions from a new database."""
        result = CliRunner().invoke(app, ["sessions", "--history-path", str(tmp_path / "h.db")])

        assert result.exit_code == 0
        assert "No stored sessions" in result.output

    def test_sessions_delete_unknown(self, tmp_path):
        """Test deleting a session that does not exist."""
        result = CliRunner().invoke(
            app,
            ["sessions", "--history-path", str(tmp_path / "h.db"), "--delete", "not-a-uuid"],
        )
        assert result.exit_code == 1
