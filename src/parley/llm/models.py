"""Request models for chat services.

The request mirrors what the inference service expects: the full
conversation plus sampling, thinking and tool options.
"""

from datetime import datetime, timezone
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from ..conversation import ChatMessage
from ..streaming import CLIENT_PLACEHOLDER_TITLE

DEFAULT_TEMPERATURE = 0.1
DEFAULT_MAX_TOKENS = 8192
DEFAULT_USER = "Unknown"

# Reasoning effort levels accepted by ``think`` besides plain booleans
THINK_LEVELS = ("low", "medium", "high")


def _client_datetime() -> str:
    return datetime.now().strftime("%A, %B %d, %Y %I:%M:%S %p")


class ToolRequest(BaseModel):
    """A tool the backend may call while answering."""

    model_config = ConfigDict(frozen=True)

    tool_name: str = Field(description="Tool identifier")
    mcp_server_name: str | None = Field(default=None, description="Owning MCP server, if any")

    @property
    def is_mcp_server_tool(self) -> bool:
        return bool(self.mcp_server_name and self.mcp_server_name.strip())


class Conversation(BaseModel):
    """A conversation as sent over the wire."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    messages: list[ChatMessage] = Field(default_factory=list)

    @field_serializer("messages")
    def _serialize_messages(self, messages: list[ChatMessage]) -> list[dict[str, str]]:
        return [message.to_wire() for message in messages]


class ChatRequest(BaseModel):
    """A streamed chat completion request."""

    model: str = Field(description="Model (or agent model) to answer with")
    chat_session_id: UUID | None = Field(default=None)
    title: str = Field(default=CLIENT_PLACEHOLDER_TITLE, description="Current session title")
    chat_session_updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    conversation: Conversation = Field(default_factory=Conversation)
    temperature: float | None = Field(default=DEFAULT_TEMPERATURE, ge=0.0, le=2.0)
    top_p: float | None = Field(default=None, ge=0.0, le=1.0)
    max_tokens: int | None = Field(default=DEFAULT_MAX_TOKENS, gt=0)
    user: str = Field(default=DEFAULT_USER)
    client_datetime: str = Field(default_factory=_client_datetime)
    enable_thinking: bool | None = Field(default=None)
    think: bool | str | None = Field(
        default=None,
        description="Thinking toggle or effort level: low, medium, high"
    )
    tools: list[ToolRequest] = Field(default_factory=list)

    @property
    def messages(self) -> list[ChatMessage]:
        return self.conversation.messages

    def to_payload(self) -> dict:
        """JSON payload for the inference service."""
        return self.model_dump(mode="json", exclude_none=True)
