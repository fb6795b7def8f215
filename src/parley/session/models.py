"""Agent profile model.

An agent is what the user selects before chatting: which model answers,
which persona prompt frames the conversation, and which thinking and tool
options the requests carry.
"""

from datetime import datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator, model_validator

from ..conversation import ChatMessage
from ..llm import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE, THINK_LEVELS, ToolRequest
from ..prompts import PromptPersona, build_system_message


class AgentProfile(BaseModel):
    """The active agent of a chat session."""

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(description="Display name")
    model: str = Field(description="Backend model identifier")
    persona: PromptPersona = Field(default=PromptPersona.BUSINESS)
    custom_prompt: str | None = Field(default=None, description="System prompt for the custom persona")
    allow_thinking: bool = Field(default=False, description="Request reasoning output")
    think: bool | str | None = Field(default=None, description="Thinking toggle or effort level")
    tools: list[ToolRequest] = Field(default_factory=list)
    temperature: float | None = Field(default=DEFAULT_TEMPERATURE, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=DEFAULT_MAX_TOKENS, gt=0)

    @field_validator("think")
    @classmethod
    def _check_think(cls, value: bool | str | None) -> bool | str | None:
        if isinstance(value, str) and value not in THINK_LEVELS:
            raise ValueError(f"think must be a boolean or one of {', '.join(THINK_LEVELS)}")
        return value

    @model_validator(mode="after")
    def _check_custom_prompt(self) -> "AgentProfile":
        if self.persona is PromptPersona.CUSTOM and not (self.custom_prompt or "").strip():
            raise ValueError("custom persona requires custom_prompt")
        return self

    def system_message(self, now: datetime | None = None) -> ChatMessage:
        """Build a fresh system message for this agent's persona."""
        return build_system_message(self.persona, self.custom_prompt, now)
