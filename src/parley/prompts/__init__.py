"""Prompt management module.

Externalizes persona system prompts to text files for easy customization.
Prompts can be overridden by placing files in the working directory.
"""

from datetime import datetime
from enum import Enum
from functools import lru_cache
from pathlib import Path

from ..conversation import ChatMessage, new_system_message

# Default prompts directory (package location)
_PROMPTS_DIR = Path(__file__).parent

DATETIME_PLACEHOLDER = "{current_datetime}"


class PromptPersona(str, Enum):
    """Persona that selects the system prompt of an agent."""

    BUSINESS = "business"
    MILITARY = "military"
    CUSTOM = "custom"


@lru_cache(maxsize=16)
def load_prompt(name: str) -> str:
    """Load a prompt from file.

    Search order:
    1. Current working directory: ./prompts/{name}.txt
    2. Package prompts directory: parley/prompts/{name}.txt

    Args:
        name: Prompt name (without .txt extension)

    Returns:
        Prompt text content

    Raises:
        FileNotFoundError: If prompt file not found in any location
    """
    filename = f"{name}.txt"

    # Check working directory first (allows user overrides)
    local_path = Path.cwd() / "prompts" / filename
    if local_path.exists():
        return local_path.read_text(encoding="utf-8")

    # Fall back to package prompts
    package_path = _PROMPTS_DIR / filename
    if package_path.exists():
        return package_path.read_text(encoding="utf-8")

    raise FileNotFoundError(
        f"Prompt '{name}' not found. Searched:\n"
        f"  - {local_path}\n"
        f"  - {package_path}"
    )


def format_current_datetime(now: datetime | None = None) -> str:
    """Format a timestamp the way prompts and requests present it."""
    return (now or datetime.now()).strftime("%A, %B %d, %Y %I:%M:%S %p")


def get_system_prompt(
    persona: PromptPersona | str,
    custom_content: str | None = None,
    now: datetime | None = None,
) -> str:
    """Render the system prompt for a persona.

    Args:
        persona: Business, military or custom persona
        custom_content: Prompt text for the custom persona
        now: Timestamp substituted for ``{current_datetime}`` (defaults to now)

    Returns:
        Prompt text with the current date and time filled in

    Raises:
        ValueError: If the persona is unknown, or custom without content
    """
    persona = PromptPersona(persona)
    if persona is PromptPersona.CUSTOM:
        if not custom_content or not custom_content.strip():
            raise ValueError("Custom persona requires prompt content")
        template = custom_content
    else:
        template = load_prompt(persona.value)

    # Plain replacement: custom prompts may contain literal braces (JSON)
    return template.strip().replace(DATETIME_PLACEHOLDER, format_current_datetime(now))


def build_system_message(
    persona: PromptPersona | str,
    custom_content: str | None = None,
    now: datetime | None = None,
) -> ChatMessage:
    """Create a fresh system message for a persona."""
    return new_system_message(get_system_prompt(persona, custom_content, now))


def clear_cache() -> None:
    """Clear the prompt cache (useful after modifying prompt files)."""
    load_prompt.cache_clear()


__all__ = [
    "DATETIME_PLACEHOLDER",
    "PromptPersona",
    "build_system_message",
    "clear_cache",
    "format_current_datetime",
    "get_system_prompt",
    "load_prompt",
]
