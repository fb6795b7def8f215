"""Pytest configuration and shared fixtures."""
import asyncio
import os

import pytest

from parley.llm import ChatService
from parley.session import AgentProfile
from parley.streaming import FragmentDelta, StreamFragment


class FakeChatService(ChatService):
    """Chat service replaying scripted fragment streams.

    Each call to ``stream_chat`` consumes the next script; the last script
    is reused once the others are exhausted. A script item may be a
    fragment, ``None`` (keep-alive), an exception to raise, or ``HANG`` to
    block until the consumer is cancelled.
    """

    HANG = object()

    def __init__(self, *scripts):
        self.scripts = list(scripts) or [[]]
        self.requests = []
        self.closed = False

    async def stream_chat(self, request):
        self.requests.append(request)
        script = self.scripts.pop(0) if len(self.scripts) > 1 else self.scripts[0]
        for item in script:
            if item is self.HANG:
                await asyncio.Event().wait()
            elif isinstance(item, BaseException):
                raise item
            else:
                yield item

    async def close(self):
        self.closed = True

    @property
    def service_type(self):
        return "fake"


@pytest.fixture(scope="session")
def api_keys():
    """Return API keys from environment."""
    return {
        "openai": os.getenv("OPENAI_API_KEY"),
        "deepseek": os.getenv("DEEPSEEK_API_KEY"),
        "anthropic": os.getenv("ANTHROPIC_API_KEY"),
        "gemini": os.getenv("GEMINI_API_KEY"),
    }


@pytest.fixture
def fake_service():
    """Return the scripted chat service class."""
    return FakeChatService


@pytest.fixture
def fragment():
    """Return a builder for stream fragments."""
    def _build(text="", thinking=False, title=None):
        return StreamFragment(
            id="cmpl-1",
            title=title,
            delta=FragmentDelta(
                content=None if thinking else text,
                thoughts_content=text if thinking else None,
            ),
            is_thinking=thinking,
        )
    return _build


@pytest.fixture
def agent():
    """Return an agent with the business persona."""
    return AgentProfile(name="Assistant", model="test-model")


@pytest.fixture
def thinking_agent():
    """Return an agent that requests reasoning output."""
    return AgentProfile(
        name="Thinker",
        model="test-model",
        allow_thinking=True,
        think="high",
    )
