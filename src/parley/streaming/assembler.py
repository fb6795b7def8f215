"""Incremental assembly of a streamed assistant response.

Hidden design decisions:
- Two independent buffers (thinking, content) fed from one interleaved stream
- First meaningful title wins for the whole response
- Markdown rendering off the caller's stack, display updates through a presenter
- Cancellation discards partial buffers; transport failure keeps them
"""

import asyncio
from collections.abc import AsyncIterable, Callable
from enum import Enum
from typing import Any

from ..conversation import ChatMessage, new_assistant_message
from ..errors import StreamInterruptedError
from ..rendering import MarkdownRenderer
from .models import BufferUpdate, Channel, StreamFragment
from .presenter import InlinePresenter, Presenter
from .title import TitleExtractor


class AssemblerState(str, Enum):
    """Lifecycle of one response generation cycle."""

    IDLE = "idle"
    STREAMING = "streaming"
    DONE = "done"


class StreamAssembler:
    """Consumes response fragments and rebuilds the assistant message.

    One assembler drives one response. Fragments are applied exactly once,
    in delivery order; ``None`` and empty keep-alive fragments are skipped.

    Usage:
        assembler = StreamAssembler(on_update=view.apply)
        title = await assembler.consume(service.stream_chat(request))
        message = assembler.to_message()
    """

    def __init__(
        self,
        renderer: MarkdownRenderer | None = None,
        presenter: Presenter | None = None,
        on_update: Callable[[BufferUpdate], None] | None = None,
        pacing_delay: float = 0.0,
    ) -> None:
        """Initialize the assembler.

        Args:
            renderer: Markdown renderer for display HTML
            presenter: Presentation context hop (inline if omitted)
            on_update: Called on the presentation context after each fragment
            pacing_delay: Seconds to yield after each fragment so the display
                can catch up (0 disables)
        """
        self._renderer = renderer or MarkdownRenderer()
        self._presenter = presenter or InlinePresenter()
        self._on_update = on_update
        self._pacing_delay = pacing_delay
        self._titles = TitleExtractor()
        self._debug_callback: Any | None = None

        self.state = AssemblerState.IDLE
        self.thinking = ""
        self.content = ""
        self.is_thinking = False
        self.is_collecting_thoughts = False
        self.fragment_count = 0

    @property
    def title(self) -> str:
        """Title captured so far (empty if none)."""
        return self._titles.title

    @property
    def has_captured_title(self) -> bool:
        return self._titles.has_captured_title

    def set_debug_callback(self, callback: Any) -> None:
        """Set the debug callback.

        Args:
            callback: Callable(level: str, component: str, message: str)
        """
        self._debug_callback = callback

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "Stream", message)

    def _start(self) -> None:
        self.state = AssemblerState.STREAMING
        self.thinking = ""
        self.content = ""
        self.is_thinking = False
        self.is_collecting_thoughts = False
        self.fragment_count = 0
        self._titles.reset()

    def _discard(self) -> None:
        self.thinking = ""
        self.content = ""
        self.is_collecting_thoughts = False
        self.state = AssemblerState.DONE

    def apply(self, fragment: StreamFragment) -> Channel:
        """Apply one fragment to the buffers.

        Returns:
            The channel whose buffer changed
        """
        if self._titles.observe(fragment):
            self._debug("info", f"Captured title: {self.title!r}")

        self.fragment_count += 1
        if fragment.is_thinking:
            self.thinking = (self.thinking + fragment.text).lstrip()
            self.is_thinking = True
            self.is_collecting_thoughts = True
            return Channel.THINKING

        self.content = (self.content + fragment.text).lstrip()
        self.is_collecting_thoughts = False
        return Channel.CONTENT

    async def _publish(self, channel: Channel) -> None:
        text = self.thinking if channel is Channel.THINKING else self.content
        html = await self._renderer.render_html_async(text)
        if self._on_update is None:
            return

        update = BufferUpdate(
            channel=channel,
            text=text,
            html=html,
            is_thinking=self.is_thinking,
            is_collecting_thoughts=self.is_collecting_thoughts,
        )
        await self._presenter.post(lambda: self._on_update(update))

    async def consume(self, fragments: AsyncIterable[StreamFragment | None]) -> str:
        """Consume a fragment stream until it completes.

        Args:
            fragments: Async iterable of fragments, ``None`` or empty for keep-alives

        Returns:
            The captured session title, or an empty string

        Raises:
            StreamInterruptedError: If the source fails mid-stream. The
                partial buffers stay available.
            asyncio.CancelledError: If the consuming task is cancelled. The
                partial buffers are discarded.
        """
        if self.state is AssemblerState.STREAMING:
            raise RuntimeError("StreamAssembler is already consuming a stream")

        self._start()
        self._debug("debug", "Stream started")
        try:
            async for fragment in fragments:
                if fragment is None or fragment.is_empty:
                    continue

                channel = self.apply(fragment)
                await self._publish(channel)

                if self._pacing_delay > 0:
                    await asyncio.sleep(self._pacing_delay)
        except asyncio.CancelledError:
            self._debug("warning", f"Stream cancelled after {self.fragment_count} fragment(s)")
            self._discard()
            raise
        except Exception as e:
            self.state = AssemblerState.DONE
            self._debug("error", f"Stream failed after {self.fragment_count} fragment(s): {e}")
            raise StreamInterruptedError(str(e), title=self.title) from e

        self.state = AssemblerState.DONE
        self._debug(
            "info",
            f"Stream complete: {self.fragment_count} fragment(s), "
            f"{len(self.content)} content / {len(self.thinking)} thinking chars",
        )
        return self.title

    def to_message(self) -> ChatMessage:
        """Materialize the assistant message from the current buffers."""
        return new_assistant_message(self.content, thoughts_content=self.thinking or None)
