"""Markdown rendering for message display.

Hidden design decisions:
- markdown-it-py with the CommonMark preset plus tables and strikethrough
- HTML output for message view entries, Rich renderables for the console
- Rendering runs in a worker thread so streaming never blocks on it
"""

import asyncio

from markdown_it import MarkdownIt
from rich.markdown import Markdown


def normalize_display_text(text: str) -> str:
    """Left-trim and normalize line endings before display."""
    return text.replace("\r\n", "\n").replace("\r", "\n").lstrip()


class MarkdownRenderer:
    """Renders message markdown to HTML or plain text."""

    def __init__(self, html: bool = False) -> None:
        """Initialize the renderer.

        Args:
            html: Allow raw HTML in the source to pass through. Off by
                default so ``<file>`` markers never reach the output as tags.
        """
        self._md = (
            MarkdownIt("commonmark", {"html": html, "linkify": False})
            .enable("table")
            .enable("strikethrough")
        )

    def render_html(self, text: str) -> str:
        """Render markdown text to an HTML fragment."""
        return self._md.render(normalize_display_text(text))

    def render_plain_text(self, text: str) -> str:
        """Render markdown text to plain text, one block per line."""
        lines: list[str] = []
        for token in self._md.parse(normalize_display_text(text)):
            if token.type == "inline":
                lines.append(token.content)
            elif token.type in ("fence", "code_block"):
                lines.append(token.content.rstrip("\n"))
        return "\n".join(lines)

    async def render_html_async(self, text: str) -> str:
        """Render to HTML without blocking the event loop."""
        return await asyncio.to_thread(self.render_html, text)

    async def render_plain_text_async(self, text: str) -> str:
        """Render to plain text without blocking the event loop."""
        return await asyncio.to_thread(self.render_plain_text, text)


def render_rich(text: str) -> Markdown:
    """Render text as a Rich markdown renderable for console output."""
    return Markdown(normalize_display_text(text))
