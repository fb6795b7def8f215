"""Unit tests for markdown rendering."""
import pytest
from rich.markdown import Markdown

from parley.rendering import MarkdownRenderer, normalize_display_text, render_rich


class TestMarkdownRenderer:
    """Tests for MarkdownRenderer."""

    def test_render_heading(self):
        """Test rendering a heading."""
        assert "<h1>Title</h1>" in MarkdownRenderer().render_html("# Title")

    def test_raw_html_is_escaped(self):
        """Test that file tags never reach the output as markup."""
        html = MarkdownRenderer().render_html("<file>a.txt</file> text")
        assert "<file>" not in html
        assert "&lt;file&gt;" in html

    def test_tables_and_strikethrough(self):
        """Test enabled extensions."""
        renderer = MarkdownRenderer()
        assert "<table>" in renderer.render_html("| a | b |\n|---|---|\n| 1 | 2 |")
        assert "<s>gone</s>" in renderer.render_html("~~gone~~")

    def test_render_plain_text(self):
        """Test extracting block text."""
        text = MarkdownRenderer().render_plain_text("# Title\n\nSome *text*\n\n```\ncode\n```")
        assert text == "Title\nSome *text*\ncode"

    @pytest.mark.asyncio
    async def test_async_variants(self):
        """Test rendering off the event loop."""
        renderer = MarkdownRenderer()
        assert await renderer.render_html_async("**b**") == renderer.render_html("**b**")
        assert await renderer.render_plain_text_async("x") == "x"


class TestDisplayHelpers:
    """Tests for display text helpers."""

    def test_normalize_display_text(self):
        """Test line ending normalization and left trim."""
        assert normalize_display_text("\r\n  hi\r\nthere\r") == "hi\nthere\n"

    def test_render_rich(self):
        """Test the console renderable."""
        assert isinstance(render_rich("  # Title"), Markdown)
