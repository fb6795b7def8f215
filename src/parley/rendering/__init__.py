"""Rendering module for parley.

Turns message markdown into display formats.
"""

from .markdown import MarkdownRenderer, normalize_display_text, render_rich

__all__ = ["MarkdownRenderer", "normalize_display_text", "render_rich"]
