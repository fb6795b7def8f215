"""Theme definitions for the TUI.

This module hides the design decisions about:
- Color palettes and visual appearance
- Theme variables (borders, scrollbars, etc.)

To add a new theme, define it here and register in the app.
"""

from textual.theme import Theme

# Catppuccin Macchiato palette, tuned for long chat transcripts
PARLEY_MACCHIATO = Theme(
    name="parley-macchiato",
    primary="#8aadf4",      # Blue - main accent
    secondary="#c6a0f6",    # Mauve - assistant accent
    accent="#eed49f",       # Yellow - highlights
    foreground="#cad3f5",   # Text
    background="#181926",   # Crust
    success="#a6da95",      # Green - user accent
    warning="#f5a97f",      # Peach - streaming and warnings
    error="#ed8796",        # Red - errors
    surface="#24273a",      # Base
    panel="#1e2030",        # Mantle
    dark=True,
    variables={
        "block-cursor-foreground": "#181926",
        "block-cursor-background": "#f4dbd6",
        "block-cursor-text-style": "bold",
        "block-hover-background": "#363a4f 20%",

        "input-cursor-background": "#cad3f5",
        "input-cursor-foreground": "#181926",
        "input-selection-background": "#8aadf4 30%",

        "border": "#494d64",
        "border-blurred": "#363a4f",

        "scrollbar": "#363a4f",
        "scrollbar-hover": "#494d64",
        "scrollbar-active": "#8aadf4",
        "scrollbar-background": "#1e2030",

        "footer-foreground": "#b8c0e0",
        "footer-background": "#181926",
        "footer-key-foreground": "#eed49f",
        "footer-key-background": "#363a4f",

        "text-muted": "#6e738d",
        "text-disabled": "#494d64",

        "link-color": "#8aadf4",
        "link-style": "underline",
        "link-color-hover": "#b7bdf8",
    },
)
