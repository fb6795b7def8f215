"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
Uses Textual CSS features: nesting, pseudo-classes, variables.
"""

APP_CSS = """
Screen {
    layout: grid;
    grid-size: 2 2;
    grid-columns: 3fr 2fr;
    grid-rows: 1fr auto;
    background: $background;
}

/* Conversation pane */
#conversation {
    height: 100%;
    background: $panel;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;

    &:focus-within {
        border: round $primary;
    }

    &.-maximized {
        column-span: 2;
    }
}

/* Debug log panel */
#debug-panel {
    height: 100%;
    background: $panel;
    border: round $warning 60%;
    border-title-color: $warning;
    border-title-style: bold;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
}

/* Bottom bar */
#bottom-bar {
    column-span: 2;
    height: auto;
    padding: 0 1;
    background: $panel;
    border-top: solid $border;
}

#status-line {
    height: 1;
    padding: 0 1;
    color: $text-muted;
}

ChatInputBar {
    height: 5;
    border: round $primary 60%;
    background: $panel;

    &:focus-within {
        border: round $primary;
    }
}

#chat-input {
    width: 1fr;
    height: 100%;
    border: none;
    padding: 0 1;
    background: transparent;
}

#send-btn {
    width: 10;
    height: 100%;
    margin: 0 0 0 1;
    border: tall $success;
    background: $success;
    color: $background;
    text-style: bold;
}

/* Messages */
MessageWidget {
    width: 100%;
    height: auto;
    margin: 0 0 1 0;
    padding: 0 2;
    background: transparent;

    & .message-header {
        height: 1;
        text-style: bold;
    }

    & .message-file {
        height: auto;
        color: $accent;
    }

    & .message-content {
        height: auto;
        margin: 0;
    }

    & Collapsible {
        margin: 0;
        padding: 0;
        border: none;
        background: $surface;
        color: $text-muted;
    }

    & LoadingIndicator {
        height: 1;
        color: $warning;
    }
}

MessageWidget.user-message {
    border-left: tall $success;
    background: $success 8%;

    & .message-header {
        color: $success;
    }
}

MessageWidget.assistant-message {
    border-left: tall $secondary;
    background: $secondary 8%;

    & .message-header {
        color: $secondary;
    }

    &.-streaming {
        border-left: tall $warning;
    }
}

MessageWidget.system-message {
    display: none;
}

Markdown {
    margin: 0;
    padding: 0;
}
"""
