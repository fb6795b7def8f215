"""UI configuration constants.

Centralizes magic numbers and configuration values for the UI surfaces.
"""


class LogLevel:
    """Log level constants with numeric values for comparison.

    Debug callbacks report levels as strings; panels and consoles compare
    them numerically: DEBUG < INFO < WARNING < ERROR.
    """

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40

    _names = {
        DEBUG: "DEBUG",
        INFO: "INFO",
        WARNING: "WARN",
        ERROR: "ERROR",
    }

    _from_string = {
        "debug": DEBUG,
        "info": INFO,
        "warning": WARNING,
        "warn": WARNING,
        "error": ERROR,
    }

    @classmethod
    def name(cls, level: int) -> str:
        return cls._names.get(level, "UNKNOWN")

    @classmethod
    def from_string(cls, level_str: str) -> int:
        """Convert a level name to its value. Unknown names map to DEBUG."""
        return cls._from_string.get(level_str.lower(), cls.DEBUG)


# Seconds to yield after each streamed fragment so rendering keeps up
STREAM_PACING_DELAY = 0.05

# Input history configuration
INPUT_HISTORY_MAX_SIZE = 100

# Log panel configuration
LOG_TIMESTAMP_FORMAT = "%H:%M:%S"
LOG_MAX_MESSAGE_LENGTH = 500

# Session list configuration
SESSION_LIST_LIMIT = 50
SESSION_TITLE_MAX_LENGTH = 60

# Prefix command attaching a file reference to the next message
FILE_COMMAND = "/file"

# Colors per debug component
COMPONENT_COLORS = {
    "TUI": "cyan",
    "CLI": "cyan",
    "Session": "green",
    "Stream": "magenta",
    "Server": "blue",
    "Memory": "bright_green",
}
