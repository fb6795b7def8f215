"""Input commands shared by the TUI and the console REPL."""

from .config import FILE_COMMAND


def parse_file_command(text: str) -> tuple[str | None, str]:
    """Split a ``/file NAME [message]`` input.

    Returns:
        Tuple of (file name or None, remaining message text). Input that
        does not start with the command is returned unchanged.
    """
    stripped = text.strip()
    if not stripped.lower().startswith(FILE_COMMAND):
        return None, text

    rest = stripped[len(FILE_COMMAND):]
    if rest and not rest[0].isspace():
        # "/filex" is not the command
        return None, text

    parts = rest.strip().split(maxsplit=1)
    if not parts:
        return None, ""
    file_name = parts[0]
    message = parts[1] if len(parts) > 1 else ""
    return file_name, message
