"""Session title capture from a fragment stream."""

from .models import PLACEHOLDER_TITLES, StreamFragment


def is_meaningful_title(title: str | None) -> bool:
    """Check that a candidate title is non-blank and not a placeholder."""
    return bool(title and title.strip()) and title not in PLACEHOLDER_TITLES


class TitleExtractor:
    """Keeps the first meaningful title seen during one response.

    Once a title is captured later candidates are ignored, so the session
    title stays stable even if the backend echoes different titles.
    """

    def __init__(self) -> None:
        self.has_captured_title = False
        self.title = ""

    def reset(self) -> None:
        self.has_captured_title = False
        self.title = ""

    def observe(self, fragment: StreamFragment) -> bool:
        """Inspect one fragment. Returns True if it supplied the title."""
        if self.has_captured_title or not is_meaningful_title(fragment.title):
            return False
        self.title = fragment.title
        self.has_captured_title = True
        return True
