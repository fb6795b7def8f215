"""Bridges between the chat core and the Textual app.

Hides how core components reach the UI: buffer updates hop onto the app
thread through a presenter, and debug callbacks are routed into the log
panel. Both are safe to call from worker threads.
"""

import asyncio
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from textual.app import App

    from .widgets import DebugPanel


class TextualPresenter:
    """Runs display callbacks on the Textual app thread."""

    def __init__(self, app: "App") -> None:
        self.app = app

    def _on_app_thread(self) -> bool:
        return self.app._thread_id == threading.get_ident()

    async def post(self, callback: Callable[[], None]) -> None:
        if self._on_app_thread():
            callback()
            return
        # call_from_thread blocks until the callback ran on the app thread
        await asyncio.to_thread(self.app.call_from_thread, callback)


class DebugRouter:
    """Debug callback that writes into the log panel.

    Instances are passed wherever a component accepts
    ``set_debug_callback``.
    """

    def __init__(self, panel: "DebugPanel", app: "App | None" = None) -> None:
        self.panel = panel
        self.app = app

    def _call_thread_safe(self, func: Any, *args: Any) -> None:
        if self.app is not None and self.app._thread_id != threading.get_ident():
            self.app.call_from_thread(func, *args)
        else:
            func(*args)

    def __call__(self, level: str, component: str, message: str) -> None:
        if level == "debug":
            self._call_thread_safe(self.panel.debug, component, message)
        elif level == "info":
            self._call_thread_safe(self.panel.info, component, message)
        elif level == "warning":
            self._call_thread_safe(self.panel.warning, component, message)
        else:
            self._call_thread_safe(self.panel.error, component, message)
