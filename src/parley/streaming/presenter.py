"""Presentation context hop.

Hides how buffer updates reach the display. The assembler never touches UI
state directly: it hands a callback to a presenter, which runs it on the
presentation context (a UI thread, an event loop, or inline).
"""

import asyncio
import threading
from collections.abc import Callable
from typing import Protocol


class Presenter(Protocol):
    """Runs display callbacks on the presentation context."""

    async def post(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` on the presentation context and wait for it."""
        ...


class InlinePresenter:
    """Runs callbacks immediately on the caller's context.

    Suitable when the caller already is the presentation context, such as a
    console REPL or tests.
    """

    async def post(self, callback: Callable[[], None]) -> None:
        callback()


class EventLoopPresenter:
    """Marshals callbacks onto the thread owning ``loop``.

    Callbacks are scheduled with ``call_soon_threadsafe`` so they run in
    submission order; ``post`` returns once the callback has run.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop
        self._thread_id: int | None = None
        loop.call_soon_threadsafe(self._capture_thread)

    def _capture_thread(self) -> None:
        self._thread_id = threading.get_ident()

    async def post(self, callback: Callable[[], None]) -> None:
        if self._thread_id == threading.get_ident():
            callback()
            return

        done = threading.Event()
        error: list[BaseException] = []

        def _run() -> None:
            try:
                callback()
            except BaseException as e:  # noqa: BLE001 - re-raised on the posting side
                error.append(e)
            finally:
                done.set()

        self._loop.call_soon_threadsafe(_run)
        await asyncio.to_thread(done.wait)
        if error:
            raise error[0]
