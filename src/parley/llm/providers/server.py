"""Inference service chat provider.

Talks to the chat inference service over HTTP. The service answers
``POST {base_url}/streamed`` with a JSON array of fragments that is written
incrementally, so the body is decoded one array element at a time as bytes
arrive instead of waiting for the closing bracket.
"""

import json
from collections.abc import AsyncIterator
from typing import Any

import httpx
from pydantic import ValidationError

from ...errors import ChatTransportError
from ...streaming import StreamFragment
from ..base import ChatService
from ..models import ChatRequest

DEFAULT_BASE_URL = "http://localhost:5000/chat/completions"
STREAM_PATH = "streamed"

# Separators between array elements; NDJSON bodies decode the same way
_SEPARATORS = " \t\r\n,[]"


class JsonArrayStreamDecoder:
    """Incrementally decodes the elements of a streamed JSON array.

    Feed text chunks as they arrive; every complete element is returned as
    soon as its closing brace is seen. Partial elements stay buffered until
    the next chunk.
    """

    def __init__(self) -> None:
        self._decoder = json.JSONDecoder()
        self._buffer = ""

    @property
    def pending(self) -> str:
        """Undecoded text left in the buffer."""
        return self._buffer.strip(_SEPARATORS)

    def feed(self, chunk: str) -> list[Any]:
        self._buffer += chunk
        items: list[Any] = []
        pos = 0
        length = len(self._buffer)

        while True:
            while pos < length and self._buffer[pos] in _SEPARATORS:
                pos += 1
            if pos >= length:
                break
            try:
                item, end = self._decoder.raw_decode(self._buffer, pos)
            except json.JSONDecodeError:
                # Element not complete yet
                break
            items.append(item)
            pos = end

        self._buffer = self._buffer[pos:]
        return items


class ServerChatService(ChatService):
    """Chat service backed by the inference service.

    Hidden design decisions:
    - HTTP client lifecycle (one pooled httpx.AsyncClient per service)
    - Incremental decoding of the streamed JSON array
    - Mapping HTTP failures onto ChatTransportError
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float | None = 300.0,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        **client_kwargs: Any
    ):
        """Initialize the inference service client.

        Args:
            base_url: Chat completions endpoint, without the ``/streamed`` suffix
            timeout: Request timeout in seconds (None waits forever)
            headers: Extra HTTP headers for every request
            transport: Optional httpx transport (used by tests)
            **client_kwargs: Additional kwargs for httpx.AsyncClient
        """
        self._base_url = base_url.rstrip("/") + "/"
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout,
            headers=headers,
            transport=transport,
            **client_kwargs
        )
        self._debug_callback: Any | None = None

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def service_type(self) -> str:
        return "server"

    def set_debug_callback(self, callback: Any) -> None:
        """Set the debug callback.

        Args:
            callback: Callable(level: str, component: str, message: str)
        """
        self._debug_callback = callback

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "Server", message)

    async def stream_chat(self, request: ChatRequest) -> AsyncIterator[StreamFragment | None]:
        payload = request.to_payload()
        self._debug("debug", f"POST {self._base_url}{STREAM_PATH} ({len(request.messages)} message(s))")

        decoder = JsonArrayStreamDecoder()
        try:
            async with self._client.stream("POST", STREAM_PATH, json=payload) as response:
                if response.is_error:
                    body = (await response.aread()).decode(errors="replace")
                    raise ChatTransportError(
                        f"Inference service returned HTTP {response.status_code}: {body[:200]}"
                    )

                async for chunk in response.aiter_text():
                    for item in decoder.feed(chunk):
                        fragment = self._to_fragment(item)
                        if fragment is not None:
                            yield fragment
        except httpx.HTTPError as e:
            raise ChatTransportError(str(e) or type(e).__name__) from e

        if decoder.pending:
            raise ChatTransportError(f"Stream ended inside a fragment: {decoder.pending[:80]!r}")

    def _to_fragment(self, item: Any) -> StreamFragment | None:
        if item is None:
            return None
        try:
            return StreamFragment.model_validate(item)
        except ValidationError as e:
            self._debug("warning", f"Skipping malformed fragment: {e.error_count()} error(s)")
            return None

    async def close(self) -> None:
        await self._client.aclose()
