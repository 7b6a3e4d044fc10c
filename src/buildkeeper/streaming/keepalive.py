"""Keep-alive heartbeat for log streaming sessions.

Platforms close idle log-streaming sockets. The ticker sends a no-op
payload at a fixed interval while the session is open and cancels
itself once it sees the session closed.

Public API (the "studs"):
    StreamingSession: Protocol for the session the ticker writes to
    KeepAliveTicker: Periodic background heartbeat for one session
    StreamingLogToken: Owns a session's ticker; cancel() when done streaming
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Protocol, runtime_checkable

_logger = logging.getLogger(__name__)

DEFAULT_KEEP_ALIVE_SECONDS = 75.0
KEEP_ALIVE_PAYLOAD = "keep alive"


@runtime_checkable
class StreamingSession(Protocol):
    """The part of a streaming session the ticker relies on."""

    def is_open(self) -> bool:
        """Whether the session can still carry messages."""
        ...

    async def send_text(self, text: str) -> None:
        """Send a text frame."""
        ...


class KeepAliveTicker:
    """Send a keep-alive payload over a session at a fixed interval.

    Runs as an asyncio task on the loop that called start(). Cancellation
    is idempotent and may come from the owner or from the ticker itself
    when it finds the session closed.
    """

    def __init__(
        self,
        session: StreamingSession,
        interval_seconds: float = DEFAULT_KEEP_ALIVE_SECONDS,
        payload: str = KEEP_ALIVE_PAYLOAD,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")
        self._session = session
        self._interval = interval_seconds
        self._payload = payload
        self._task: asyncio.Task[None] | None = None
        self._cancelled = False
        self.sent = 0

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the ticker on the running event loop.

        Raises:
            RuntimeError: If called without a running loop or after cancel()
        """
        if self._cancelled:
            raise RuntimeError("A cancelled ticker cannot be restarted")
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self._run())

    def cancel(self) -> None:
        """Stop ticking. Safe to call repeatedly and from within the ticker."""
        self._cancelled = True
        task = self._task
        if task is None or task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        if task is not current:
            task.cancel()

    async def aclose(self) -> None:
        """Cancel and wait until the background task has finished."""
        self.cancel()
        if self._task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await self._task

    async def _run(self) -> None:
        while not self._cancelled:
            await asyncio.sleep(self._interval)
            if self._cancelled:
                return
            if not self._session.is_open():
                _logger.debug("Session closed, cancelling keep-alive ticker")
                self.cancel()
                return
            try:
                await self._session.send_text(self._payload)
            except Exception as e:
                _logger.warning("Failed to send keep-alive: %s", e)
            else:
                self.sent += 1


class StreamingLogToken:
    """Handle for an open log stream; keeps the session alive until cancelled.

    Example:
        async with StreamingLogToken(session) as token:
            async for line in stream:
                ...
    """

    def __init__(
        self, session: StreamingSession, interval_seconds: float = DEFAULT_KEEP_ALIVE_SECONDS
    ) -> None:
        self._session = session
        self._ticker = KeepAliveTicker(session, interval_seconds)
        self._ticker.start()

    @property
    def ticker(self) -> KeepAliveTicker:
        return self._ticker

    def cancel(self) -> None:
        self._ticker.cancel()

    async def __aenter__(self) -> StreamingLogToken:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self._ticker.aclose()


__all__ = [
    "DEFAULT_KEEP_ALIVE_SECONDS",
    "KEEP_ALIVE_PAYLOAD",
    "KeepAliveTicker",
    "StreamingLogToken",
    "StreamingSession",
]
