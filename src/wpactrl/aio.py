"""asyncio adapter for control sessions.

Blocking session calls run in worker threads; an asyncio.Lock serializes
coroutines sharing one session so they queue up instead of failing with
BusyError. A cancelled call keeps its place until its worker thread returns.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any

from .config import CtrlConfig
from .errors import ClosedError
from .frames import Event
from .session import ControlSession

logger = logging.getLogger(__name__)


class AsyncControlSession:
    """Async wrapper around a ControlSession."""

    def __init__(self, session: ControlSession) -> None:
        self.session = session
        self._lock = asyncio.Lock()

    @classmethod
    async def open(
        cls,
        config: CtrlConfig | None = None,
        *,
        ctrl_path: str | Path | None = None,
        client_dir: str | Path | None = None,
        timeout: float | None = None,
        nonblocking: bool | None = None,
    ) -> "AsyncControlSession":
        session = await asyncio.to_thread(
            ControlSession.open,
            config,
            ctrl_path=ctrl_path,
            client_dir=client_dir,
            timeout=timeout,
            nonblocking=nonblocking,
        )
        return cls(session)

    @property
    def attached(self) -> bool:
        return self.session.attached

    @property
    def closed(self) -> bool:
        return self.session.closed

    async def __aenter__(self) -> "AsyncControlSession":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _call(self, method: Any, *args: Any) -> Any:
        async with self._lock:
            task = asyncio.create_task(asyncio.to_thread(method, *args))
            try:
                return await asyncio.shield(task)
            except asyncio.CancelledError:
                # The worker thread holds the session until it returns
                await asyncio.wait([task])
                if not task.cancelled() and task.exception() is not None:
                    logger.debug(f"Cancelled call ended with: {task.exception()!r}")
                raise

    async def request(self, command: str, timeout: float | None = None) -> str:
        """Send a command and return the daemon's reply text."""
        return await self._call(self.session.request, command, timeout)

    async def attach(self, timeout: float | None = None) -> bool:
        return await self._call(self.session.attach, timeout)

    async def detach(self, timeout: float | None = None) -> bool:
        return await self._call(self.session.detach, timeout)

    def pending(self) -> int:
        return self.session.pending()

    async def next_event(self, timeout: float | None = None) -> Event:
        """Wait for the next event; raises ControlTimeoutError on expiry."""
        return await self._call(self.session.next_event, timeout)

    async def poll_event(self) -> Event | None:
        return await self._call(self.session.poll_event)

    async def events(self, poll_interval: float = 1.0) -> AsyncIterator[Event]:
        """Yield events as they arrive until the session is closed.

        Args:
            poll_interval: Longest a single wait may hold the session lock,
                so requests from other coroutines can interleave
        """
        while not self.session.closed:
            try:
                event = await self._call(self.session.next_event, poll_interval)
            except TimeoutError:
                continue
            except ClosedError:
                return
            yield event

    async def close(self, timeout: float | None = None) -> None:
        async with self._lock:
            await asyncio.to_thread(self.session.close, timeout)
