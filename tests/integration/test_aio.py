"""Integration tests for the asyncio adapter."""

import asyncio

import pytest

from test_helpers import FakeDaemon
from wpactrl.aio import AsyncControlSession
from wpactrl.errors import ClosedError, ControlTimeoutError

pytestmark = pytest.mark.integration


@pytest.mark.asyncio
async def test_async_request(daemon: FakeDaemon, client_dir) -> None:
    """Test a request round trip through worker threads."""
    async with await AsyncControlSession.open(
        ctrl_path=daemon.path, client_dir=client_dir, timeout=2.0
    ) as session:
        assert await session.request("PING") == "PONG\n"

    assert session.closed


@pytest.mark.asyncio
async def test_concurrent_coroutines_are_serialized(daemon: FakeDaemon, client_dir) -> None:
    """Test coroutines sharing a session queue up instead of getting BusyError."""
    daemon.on("STATUS", "wpa_state=COMPLETED\n")
    async with await AsyncControlSession.open(
        ctrl_path=daemon.path, client_dir=client_dir, timeout=2.0
    ) as session:
        replies = await asyncio.gather(
            *(session.request(cmd) for cmd in ["PING", "STATUS", "PING", "STATUS"])
        )

    assert replies == ["PONG\n", "wpa_state=COMPLETED\n", "PONG\n", "wpa_state=COMPLETED\n"]


@pytest.mark.asyncio
async def test_cancelled_request_keeps_session_usable(daemon: FakeDaemon, client_dir) -> None:
    """Test a request cancelled by wait_for does not leave the session busy."""
    daemon.on("SILENT")
    async with await AsyncControlSession.open(
        ctrl_path=daemon.path, client_dir=client_dir, timeout=2.0
    ) as session:
        with pytest.raises(TimeoutError):
            await asyncio.wait_for(session.request("SILENT", 0.3), 0.1)

        assert await session.request("PING") == "PONG\n"


@pytest.mark.asyncio
async def test_async_events(daemon: FakeDaemon, client_dir) -> None:
    """Test attach, event iteration and timeout."""
    async with await AsyncControlSession.open(
        ctrl_path=daemon.path, client_dir=client_dir, timeout=2.0
    ) as session:
        assert await session.attach() is True
        assert session.attached

        daemon.push("<2>CTRL-EVENT-CONNECTED abc")
        daemon.push("<3>CTRL-EVENT-DISCONNECTED")

        received = []
        async for event in session.events(poll_interval=0.1):
            received.append(event.body)
            if len(received) == 2:
                break

        assert received == ["CTRL-EVENT-CONNECTED abc", "CTRL-EVENT-DISCONNECTED"]
        assert session.pending() == 0
        assert await session.poll_event() is None

        with pytest.raises(ControlTimeoutError):
            await session.next_event(0.1)

        assert await session.detach() is True


@pytest.mark.asyncio
async def test_events_iterator_ends_on_close(daemon: FakeDaemon, client_dir) -> None:
    """Test the iterator stops once the session is closed."""
    session = await AsyncControlSession.open(ctrl_path=daemon.path, client_dir=client_dir)
    await session.attach()

    async def consume() -> list[str]:
        return [event.body async for event in session.events(poll_interval=0.05)]

    task = asyncio.create_task(consume())
    await asyncio.sleep(0.1)
    await session.close()

    assert await asyncio.wait_for(task, timeout=2.0) == []
    with pytest.raises(ClosedError):
        await session.request("PING")
