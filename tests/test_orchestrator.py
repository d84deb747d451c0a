from __future__ import annotations

import asyncio

import pytest
from fakes import SAMPLE_RECORD, FakeAdapter, FakeConnection

from botctl.core.codec import WRITE_CHAR_UUID
from botctl.core.errors import (
    ConnectError,
    DescriptorNotFoundError,
    ResponseStatusError,
    ResponseTimeoutError,
    ServiceNotFoundError,
    SessionBusyError,
    SessionClosedError,
    WriteError,
)
from botctl.core.model import SessionState, Settings
from botctl.core.orchestrator import CommandOrchestrator, Session

ADDRESS = "AA:BB:CC:DD:EE:01"


def _orchestrator(connection: FakeConnection, **settings) -> CommandOrchestrator:
    return CommandOrchestrator(FakeAdapter(connection=connection), Settings(**settings))


def test_get_status_happy_path() -> None:
    connection = FakeConnection()
    record = asyncio.run(_orchestrator(connection).get_status(ADDRESS))

    assert record == SAMPLE_RECORD
    assert connection.descriptor_writes == [("2902", b"\x01")]
    assert connection.writes == [(WRITE_CHAR_UUID, b"\x57\x02", True)]
    assert connection.disconnects == 1


def test_get_status_ignores_later_frames() -> None:
    connection = FakeConnection(extra_frames=(b"\x03",))
    assert asyncio.run(_orchestrator(connection).get_status(ADDRESS)) == SAMPLE_RECORD


def test_get_status_timeout_disconnects_once() -> None:
    connection = FakeConnection(response=None)
    with pytest.raises(ResponseTimeoutError) as exc:
        asyncio.run(_orchestrator(connection, response_timeout_s=0.05).get_status(ADDRESS))
    assert exc.value.step == "response"
    assert connection.disconnects == 1


def test_get_status_device_error_is_surfaced() -> None:
    connection = FakeConnection(response=b"\x05")
    with pytest.raises(ResponseStatusError) as exc:
        asyncio.run(_orchestrator(connection).get_status(ADDRESS))
    assert exc.value.status == 0x05
    assert connection.disconnects == 1


def test_discovery_failure_releases_connection() -> None:
    connection = FakeConnection(with_service=False)
    with pytest.raises(ServiceNotFoundError):
        asyncio.run(_orchestrator(connection).get_status(ADDRESS))
    assert connection.disconnects == 1
    assert connection.writes == []


def test_missing_descriptor_fails_before_write() -> None:
    connection = FakeConnection(with_descriptor=False)
    with pytest.raises(DescriptorNotFoundError):
        asyncio.run(_orchestrator(connection).get_status(ADDRESS))
    assert connection.writes == []
    assert connection.disconnects == 1


def test_connect_failure_propagates() -> None:
    adapter = FakeAdapter(connect_error=ConnectError("BLE connect failed"))
    orchestrator = CommandOrchestrator(adapter, Settings(connect_timeout_s=1.5))
    with pytest.raises(ConnectError):
        asyncio.run(orchestrator.get_status(ADDRESS))
    assert adapter.connects == [(ADDRESS, 1.5)]
    assert adapter.connection.disconnects == 0


def test_perform_action_writes_without_subscribing() -> None:
    connection = FakeConnection()
    result = asyncio.run(
        _orchestrator(connection, write_with_response=False).perform_action(ADDRESS, mode=False, state=True)
    )

    assert result.payload_hex == "570101"
    assert connection.writes == [(WRITE_CHAR_UUID, b"\x57\x01\x01", False)]
    assert connection.callbacks == []
    assert connection.descriptor_writes == []
    assert connection.disconnects == 1


def test_perform_action_write_failure() -> None:
    connection = FakeConnection(fail_write=True)
    with pytest.raises(WriteError) as exc:
        asyncio.run(_orchestrator(connection).perform_action(ADDRESS, mode=True, state=False))
    assert exc.value.step == "write"
    assert connection.disconnects == 1


def test_second_session_on_same_device_is_refused() -> None:
    async def _run():
        orchestrator = _orchestrator(FakeConnection())
        return await asyncio.gather(
            orchestrator.get_status(ADDRESS),
            orchestrator.get_status(ADDRESS.lower()),
            return_exceptions=True,
        )

    first, second = asyncio.run(_run())
    assert first == SAMPLE_RECORD
    assert isinstance(second, SessionBusyError)


def test_sequential_operations_get_fresh_sessions() -> None:
    connection = FakeConnection()
    orchestrator = _orchestrator(connection)

    async def _run() -> None:
        await orchestrator.get_status(ADDRESS)
        await orchestrator.perform_action(ADDRESS, mode=True, state=False)

    asyncio.run(_run())
    assert connection.disconnects == 2


def test_session_cannot_be_reused() -> None:
    async def _run() -> Session:
        session = Session(FakeAdapter(), ADDRESS, connect_timeout=1.0)
        async with session:
            assert session.state is SessionState.CONNECTED
        assert session.state is SessionState.DISCONNECTED
        with pytest.raises(SessionClosedError):
            await session.open()
        return session

    session = asyncio.run(_run())
    with pytest.raises(SessionClosedError):
        session.connection


def test_status_query_unsubscribes_before_disconnect() -> None:
    order: list[str] = []

    class OrderedConnection(FakeConnection):
        async def unsubscribe(self, characteristic):
            order.append("unsubscribe")
            await super().unsubscribe(characteristic)

        async def disconnect(self):
            order.append("disconnect")
            await super().disconnect()

    connection = OrderedConnection()
    asyncio.run(_orchestrator(connection).get_status(ADDRESS))
    assert order == ["unsubscribe", "disconnect"]
    assert connection.callbacks == []


def test_timeout_still_unsubscribes() -> None:
    connection = FakeConnection(response=None)
    with pytest.raises(ResponseTimeoutError):
        asyncio.run(_orchestrator(connection, response_timeout_s=0.05).get_status(ADDRESS))
    assert connection.unsubscribes == 1
    assert connection.disconnects == 1


def test_write_failure_during_query_unsubscribes() -> None:
    connection = FakeConnection(fail_write=True)
    with pytest.raises(WriteError):
        asyncio.run(_orchestrator(connection).get_status(ADDRESS))
    assert connection.unsubscribes == 1
    assert connection.disconnects == 1


@pytest.mark.parametrize("error", [RuntimeError("adapter crashed"), asyncio.CancelledError()])
def test_unmapped_connect_failure_leaves_session_disconnected(error: BaseException) -> None:
    session = Session(FakeAdapter(connect_error=error), ADDRESS, connect_timeout=1.0)

    async def _run() -> None:
        try:
            await session.open()
        except BaseException as exc:
            assert exc is error
        else:
            raise AssertionError("open() should have raised")

    asyncio.run(_run())
    assert session.state is SessionState.DISCONNECTED
