"""Connection-scoped command sequencing for status queries and actions."""

from __future__ import annotations

import logging
from types import TracebackType

from botctl.core import notify, resolver
from botctl.core.codec import decode_status, encode_action, encode_query
from botctl.core.errors import (
    ResponseStatusError,
    ResponseTimeoutError,
    SessionBusyError,
    SessionClosedError,
)
from botctl.core.model import ActionResult, SessionState, Settings, StatusRecord
from botctl.transports.base import BLEAdapter, GattConnection

LOGGER = logging.getLogger(__name__)


class Session:
    """One connection to one device for the lifetime of a single operation.

    A session is opened once and disconnected exactly once; it cannot be
    reopened afterwards.
    """

    def __init__(self, adapter: BLEAdapter, address: str, *, connect_timeout: float) -> None:
        self.adapter = adapter
        self.address = address
        self.connect_timeout = connect_timeout
        self.state = SessionState.DISCONNECTED
        self._connection: GattConnection | None = None
        self._used = False

    @property
    def connection(self) -> GattConnection:
        if self._connection is None:
            raise SessionClosedError(f"Session for {self.address} is not connected")
        return self._connection

    def transition(self, state: SessionState) -> None:
        LOGGER.debug("%s: %s -> %s", self.address, self.state.value, state.value)
        self.state = state

    async def open(self) -> GattConnection:
        if self._used:
            raise SessionClosedError(f"Session for {self.address} was already used")
        self._used = True
        self.transition(SessionState.CONNECTING)
        try:
            self._connection = await self.adapter.connect(self.address, timeout=self.connect_timeout)
        except BaseException:
            self.transition(SessionState.FAILED)
            self.transition(SessionState.DISCONNECTED)
            raise
        self.transition(SessionState.CONNECTED)
        return self._connection

    async def close(self) -> None:
        connection, self._connection = self._connection, None
        if connection is None:
            return
        try:
            await connection.disconnect()
        finally:
            self.transition(SessionState.DISCONNECTED)

    async def __aenter__(self) -> Session:
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if isinstance(exc, ResponseTimeoutError):
            self.transition(SessionState.TIMED_OUT)
        elif exc is not None:
            self.transition(SessionState.FAILED)
        await self.close()


class CommandOrchestrator:
    def __init__(self, adapter: BLEAdapter, settings: Settings | None = None) -> None:
        self.adapter = adapter
        self.settings = settings or Settings()
        self._active: set[str] = set()

    def _claim(self, address: str) -> str:
        key = address.upper()
        if key in self._active:
            raise SessionBusyError(f"Device {address} already has an open session")
        self._active.add(key)
        return key

    def _session(self, address: str) -> Session:
        return Session(self.adapter, address, connect_timeout=self.settings.connect_timeout_s)

    async def get_status(self, address: str) -> StatusRecord:
        key = self._claim(address)
        try:
            async with self._session(address) as session:
                connection = session.connection
                chars = await resolver.resolve(connection)
                session.transition(SessionState.RESOLVED)

                await notify.enable(connection, chars.notify)
                session.transition(SessionState.NOTIFY_ENABLED)

                waiter = notify.ResponseWaiter()
                await notify.await_once(connection, chars.notify, waiter.on_frame)
                try:
                    await connection.write_characteristic(
                        chars.write,
                        encode_query(),
                        with_response=self.settings.write_with_response,
                    )
                    session.transition(SessionState.AWAITING)
                    frame = await waiter.wait(self.settings.response_timeout_s)
                finally:
                    await notify.release(connection, chars.notify)

                LOGGER.debug("%s: response %s", address, frame.hex())
                try:
                    record = decode_status(frame, self.settings.status_layout)
                except ResponseStatusError as exc:
                    LOGGER.warning("%s: response status error 0x%02x", address, exc.status)
                    raise
                session.transition(SessionState.COMPLETED)
                return record
        finally:
            self._active.discard(key)

    async def perform_action(self, address: str, mode: bool, state: bool) -> ActionResult:
        key = self._claim(address)
        try:
            async with self._session(address) as session:
                connection = session.connection
                chars = await resolver.resolve(connection)
                session.transition(SessionState.RESOLVED)

                payload = encode_action(mode, state)
                await connection.write_characteristic(
                    chars.write,
                    payload,
                    with_response=self.settings.write_with_response,
                )
                session.transition(SessionState.COMPLETED)
                return ActionResult(address=address, mode=mode, state=state, payload_hex=payload.hex())
        finally:
            self._active.discard(key)
