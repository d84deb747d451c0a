"""Notification enabling and single-shot response correlation."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from botctl.core.codec import CCCD_ENABLE
from botctl.core.errors import ResponseTimeoutError
from botctl.core.resolver import resolve_notify_descriptor
from botctl.transports.base import GattConnection, NotifyCallback

LOGGER = logging.getLogger(__name__)


async def enable(connection: GattConnection, notify_characteristic: Any) -> None:
    descriptor = await resolve_notify_descriptor(connection, notify_characteristic)
    await connection.write_descriptor(descriptor, CCCD_ENABLE)


async def await_once(connection: GattConnection, notify_characteristic: Any, on_frame: NotifyCallback) -> None:
    await connection.subscribe(notify_characteristic, on_frame)


async def release(connection: GattConnection, notify_characteristic: Any) -> None:
    await connection.unsubscribe(notify_characteristic)


class ResponseWaiter:
    """Resolves with the first notified frame; later frames are dropped.

    ``on_frame`` may be called from any thread. The pending future is
    completed at most once, so a frame and the deadline cannot both win.
    """

    def __init__(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._future: asyncio.Future[bytes] = self._loop.create_future()

    @property
    def done(self) -> bool:
        return self._future.done()

    def on_frame(self, frame: bytes) -> None:
        self._loop.call_soon_threadsafe(self._resolve, bytes(frame))

    def _resolve(self, frame: bytes) -> None:
        if self._future.done():
            LOGGER.debug("Dropping extra notification %s", frame.hex())
            return
        self._future.set_result(frame)

    async def wait(self, timeout: float) -> bytes:
        try:
            return await asyncio.wait_for(asyncio.shield(self._future), timeout)
        except asyncio.TimeoutError as exc:
            self._future.cancel()
            raise ResponseTimeoutError(f"No notification within {timeout}s") from exc
