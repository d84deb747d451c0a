"""Time-bounded advertisement scan collecting Bot device handles."""

from __future__ import annotations

import logging
import threading

from botctl.core.advertisement import is_bot, to_handle
from botctl.core.model import Advertisement, DeviceHandle
from botctl.transports.base import BLEAdapter

LOGGER = logging.getLogger(__name__)


class AdvertisementScanner:
    def __init__(self, adapter: BLEAdapter) -> None:
        self.adapter = adapter

    async def scan(self, duration: float) -> list[DeviceHandle]:
        """Scan for ``duration`` seconds and return matches in arrival order.

        A device that broadcasts repeatedly appears once per received packet.
        """
        handles: list[DeviceHandle] = []
        lock = threading.Lock()

        def _on_advertisement(advertisement: Advertisement) -> None:
            handle = to_handle(advertisement)
            if handle is None:
                return
            with lock:
                handles.append(handle)
                count = len(handles)
            LOGGER.info(
                "%d Bot (%s)%s",
                count,
                handle.address,
                " - (encrypted)" if handle.is_encrypted else "",
            )

        await self.adapter.scan(duration, _on_advertisement, is_bot)

        with lock:
            return list(handles)
