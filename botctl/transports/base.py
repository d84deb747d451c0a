"""Transport interfaces."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, Protocol

from botctl.core.model import Advertisement

AdvertisementCallback = Callable[[Advertisement], None]
AdvertisementPredicate = Callable[[Advertisement], bool]
NotifyCallback = Callable[[bytes], None]


class GattAttribute(Protocol):
    uuid: str


class GattConnection(Protocol):
    async def discover_services(self, uuids: Sequence[str]) -> list[Any]:
        """Return the services whose UUID is in ``uuids``."""

    async def discover_characteristics(self, uuids: Sequence[str], service: Any) -> list[Any]:
        """Return the characteristics of ``service`` whose UUID is in ``uuids``."""

    async def discover_descriptors(self, uuids: Sequence[str], characteristic: Any) -> list[Any]:
        """Return the descriptors of ``characteristic`` whose UUID is in ``uuids``."""

    async def subscribe(self, characteristic: Any, callback: NotifyCallback) -> None:
        """Deliver every notification on ``characteristic`` to ``callback``."""

    async def unsubscribe(self, characteristic: Any) -> None:
        """Stop notification delivery on ``characteristic``."""

    async def write_characteristic(self, characteristic: Any, data: bytes, *, with_response: bool) -> None:
        """Write ``data`` to ``characteristic``."""

    async def write_descriptor(self, descriptor: Any, data: bytes) -> None:
        """Write ``data`` to ``descriptor``."""

    async def disconnect(self) -> None:
        """Release the link."""


class BLEAdapter(Protocol):
    async def scan(
        self,
        duration: float,
        on_advertisement: AdvertisementCallback,
        admit: AdvertisementPredicate,
    ) -> None:
        """Scan for ``duration`` seconds, passing admitted packets to ``on_advertisement``."""

    async def connect(self, address: str, *, timeout: float) -> GattConnection:
        """Open a connection to ``address``."""
