"""BLE GATT transport implementation backed by bleak."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

from bleak import BleakClient, BleakScanner
from bleak.backends.characteristic import BleakGATTCharacteristic
from bleak.backends.device import BLEDevice
from bleak.backends.scanner import AdvertisementData
from bleak.exc import BleakError
from bleak.uuids import normalize_uuid_str

from botctl.core.codec import CCCD_UUID
from botctl.core.errors import AdapterUnavailableError, ConnectError, WriteError
from botctl.core.model import Advertisement
from botctl.transports.base import AdvertisementCallback, AdvertisementPredicate, NotifyCallback

LOGGER = logging.getLogger(__name__)

_LINK_ERRORS = (BleakError, OSError, asyncio.TimeoutError)


def _wanted(uuids: Sequence[str]) -> set[str]:
    return {normalize_uuid_str(uuid) for uuid in uuids}


def _to_advertisement(device: BLEDevice, adv: AdvertisementData) -> Advertisement:
    return Advertisement(
        address=device.address,
        service_data=tuple((uuid, bytes(data)) for uuid, data in (adv.service_data or {}).items()),
        name=adv.local_name or device.name,
        rssi=adv.rssi,
    )


class BleakConnection:
    def __init__(self, client: BleakClient) -> None:
        self._client = client

    @property
    def address(self) -> str:
        return self._client.address

    async def discover_services(self, uuids: Sequence[str]) -> list[Any]:
        wanted = _wanted(uuids)
        return [service for service in self._client.services if normalize_uuid_str(service.uuid) in wanted]

    async def discover_characteristics(self, uuids: Sequence[str], service: Any) -> list[Any]:
        wanted = _wanted(uuids)
        return [char for char in service.characteristics if normalize_uuid_str(char.uuid) in wanted]

    async def discover_descriptors(self, uuids: Sequence[str], characteristic: Any) -> list[Any]:
        wanted = _wanted(uuids)
        return [desc for desc in characteristic.descriptors if normalize_uuid_str(desc.uuid) in wanted]

    async def subscribe(self, characteristic: Any, callback: NotifyCallback) -> None:
        def _notify_handler(_: BleakGATTCharacteristic, data: bytearray) -> None:
            callback(bytes(data))

        try:
            await self._client.start_notify(characteristic, _notify_handler)
        except _LINK_ERRORS as exc:
            raise WriteError(f"Could not subscribe to {characteristic.uuid}: {exc}") from exc

    async def unsubscribe(self, characteristic: Any) -> None:
        try:
            await self._client.stop_notify(characteristic)
        except _LINK_ERRORS as exc:
            LOGGER.debug("stop_notify on %s failed: %s", characteristic.uuid, exc)

    async def write_characteristic(self, characteristic: Any, data: bytes, *, with_response: bool) -> None:
        try:
            await self._client.write_gatt_char(characteristic, data, response=with_response)
        except _LINK_ERRORS as exc:
            raise WriteError(f"Write to {characteristic.uuid} failed: {exc}") from exc

    async def write_descriptor(self, descriptor: Any, data: bytes) -> None:
        try:
            await self._client.write_gatt_descriptor(descriptor.handle, data)
        except BleakError as exc:
            # BlueZ owns the CCCD and rejects direct writes; start_notify enables it instead.
            if normalize_uuid_str(descriptor.uuid) == normalize_uuid_str(CCCD_UUID):
                LOGGER.debug("CCCD write rejected by platform, deferring to subscribe: %s", exc)
                return
            raise WriteError(f"Write to descriptor {descriptor.uuid} failed: {exc}") from exc
        except (OSError, asyncio.TimeoutError) as exc:
            raise WriteError(f"Write to descriptor {descriptor.uuid} failed: {exc}") from exc

    async def disconnect(self) -> None:
        try:
            await self._client.disconnect()
        except _LINK_ERRORS as exc:
            LOGGER.warning("Disconnect from %s reported an error: %s", self.address, exc)


class BleakAdapter:
    def __init__(self, adapter: str | None = None) -> None:
        self.adapter = adapter

    def _adapter_kwargs(self) -> dict[str, Any]:
        return {"adapter": self.adapter} if self.adapter else {}

    async def scan(
        self,
        duration: float,
        on_advertisement: AdvertisementCallback,
        admit: AdvertisementPredicate,
    ) -> None:
        def _detection_callback(device: BLEDevice, adv: AdvertisementData) -> None:
            advertisement = _to_advertisement(device, adv)
            if admit(advertisement):
                on_advertisement(advertisement)

        scanner = BleakScanner(detection_callback=_detection_callback, **self._adapter_kwargs())
        try:
            await scanner.start()
        except (BleakError, OSError) as exc:
            raise AdapterUnavailableError(
                f"Bluetooth adapter unavailable. Ensure BlueZ is running and the adapter is powered: {exc}"
            ) from exc
        try:
            await asyncio.sleep(duration)
        finally:
            await scanner.stop()

    async def connect(self, address: str, *, timeout: float) -> BleakConnection:
        try:
            device = await BleakScanner.find_device_by_address(
                address,
                timeout=timeout,
                **self._adapter_kwargs(),
            )
        except (BleakError, OSError) as exc:
            raise AdapterUnavailableError(f"Bluetooth adapter unavailable: {exc}") from exc
        if device is None:
            raise ConnectError(f"Device {address} not seen within {timeout}s")

        client = BleakClient(device, timeout=timeout, **self._adapter_kwargs())
        try:
            await client.connect()
        except _LINK_ERRORS as exc:
            raise ConnectError(f"BLE connect failed for {address}: {exc}") from exc
        if not client.is_connected:
            await BleakConnection(client).disconnect()
            raise ConnectError(f"BLE connect failed for {address}")
        return BleakConnection(client)
