"""Stable public API for building tooling on top of botctl.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from pathlib import Path

from botctl.core.config import load_settings
from botctl.core.errors import (
    AdapterUnavailableError,
    BotctlError,
    CharacteristicNotFoundError,
    ConfigLoadError,
    ConfigValidationError,
    ConnectError,
    DescriptorNotFoundError,
    DeviceSelectionError,
    DiscoveryError,
    MalformedFrameError,
    ResponseError,
    ResponseStatusError,
    ResponseTimeoutError,
    ServiceNotFoundError,
    SessionBusyError,
    SessionClosedError,
    WriteError,
)
from botctl.core.model import ActionResult, DeviceHandle, Settings, StatusLayout, StatusRecord
from botctl.core.service import BotService
from botctl.transports.base import BLEAdapter, GattConnection
from botctl.transports.ble_gatt import BleakAdapter

__all__ = [
    "BotctlError",
    "AdapterUnavailableError",
    "ConfigLoadError",
    "ConfigValidationError",
    "DeviceSelectionError",
    "ConnectError",
    "SessionBusyError",
    "SessionClosedError",
    "DiscoveryError",
    "ServiceNotFoundError",
    "CharacteristicNotFoundError",
    "DescriptorNotFoundError",
    "WriteError",
    "ResponseError",
    "ResponseTimeoutError",
    "ResponseStatusError",
    "MalformedFrameError",
    "ActionResult",
    "DeviceHandle",
    "Settings",
    "StatusLayout",
    "StatusRecord",
    "BLEAdapter",
    "GattConnection",
    "BleakAdapter",
    "Client",
]


class Client:
    """Public client for discovering, querying, and actuating Bot devices.

    A `Client` instance wraps settings loading, scanning, and the per-command
    BLE sessions behind a stable API intended for third-party tools
    (GUI/TUI/services/scripts). Each call opens and releases its own
    connection.
    """

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        config_path: Path | None = None,
        adapter: BLEAdapter | None = None,
    ) -> None:
        if settings is None:
            settings = load_settings(config_path)
        self._service = BotService(settings=settings, adapter=adapter)

    @property
    def settings(self) -> Settings:
        return self._service.settings

    def scan(self, *, duration: float | None = None) -> list[DeviceHandle]:
        return self._service.scan(duration)

    def resolve_target(self, *, device_hint: str | None = None) -> DeviceHandle:
        return self._service.resolve_target(device_hint)

    def get_status(self, address: str) -> StatusRecord:
        return self._service.status(address)

    def get_all_statuses(self) -> list[tuple[DeviceHandle, StatusRecord | BotctlError]]:
        return self._service.status_all()

    def press(self, address: str) -> ActionResult:
        return self._service.press(address)

    def turn_on(self, address: str) -> ActionResult:
        return self._service.turn_on(address)

    def turn_off(self, address: str) -> ActionResult:
        return self._service.turn_off(address)

    def act(self, address: str, *, mode: bool, state: bool) -> ActionResult:
        return self._service.act(address, mode, state)
