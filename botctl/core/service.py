"""Service layer used by CLI and future UI frontends."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace

from botctl.core.device_match import select_handle, unique_handles
from botctl.core.errors import BotctlError, ConfigValidationError
from botctl.core.model import ActionResult, DeviceHandle, Settings, StatusRecord
from botctl.core.orchestrator import CommandOrchestrator
from botctl.core.scanner import AdvertisementScanner
from botctl.transports.base import BLEAdapter
from botctl.transports.ble_gatt import BleakAdapter

LOGGER = logging.getLogger(__name__)

_DURATION_KEYS = ("scan_duration_s", "connect_timeout_s", "response_timeout_s")


def _require_positive(name: str, value: float) -> float:
    if value <= 0:
        raise ConfigValidationError(f"{name} must be greater than 0, got {value}")
    return value


class BotService:
    def __init__(
        self,
        *,
        settings: Settings | None = None,
        adapter: BLEAdapter | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.adapter = adapter or BleakAdapter(self.settings.adapter)
        self.scanner = AdvertisementScanner(self.adapter)
        self.orchestrator = CommandOrchestrator(self.adapter, self.settings)

    def with_overrides(self, **overrides: object) -> BotService:
        """Return a service sharing this adapter with some settings replaced."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        if not changes:
            return self
        for key in _DURATION_KEYS:
            if key in changes:
                _require_positive(key, float(changes[key]))
        return BotService(settings=replace(self.settings, **changes), adapter=self.adapter)

    def scan(self, duration: float | None = None) -> list[DeviceHandle]:
        if duration is None:
            duration = self.settings.scan_duration_s
        return asyncio.run(self.scanner.scan(_require_positive("duration", duration)))

    def resolve_target(self, device_hint: str | None = None) -> DeviceHandle:
        return select_handle(self.scan(), device_hint)

    def status(self, address: str) -> StatusRecord:
        return asyncio.run(self.orchestrator.get_status(address))

    def status_all(self) -> list[tuple[DeviceHandle, StatusRecord | BotctlError]]:
        """Query every distinct Bot seen during one scan, in arrival order."""

        async def _run() -> list[tuple[DeviceHandle, StatusRecord | BotctlError]]:
            handles = await self.scanner.scan(self.settings.scan_duration_s)
            results: list[tuple[DeviceHandle, StatusRecord | BotctlError]] = []
            for handle in unique_handles(handles):
                try:
                    record: StatusRecord | BotctlError = await self.orchestrator.get_status(handle.address)
                except BotctlError as exc:
                    LOGGER.warning("Status query for %s failed (%s): %s", handle.address, exc.step, exc)
                    record = exc
                results.append((handle, record))
            return results

        return asyncio.run(_run())

    def act(self, address: str, mode: bool, state: bool) -> ActionResult:
        return asyncio.run(self.orchestrator.perform_action(address, mode, state))

    def press(self, address: str) -> ActionResult:
        return self.act(address, mode=True, state=False)

    def turn_on(self, address: str) -> ActionResult:
        return self.act(address, mode=False, state=True)

    def turn_off(self, address: str) -> ActionResult:
        return self.act(address, mode=False, state=False)
