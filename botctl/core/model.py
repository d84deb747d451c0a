"""Core data models used across codec, orchestrator, service, and CLI."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class StatusLayout(str, enum.Enum):
    """Wire layout of the status response frame.

    ``wide`` carries ADC and motor calibration as 16-bit big-endian values,
    ``narrow`` as single bytes. ``auto`` picks by frame length.
    """

    WIDE = "wide"
    NARROW = "narrow"
    AUTO = "auto"


class SessionState(str, enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RESOLVED = "resolved"
    NOTIFY_ENABLED = "notify_enabled"
    AWAITING = "awaiting"
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


@dataclass(frozen=True)
class Advertisement:
    """One received broadcast packet, reduced to what the filter needs."""

    address: str
    service_data: tuple[tuple[str, bytes], ...]
    name: str | None = None
    rssi: int | None = None


@dataclass(frozen=True)
class AdvertisementFlags:
    is_encrypted: bool
    mode: bool
    state: bool


@dataclass(frozen=True)
class DeviceHandle:
    address: str
    is_encrypted: bool = field(default=False, compare=False)
    mode: bool = field(default=False, compare=False)
    state: bool = field(default=False, compare=False)
    name: str | None = field(default=None, compare=False)


@dataclass(frozen=True)
class StatusRecord:
    battery_percent: int
    firmware_version: float
    push_strength: int
    adc_value: int
    motor_calibration: int
    timer_count: int
    act_mode: int
    hold_press_count: int


@dataclass(frozen=True)
class ActionResult:
    address: str
    mode: bool
    state: bool
    payload_hex: str


@dataclass(frozen=True)
class Settings:
    adapter: str | None = None
    scan_duration_s: float = 2.0
    connect_timeout_s: float = 2.0
    response_timeout_s: float = 20.0
    write_with_response: bool = True
    status_layout: StatusLayout = StatusLayout.WIDE
