"""Byte-level encoding and decoding of Bot command, status, and advertisement frames."""

from __future__ import annotations

from botctl.core.errors import MalformedFrameError, ResponseStatusError
from botctl.core.model import AdvertisementFlags, StatusLayout, StatusRecord

SERVICE_DATA_UUID = "3dfd"
COMMUNICATION_SERVICE_UUID = "cba20d00-224d-11e6-9fb8-0002a5d5c51b"
NOTIFY_CHAR_UUID = "cba20003-224d-11e6-9fb8-0002a5d5c51b"
WRITE_CHAR_UUID = "cba20002-224d-11e6-9fb8-0002a5d5c51b"
CCCD_UUID = "2902"
CCCD_ENABLE = b"\x01"

PLAIN_SIGNATURE = 0x48
ENCRYPTED_SIGNATURE = 0xC8

QUERY_OPCODE = b"\x57\x02"
ACTION_OPCODE = b"\x57\x01"
SELECTOR_PRESS = 0x00
SELECTOR_SWITCH_ON = 0x01
SELECTOR_SWITCH_OFF = 0x02

STATUS_SUCCESS = 0x01

_MODE_BIT = 0x80
_STATE_BIT = 0x40

# Field name -> (offset, width) for each layout. Widths of 2 are big-endian.
_LAYOUTS: dict[StatusLayout, tuple[tuple[str, int, int], ...]] = {
    StatusLayout.WIDE: (
        ("battery_percent", 1, 1),
        ("firmware_version", 2, 1),
        ("push_strength", 3, 1),
        ("adc_value", 4, 2),
        ("motor_calibration", 6, 2),
        ("timer_count", 8, 1),
        ("act_mode", 9, 1),
        ("hold_press_count", 10, 1),
    ),
    StatusLayout.NARROW: (
        ("battery_percent", 1, 1),
        ("firmware_version", 2, 1),
        ("push_strength", 3, 1),
        ("adc_value", 4, 1),
        ("motor_calibration", 5, 1),
        ("timer_count", 6, 1),
        ("act_mode", 7, 1),
        ("hold_press_count", 8, 1),
    ),
}


def frame_length(layout: StatusLayout) -> int:
    offset, width = _LAYOUTS[layout][-1][1:]
    return offset + width


def encode_query() -> bytes:
    return QUERY_OPCODE


def encode_action(mode: bool, state: bool) -> bytes:
    """Build an action frame.

    ``mode`` selects a press and ignores ``state``; otherwise ``state`` picks
    switch-on or switch-off.
    """
    if mode:
        selector = SELECTOR_PRESS
    elif state:
        selector = SELECTOR_SWITCH_ON
    else:
        selector = SELECTOR_SWITCH_OFF
    return ACTION_OPCODE + bytes([selector])


def resolve_layout(frame: bytes, layout: StatusLayout) -> StatusLayout:
    if layout is not StatusLayout.AUTO:
        return layout
    if len(frame) >= frame_length(StatusLayout.WIDE):
        return StatusLayout.WIDE
    if len(frame) == frame_length(StatusLayout.NARROW):
        return StatusLayout.NARROW
    raise MalformedFrameError(f"Status frame has {len(frame)} bytes, matching no known layout")


def decode_status(frame: bytes, layout: StatusLayout = StatusLayout.WIDE) -> StatusRecord:
    if not frame:
        raise MalformedFrameError("Empty status frame")
    if frame[0] != STATUS_SUCCESS:
        raise ResponseStatusError(frame[0])

    layout = resolve_layout(frame, layout)
    required = frame_length(layout)
    if len(frame) < required:
        raise MalformedFrameError(
            f"Status frame has {len(frame)} bytes, {layout.value} layout needs {required}"
        )

    values: dict[str, float | int] = {}
    for name, offset, width in _LAYOUTS[layout]:
        values[name] = int.from_bytes(frame[offset : offset + width], "big")
    values["firmware_version"] = values["firmware_version"] / 10
    return StatusRecord(**values)


def encode_status(record: StatusRecord, layout: StatusLayout = StatusLayout.WIDE) -> bytes:
    """Build a success status frame carrying ``record``."""
    if layout is StatusLayout.AUTO:
        layout = StatusLayout.WIDE
    frame = bytearray(frame_length(layout))
    frame[0] = STATUS_SUCCESS
    for name, offset, width in _LAYOUTS[layout]:
        value = getattr(record, name)
        if name == "firmware_version":
            value = round(value * 10)
        frame[offset : offset + width] = int(value).to_bytes(width, "big")
    return bytes(frame)


def decode_advertisement_flags(service_data: bytes) -> AdvertisementFlags | None:
    """Decode the Bot service-data payload, or return None for a foreign signature."""
    if not service_data:
        return None
    signature = service_data[0]
    if signature == PLAIN_SIGNATURE:
        is_encrypted = False
    elif signature == ENCRYPTED_SIGNATURE:
        is_encrypted = True
    else:
        return None

    flags = service_data[1] if len(service_data) > 1 else 0
    return AdvertisementFlags(
        is_encrypted=is_encrypted,
        mode=bool(flags & _MODE_BIT),
        state=bool(flags & _STATE_BIT),
    )
