"""Advertisement matching for the Bot product family."""

from __future__ import annotations

from bleak.uuids import normalize_uuid_str

from botctl.core.codec import SERVICE_DATA_UUID, decode_advertisement_flags
from botctl.core.model import Advertisement, AdvertisementFlags, DeviceHandle

_FAMILY_UUID = normalize_uuid_str(SERVICE_DATA_UUID)


def uuid_equal(left: str, right: str) -> bool:
    return normalize_uuid_str(left) == normalize_uuid_str(right)


def match_flags(advertisement: Advertisement) -> AdvertisementFlags | None:
    """Return the decoded flags of the first matching service-data entry."""
    if not advertisement.service_data:
        return None
    for uuid, data in advertisement.service_data:
        if normalize_uuid_str(uuid) != _FAMILY_UUID:
            continue
        flags = decode_advertisement_flags(data)
        if flags is not None:
            return flags
    return None


def is_bot(advertisement: Advertisement) -> bool:
    return match_flags(advertisement) is not None


def to_handle(advertisement: Advertisement) -> DeviceHandle | None:
    flags = match_flags(advertisement)
    if flags is None:
        return None
    return DeviceHandle(
        address=advertisement.address,
        is_encrypted=flags.is_encrypted,
        mode=flags.mode,
        state=flags.state,
        name=advertisement.name,
    )
