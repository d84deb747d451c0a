"""GATT discovery of the Bot communication service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from botctl.core.advertisement import uuid_equal
from botctl.core.codec import CCCD_UUID, COMMUNICATION_SERVICE_UUID, NOTIFY_CHAR_UUID, WRITE_CHAR_UUID
from botctl.core.errors import CharacteristicNotFoundError, DescriptorNotFoundError, ServiceNotFoundError
from botctl.transports.base import GattConnection


@dataclass(frozen=True)
class ResolvedCharacteristics:
    notify: Any
    write: Any


def _find_by_uuid(attributes: list[Any], uuid: str) -> Any | None:
    for attribute in attributes:
        if uuid_equal(attribute.uuid, uuid):
            return attribute
    return None


async def resolve(connection: GattConnection) -> ResolvedCharacteristics:
    services = await connection.discover_services([COMMUNICATION_SERVICE_UUID])
    service = _find_by_uuid(services, COMMUNICATION_SERVICE_UUID)
    if service is None:
        raise ServiceNotFoundError(f"Communication service {COMMUNICATION_SERVICE_UUID} not found")

    chars = await connection.discover_characteristics([NOTIFY_CHAR_UUID, WRITE_CHAR_UUID], service)
    if len(chars) < 2:
        raise CharacteristicNotFoundError(
            f"Expected notify and write characteristics, found {len(chars)}"
        )

    # Discovery order is unspecified, so match by UUID.
    notify = _find_by_uuid(chars, NOTIFY_CHAR_UUID)
    write = _find_by_uuid(chars, WRITE_CHAR_UUID)
    if notify is None:
        raise CharacteristicNotFoundError(f"Notify characteristic {NOTIFY_CHAR_UUID} not found")
    if write is None:
        raise CharacteristicNotFoundError(f"Write characteristic {WRITE_CHAR_UUID} not found")
    return ResolvedCharacteristics(notify=notify, write=write)


async def resolve_notify_descriptor(connection: GattConnection, notify_characteristic: Any) -> Any:
    descriptors = await connection.discover_descriptors([CCCD_UUID], notify_characteristic)
    descriptor = _find_by_uuid(descriptors, CCCD_UUID)
    if descriptor is None:
        raise DescriptorNotFoundError(
            f"Notification descriptor 0x{CCCD_UUID} not found on {notify_characteristic.uuid}"
        )
    return descriptor
