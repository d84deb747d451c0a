"""Target selection among scanned Bot devices."""

from __future__ import annotations

from botctl.core.errors import DeviceSelectionError
from botctl.core.model import DeviceHandle


def unique_handles(handles: list[DeviceHandle]) -> list[DeviceHandle]:
    """Drop repeated broadcasts, keeping the first sighting of each address."""
    seen: set[str] = set()
    unique: list[DeviceHandle] = []
    for handle in handles:
        key = handle.address.upper()
        if key in seen:
            continue
        seen.add(key)
        unique.append(handle)
    return unique


def match_score(handle: DeviceHandle, hint: str) -> int:
    address = handle.address.lower()
    if address == hint:
        return 3
    if address.startswith(hint):
        return 2
    if hint in address or (handle.name and hint in handle.name.lower()):
        return 1
    return 0


def select_handle(handles: list[DeviceHandle], hint: str | None) -> DeviceHandle:
    candidates = unique_handles(handles)
    if not candidates:
        raise DeviceSelectionError("No Bot found. Ensure the device is powered and in range.")

    if hint:
        lowered = hint.strip().lower()
        scored = [(match_score(c, lowered), c) for c in candidates]
        best = max(score for score, _ in scored)
        if best == 0:
            raise DeviceSelectionError(f"No Bot found matching '{hint}'")
        candidates = [c for score, c in scored if score == best]

    if len(candidates) > 1:
        candidate_desc = ", ".join(c.address for c in candidates)
        raise DeviceSelectionError(
            f"Multiple Bots found: {candidate_desc}. Use --device to choose one."
        )
    return candidates[0]
