from __future__ import annotations

import asyncio
import threading

from fakes import FakeAdapter, bot_advertisement

from botctl.core.model import Advertisement
from botctl.core.scanner import AdvertisementScanner


def test_scan_keeps_duplicates_in_arrival_order() -> None:
    adapter = FakeAdapter(
        advertisements=(
            bot_advertisement("AA:BB:CC:DD:EE:01"),
            Advertisement(address="11:22:33:44:55:66", service_data=()),
            bot_advertisement("AA:BB:CC:DD:EE:02", signature=0xC8),
            bot_advertisement("AA:BB:CC:DD:EE:01"),
        )
    )
    handles = asyncio.run(AdvertisementScanner(adapter).scan(2.0))

    assert [h.address for h in handles] == [
        "AA:BB:CC:DD:EE:01",
        "AA:BB:CC:DD:EE:02",
        "AA:BB:CC:DD:EE:01",
    ]
    assert handles[1].is_encrypted is True
    assert adapter.scan_durations == [2.0]


def test_scan_with_no_matches_returns_empty_list() -> None:
    adapter = FakeAdapter(
        advertisements=(Advertisement(address="11:22:33:44:55:66", service_data=()),)
    )
    assert asyncio.run(AdvertisementScanner(adapter).scan(0.1)) == []


class ThreadedAdapter:
    """Delivers advertisements from several threads at once."""

    def __init__(self, threads: int, per_thread: int) -> None:
        self.threads = threads
        self.per_thread = per_thread

    async def scan(self, duration, on_advertisement, admit):
        def _burst(index: int) -> None:
            adv = bot_advertisement(f"AA:BB:CC:DD:EE:{index:02X}")
            for _ in range(self.per_thread):
                if admit(adv):
                    on_advertisement(adv)

        workers = [threading.Thread(target=_burst, args=(i,)) for i in range(self.threads)]
        for worker in workers:
            worker.start()
        for worker in workers:
            worker.join()

    async def connect(self, address, *, timeout):
        raise AssertionError("not used")


def test_concurrent_callbacks_lose_no_entries() -> None:
    handles = asyncio.run(AdvertisementScanner(ThreadedAdapter(threads=8, per_thread=250)).scan(1.0))
    assert len(handles) == 8 * 250
