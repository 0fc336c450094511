"""
Tests for per-key mutual exclusion.
"""

from __future__ import annotations

import threading
import time

from booking_engine.application.utils.keyed_lock import KeyedLocks


def test_same_key_is_serialized():
    locks = KeyedLocks()
    events: list[str] = []

    def worker(name: str) -> None:
        with locks.hold("customer-1"):
            events.append(f"{name}:start")
            time.sleep(0.05)
            events.append(f"{name}:end")

    threads = [threading.Thread(target=worker, args=(name,)) for name in ("a", "b", "c")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    for i in range(0, len(events), 2):
        assert events[i].split(":")[0] == events[i + 1].split(":")[0]


def test_different_keys_do_not_block_each_other():
    locks = KeyedLocks()
    entered = threading.Event()

    def other() -> None:
        with locks.hold("customer-2"):
            entered.set()

    with locks.hold("customer-1"):
        thread = threading.Thread(target=other)
        thread.start()
        assert entered.wait(timeout=1.0)
        thread.join()


def test_entries_are_released_after_use():
    locks = KeyedLocks()
    with locks.hold("customer-1"):
        assert len(locks) == 1
    assert len(locks) == 0
