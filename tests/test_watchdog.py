from __future__ import annotations

import threading

import pytest

from glassops.application.watchdog import Watchdog


@pytest.mark.governance
def test_watchdog_fires_on_expiry():
    fired = threading.Event()
    with Watchdog(0.01, on_expire=fired.set):
        assert fired.wait(timeout=5)


@pytest.mark.governance
def test_watchdog_cancelled_before_expiry_does_not_fire():
    fired = threading.Event()
    with Watchdog(5, on_expire=fired.set):
        pass
    assert not fired.wait(timeout=0.05)


@pytest.mark.governance
def test_watchdog_start_is_idempotent():
    fired = threading.Event()
    dog = Watchdog(5, on_expire=fired.set)
    assert dog.start() is dog
    dog.start()
    dog.cancel()
    dog.cancel()
    assert not fired.is_set()
