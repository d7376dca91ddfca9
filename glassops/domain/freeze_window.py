"""Freeze-window evaluation.

All calendar math is done in UTC so that every CI runner reaches the same
decision for the same instant. Bounds are inclusive on both ends and are
compared as minute-of-day integers.
"""

from __future__ import annotations

from datetime import datetime, timezone

from glassops.domain.errors import FreezeViolation
from glassops.domain.protocol_config import WEEKDAYS, FreezeWindow, ProtocolConfig


def utc_day_and_minute(now: datetime) -> tuple[str, int]:
    """Return the UTC weekday name and minute-of-day for ``now``.

    Naive datetimes are taken to already be UTC.
    """

    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return WEEKDAYS[now.weekday()], now.hour * 60 + now.minute


def window_contains(window: FreezeWindow, *, day: str, minute: int) -> bool:
    return window.day == day and window.start_minute <= minute <= window.end_minute


def find_active_window(config: ProtocolConfig, now: datetime) -> FreezeWindow | None:
    """Return the first declared window covering ``now``, if any."""

    windows = config.governance.freeze_windows
    if not windows:
        return None
    day, minute = utc_day_and_minute(now)
    for window in windows:
        if window_contains(window, day=day, minute=minute):
            return window
    return None


def check_freeze(config: ProtocolConfig, now: datetime | None = None) -> None:
    """Raise ``FreezeViolation`` if ``now`` (default: current instant) is frozen."""

    instant = now if now is not None else datetime.now(timezone.utc)
    window = find_active_window(config, instant)
    if window is None:
        return
    raise FreezeViolation(
        f"FROZEN: Deployment blocked by governance window ({window.describe()})",
        window=window,
    )
