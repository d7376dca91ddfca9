"""Governance configuration value types.

``ProtocolConfig`` is built once per run from ``devops-config.json`` and is
read-only afterwards. ``CONFIG_SCHEMA`` is the structural contract the file
must satisfy before it is turned into value objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Final, Literal, Mapping, cast

Weekday = Literal["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

WEEKDAYS: Final[tuple[str, ...]] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

CONFIG_FILE_NAME: Final[str] = "devops-config.json"
DEFAULT_CLI_VERSION: Final[str] = "latest"
DEFAULT_NODE_VERSION: Final[str] = "20"

_HHMM_PATTERN: Final[str] = r"^[0-9]{2}:[0-9]{2}$"

CONFIG_SCHEMA: Final[dict[str, object]] = {
    "type": "object",
    "required": ["governance", "runtime"],
    "properties": {
        "governance": {
            "type": "object",
            "properties": {
                "enabled": {"type": "boolean"},
                "freeze_windows": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "required": ["day", "start", "end"],
                        "properties": {
                            "day": {"type": "string", "enum": list(WEEKDAYS)},
                            "start": {"type": "string", "pattern": _HHMM_PATTERN},
                            "end": {"type": "string", "pattern": _HHMM_PATTERN},
                        },
                    },
                },
                "plugin_whitelist": {"type": "array", "items": {"type": "string"}},
            },
        },
        "runtime": {
            "type": "object",
            "properties": {
                "cli_version": {"type": "string"},
                "node_version": {"type": "string"},
            },
        },
    },
}


def minute_of_day(hhmm: str) -> int:
    hours, minutes = hhmm.split(":", 1)
    return int(hours) * 60 + int(minutes)


@dataclass(frozen=True)
class FreezeWindow:
    day: Weekday
    start: str
    end: str

    @property
    def start_minute(self) -> int:
        return minute_of_day(self.start)

    @property
    def end_minute(self) -> int:
        return minute_of_day(self.end)

    def describe(self) -> str:
        return f"{self.day} {self.start}-{self.end}"


@dataclass(frozen=True)
class GovernanceSettings:
    enabled: bool = True
    freeze_windows: tuple[FreezeWindow, ...] | None = None
    plugin_whitelist: tuple[str, ...] | None = None


@dataclass(frozen=True)
class RuntimeSettings:
    cli_version: str = DEFAULT_CLI_VERSION
    node_version: str = DEFAULT_NODE_VERSION


@dataclass(frozen=True)
class ProtocolConfig:
    governance: GovernanceSettings = field(default_factory=GovernanceSettings)
    runtime: RuntimeSettings = field(default_factory=RuntimeSettings)

    @property
    def has_plugin_whitelist(self) -> bool:
        return bool(self.governance.plugin_whitelist)

    def to_dict(self) -> dict[str, Any]:
        governance: dict[str, Any] = {"enabled": self.governance.enabled}
        if self.governance.freeze_windows is not None:
            governance["freeze_windows"] = [
                {"day": w.day, "start": w.start, "end": w.end} for w in self.governance.freeze_windows
            ]
        if self.governance.plugin_whitelist is not None:
            governance["plugin_whitelist"] = list(self.governance.plugin_whitelist)
        return {
            "governance": governance,
            "runtime": {
                "cli_version": self.runtime.cli_version,
                "node_version": self.runtime.node_version,
            },
        }


def default_unsafe_config() -> ProtocolConfig:
    """Permissive config used when no configuration file exists."""

    return ProtocolConfig(governance=GovernanceSettings(enabled=False), runtime=RuntimeSettings())


def protocol_config_from_mapping(payload: Mapping[str, Any]) -> ProtocolConfig:
    """Build a config from a payload that already satisfies ``CONFIG_SCHEMA``.

    Missing optional keys take their defaults; unknown keys are dropped.
    """

    governance_raw = payload.get("governance") or {}
    runtime_raw = payload.get("runtime") or {}

    windows_raw = governance_raw.get("freeze_windows")
    windows: tuple[FreezeWindow, ...] | None = None
    if windows_raw is not None:
        windows = tuple(
            FreezeWindow(day=cast(Weekday, item["day"]), start=item["start"], end=item["end"])
            for item in windows_raw
        )

    whitelist_raw = governance_raw.get("plugin_whitelist")
    whitelist = tuple(whitelist_raw) if whitelist_raw is not None else None

    return ProtocolConfig(
        governance=GovernanceSettings(
            enabled=governance_raw.get("enabled", True),
            freeze_windows=windows,
            plugin_whitelist=whitelist,
        ),
        runtime=RuntimeSettings(
            cli_version=runtime_raw.get("cli_version", DEFAULT_CLI_VERSION),
            node_version=runtime_raw.get("node_version", DEFAULT_NODE_VERSION),
        ),
    )
