"""Plugin whitelist parsing and resolution.

A whitelist entry is a plugin identifier optionally pinned with
``@<constraint>``. Scoped identifiers start with ``@`` themselves, so the
split point differs:

- ``@scope/pkg@^1.2.3`` splits at the last ``@`` -> (``@scope/pkg``, ``^1.2.3``)
- ``pkg@latest`` splits at the first ``@`` -> (``pkg``, ``latest``)
- ``@scope/pkg`` and ``pkg`` carry no constraint.

Membership is by exact name only; the constraint is passed through to the
installer verbatim and never interpreted here.
"""

from __future__ import annotations

from dataclasses import dataclass

from glassops.domain.protocol_config import ProtocolConfig


@dataclass(frozen=True)
class PluginWhitelistEntry:
    name: str
    version_constraint: str | None

    @property
    def install_spec(self) -> str:
        if self.version_constraint is None:
            return self.name
        return f"{self.name}@{self.version_constraint}"


def parse_whitelist_entry(entry: str) -> PluginWhitelistEntry:
    if entry.startswith("@"):
        split_at = entry.rfind("@")
    else:
        split_at = entry.find("@")
    if split_at <= 0:
        return PluginWhitelistEntry(name=entry, version_constraint=None)
    return PluginWhitelistEntry(name=entry[:split_at], version_constraint=entry[split_at + 1 :])


def whitelist_entries(config: ProtocolConfig) -> tuple[PluginWhitelistEntry, ...]:
    return tuple(parse_whitelist_entry(item) for item in config.governance.plugin_whitelist or ())


def find_whitelist_entry(config: ProtocolConfig, plugin_name: str) -> PluginWhitelistEntry | None:
    """Return the first whitelist entry whose name equals ``plugin_name``."""

    for entry in whitelist_entries(config):
        if entry.name == plugin_name:
            return entry
    return None


def is_allowed(config: ProtocolConfig, plugin_name: str) -> bool:
    # An absent or empty whitelist allows everything; callers must warn.
    if not config.has_plugin_whitelist:
        return True
    return find_whitelist_entry(config, plugin_name) is not None


def version_constraint(config: ProtocolConfig, plugin_name: str) -> str | None:
    if not config.has_plugin_whitelist:
        return None
    entry = find_whitelist_entry(config, plugin_name)
    if entry is None:
        return None
    return entry.version_constraint


def install_spec(config: ProtocolConfig, plugin_name: str) -> str:
    """Argument for the installer: the name, pinned when the whitelist pins it."""

    entry = find_whitelist_entry(config, plugin_name) if config.has_plugin_whitelist else None
    if entry is None:
        return plugin_name
    return entry.install_spec
