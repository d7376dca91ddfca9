"""Governance facade composing config loading, freeze windows and the plugin whitelist.

One ``PolicyEngine`` instance is created per run and shared by every phase;
the configuration is loaded once and cached.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Protocol

from glassops.domain import freeze_window, plugin_whitelist
from glassops.domain.protocol_config import ProtocolConfig


class ConfigSource(Protocol):
    def load(self) -> ProtocolConfig:
        ...


class PolicyEngine:
    def __init__(self, store: ConfigSource, *, clock: Callable[[], datetime] | None = None) -> None:
        self._store = store
        self._clock = clock
        self._config: ProtocolConfig | None = None

    @property
    def config(self) -> ProtocolConfig:
        if self._config is None:
            return self.load()
        return self._config

    def load(self) -> ProtocolConfig:
        """Load the config through the store; subsequent calls reuse the first result."""

        if self._config is None:
            self._config = self._store.load()
        return self._config

    def check_freeze(self, config: ProtocolConfig | None = None, now: datetime | None = None) -> None:
        instant = now
        if instant is None and self._clock is not None:
            instant = self._clock()
        freeze_window.check_freeze(config if config is not None else self.config, instant)

    def is_allowed(self, plugin_name: str, config: ProtocolConfig | None = None) -> bool:
        return plugin_whitelist.is_allowed(config if config is not None else self.config, plugin_name)

    def version_constraint(self, plugin_name: str, config: ProtocolConfig | None = None) -> str | None:
        return plugin_whitelist.version_constraint(config if config is not None else self.config, plugin_name)

    def install_spec(self, plugin_name: str, config: ProtocolConfig | None = None) -> str:
        return plugin_whitelist.install_spec(config if config is not None else self.config, plugin_name)

    def has_plugin_whitelist(self, config: ProtocolConfig | None = None) -> bool:
        return (config if config is not None else self.config).has_plugin_whitelist

    def allowed_plugin_names(self, config: ProtocolConfig | None = None) -> tuple[str, ...]:
        cfg = config if config is not None else self.config
        return tuple(entry.name for entry in plugin_whitelist.whitelist_entries(cfg))
