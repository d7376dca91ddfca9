"""Salesforce CLI and plugin bootstrap.

Plugins are installed one at a time, each checked against the whitelist
before any process is started for it and verified against ``sf plugins
--json`` before the next one is attempted.
"""

from __future__ import annotations

import json
import logging
from typing import Sequence

from glassops.domain.errors import PluginNotWhitelisted, PluginVerificationFailed, RuntimeInstallError
from glassops.domain.protocol_config import DEFAULT_CLI_VERSION, ProtocolConfig
from glassops.engine.adapters import HostAdapter
from glassops.engine.policy_engine import PolicyEngine
from glassops.infrastructure.workflow_logging import log_group

logger = logging.getLogger(__name__)

CLI_COMMAND = "sf"
CLI_PACKAGE = "@salesforce/cli"
INSTALL_TIMEOUT_SECONDS = 900

# Answers the "unsigned plugin, continue?" prompt of `sf plugins install`.
_UNSIGNED_PLUGIN_CONFIRMATION = "y\n"


def installed_plugin_names(listing_json: str) -> set[str]:
    """Extract plugin names from ``sf plugins --json`` output."""

    try:
        payload = json.loads(listing_json)
    except json.JSONDecodeError:
        return set()
    result = payload.get("result") if isinstance(payload, dict) else payload
    if not isinstance(result, list):
        return set()
    return {str(item["name"]) for item in result if isinstance(item, dict) and "name" in item}


class RuntimeInstaller:
    def __init__(self, adapter: HostAdapter) -> None:
        self._adapter = adapter

    def install(self, version: str = DEFAULT_CLI_VERSION) -> None:
        with log_group("Bootstrapping GlassOps Runtime", logger):
            if self._adapter.which(CLI_COMMAND):
                logger.info("Salesforce CLI detected in environment, skipping install.")
                return

            logger.info("Installing %s@%s...", CLI_PACKAGE, version)
            try:
                steps = (
                    ("npm", "install", "-g", f"{CLI_PACKAGE}@{version}"),
                    (CLI_COMMAND, "version"),
                )
                for argv in steps:
                    result = self._adapter.exec_argv(argv, timeout_seconds=INSTALL_TIMEOUT_SECONDS)
                    if not result.ok:
                        raise RuntimeInstallError(f"{' '.join(argv)} failed: {result.detail()}")
            except (OSError, RuntimeInstallError) as exc:
                logger.debug("CLI bootstrap failed: %s", exc)
                raise RuntimeInstallError("Failed to bootstrap runtime. NPM registry might be down.") from exc

    def install_plugins(self, config: ProtocolConfig, plugins: Sequence[str], policy: PolicyEngine) -> None:
        if not plugins:
            logger.info("No plugins specified for installation.")
            return

        with log_group("Installing Salesforce CLI Plugins", logger):
            for plugin in plugins:
                self._install_plugin(config, plugin, policy)

    def _install_plugin(self, config: ProtocolConfig, plugin: str, policy: PolicyEngine) -> None:
        logger.info("Validating plugin: %s", plugin)
        if not policy.has_plugin_whitelist(config):
            logger.warning("No plugin whitelist configured. Installing %s without validation.", plugin)
        elif not policy.is_allowed(plugin, config):
            allowed = ", ".join(policy.allowed_plugin_names(config))
            raise PluginNotWhitelisted(
                f"Plugin '{plugin}' is not in the whitelist. Allowed plugins: {allowed}",
                plugin=plugin,
            )

        spec = policy.install_spec(plugin, config)
        logger.info("Installing plugin: %s", spec)

        try:
            result = self._adapter.exec_argv(
                (CLI_COMMAND, "plugins", "install", spec),
                timeout_seconds=INSTALL_TIMEOUT_SECONDS,
                input_text=_UNSIGNED_PLUGIN_CONFIRMATION,
            )
        except OSError as exc:
            logger.error("Failed to install plugin '%s': %s", plugin, exc)
            raise RuntimeInstallError(f"Plugin installation failed: {exc}") from exc
        if not result.ok:
            logger.error("Failed to install plugin '%s': %s", plugin, result.detail())
            raise RuntimeInstallError(f"Plugin installation failed: {result.detail()}")

        self._verify_plugin(plugin)
        logger.info("Plugin '%s' installed and verified successfully", plugin)

    def _verify_plugin(self, plugin: str) -> None:
        try:
            listing = self._adapter.exec_argv((CLI_COMMAND, "plugins", "--json"))
        except OSError as exc:
            raise PluginVerificationFailed(
                f"Plugin '{plugin}' installation verification failed: {exc}", plugin=plugin
            ) from exc
        if not listing.ok or plugin not in installed_plugin_names(listing.stdout):
            raise PluginVerificationFailed(f"Plugin '{plugin}' installation verification failed", plugin=plugin)
