from __future__ import annotations

import pytest

from glassops.domain.errors import FreezeViolation
from glassops.domain.protocol_config import FreezeWindow, GovernanceSettings, ProtocolConfig
from glassops.engine.policy_engine import PolicyEngine

from tests.util import FRIDAY_10_00, FRIDAY_18_00


class _CountingStore:
    def __init__(self, config: ProtocolConfig) -> None:
        self.config = config
        self.loads = 0

    def load(self) -> ProtocolConfig:
        self.loads += 1
        return self.config


_CONFIG = ProtocolConfig(
    governance=GovernanceSettings(
        freeze_windows=(FreezeWindow(day="Friday", start="09:00", end="17:00"),),
        plugin_whitelist=("sfdx-hardis@^4.0.0", "@salesforce/plugin-deploy-retrieve"),
    )
)


@pytest.mark.governance
def test_config_is_loaded_once():
    store = _CountingStore(_CONFIG)
    engine = PolicyEngine(store)
    assert engine.load() is _CONFIG
    assert engine.config is _CONFIG
    engine.is_allowed("sfdx-hardis")
    assert store.loads == 1


@pytest.mark.governance
def test_check_freeze_uses_injected_clock():
    with pytest.raises(FreezeViolation):
        PolicyEngine(_CountingStore(_CONFIG), clock=lambda: FRIDAY_10_00).check_freeze()
    PolicyEngine(_CountingStore(_CONFIG), clock=lambda: FRIDAY_18_00).check_freeze()


@pytest.mark.governance
def test_explicit_instant_overrides_clock():
    engine = PolicyEngine(_CountingStore(_CONFIG), clock=lambda: FRIDAY_18_00)
    with pytest.raises(FreezeViolation):
        engine.check_freeze(now=FRIDAY_10_00)


@pytest.mark.governance
def test_whitelist_queries():
    engine = PolicyEngine(_CountingStore(_CONFIG))
    assert engine.has_plugin_whitelist()
    assert engine.allowed_plugin_names() == ("sfdx-hardis", "@salesforce/plugin-deploy-retrieve")
    assert engine.version_constraint("sfdx-hardis") == "^4.0.0"
    assert engine.is_allowed("@salesforce/plugin-deploy-retrieve")
    assert not engine.is_allowed("other")


@pytest.mark.governance
def test_explicit_config_argument_wins():
    engine = PolicyEngine(_CountingStore(_CONFIG))
    permissive = ProtocolConfig()
    assert not engine.has_plugin_whitelist(permissive)
    assert engine.is_allowed("other", permissive)


@pytest.mark.governance
def test_install_spec_pins_whitelisted_constraint():
    engine = PolicyEngine(_CountingStore(_CONFIG))
    assert engine.install_spec("sfdx-hardis") == "sfdx-hardis@^4.0.0"
    assert engine.install_spec("@salesforce/plugin-deploy-retrieve") == "@salesforce/plugin-deploy-retrieve"
    assert engine.install_spec("other", ProtocolConfig()) == "other"
