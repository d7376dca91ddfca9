"""Canonical phase error-code registry.

Values in this module are part of the run-failure contract consumed by CI
dashboards; changing one is a breaking change.
"""

from __future__ import annotations

from typing import Final

POLICY_VIOLATION: Final[str] = "POLICY_VIOLATION"
BOOTSTRAP_FAILED: Final[str] = "BOOTSTRAP_FAILED"
AUTHENTICATION_FAILED: Final[str] = "AUTHENTICATION_FAILED"
CONTRACT_GENERATION_FAILED: Final[str] = "CONTRACT_GENERATION_FAILED"

# Phase names in execution order.
PHASE_POLICY: Final[str] = "Policy"
PHASE_BOOTSTRAP: Final[str] = "Bootstrap"
PHASE_IDENTITY: Final[str] = "Identity"
PHASE_CONTRACT: Final[str] = "Contract"

PHASE_ORDER: Final[tuple[str, ...]] = (
    PHASE_POLICY,
    PHASE_BOOTSTRAP,
    PHASE_IDENTITY,
    PHASE_CONTRACT,
)

CANONICAL_ERROR_CODES: Final[tuple[str, ...]] = (
    POLICY_VIOLATION,
    BOOTSTRAP_FAILED,
    AUTHENTICATION_FAILED,
    CONTRACT_GENERATION_FAILED,
)

PHASE_ERROR_CODES: Final[dict[str, str]] = {
    PHASE_POLICY: POLICY_VIOLATION,
    PHASE_BOOTSTRAP: BOOTSTRAP_FAILED,
    PHASE_IDENTITY: AUTHENTICATION_FAILED,
    PHASE_CONTRACT: CONTRACT_GENERATION_FAILED,
}


def is_canonical_error_code(value: object) -> bool:
    return isinstance(value, str) and value in CANONICAL_ERROR_CODES
