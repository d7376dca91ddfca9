"""Governance error taxonomy.

Leaf errors describe what went wrong; ``PhaseError`` subclasses tag a leaf
error with the pipeline phase it escaped from and a stable error code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from glassops.domain.error_codes import (
    AUTHENTICATION_FAILED,
    BOOTSTRAP_FAILED,
    CONTRACT_GENERATION_FAILED,
    PHASE_BOOTSTRAP,
    PHASE_CONTRACT,
    PHASE_IDENTITY,
    PHASE_POLICY,
    POLICY_VIOLATION,
)

if TYPE_CHECKING:
    from glassops.domain.protocol_config import FreezeWindow


class GlassOpsError(RuntimeError):
    """Base class for every error raised by the governance runtime."""


class GovernancePolicyError(GlassOpsError):
    """Raised when the governance configuration is present but unusable."""


class FreezeViolation(GovernancePolicyError):
    """Raised when the current instant falls inside a freeze window."""

    def __init__(self, message: str, *, window: "FreezeWindow") -> None:
        super().__init__(message)
        self.window = window


class PluginNotWhitelisted(GlassOpsError):
    def __init__(self, message: str, *, plugin: str) -> None:
        super().__init__(message)
        self.plugin = plugin


class PluginVerificationFailed(GlassOpsError):
    def __init__(self, message: str, *, plugin: str) -> None:
        super().__init__(message)
        self.plugin = plugin


class RuntimeInstallError(GlassOpsError):
    """Raised when the CLI binary or a plugin could not be installed."""


class AuthenticationError(GlassOpsError):
    """Raised when the identity provider rejects the login."""


class RunContextError(GlassOpsError):
    """Raised when run context variables or run inputs are invalid."""


class SchemaViolation(GlassOpsError):
    """Raised when a document fails structural validation.

    ``errors`` holds ``"<path>:<rule>"`` entries; the first one is the
    reported field path.
    """

    def __init__(self, errors: list[str] | tuple[str, ...], *, subject: str = "document") -> None:
        self.errors = tuple(errors)
        self.subject = subject
        first = self.errors[0] if self.errors else "$:invalid"
        extra = len(self.errors) - 1
        suffix = f" (+{extra} more)" if extra > 0 else ""
        super().__init__(f"{subject} schema violation at {first}{suffix}")

    @property
    def field_path(self) -> str:
        if not self.errors:
            return "$"
        return self.errors[0].rsplit(":", 1)[0]


class PhaseError(GlassOpsError):
    """Phase-tagged wrapper preserving the original cause."""

    phase: str = ""
    code: str = ""

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def to_dict(self) -> dict[str, str]:
        return {
            "phase": self.phase,
            "code": self.code,
            "message": self.message,
            "cause": type(self.cause).__name__ if self.cause is not None else "",
        }


class PolicyError(PhaseError):
    phase = PHASE_POLICY
    code = POLICY_VIOLATION


class BootstrapError(PhaseError):
    phase = PHASE_BOOTSTRAP
    code = BOOTSTRAP_FAILED


class IdentityError(PhaseError):
    phase = PHASE_IDENTITY
    code = AUTHENTICATION_FAILED


class ContractError(PhaseError):
    phase = PHASE_CONTRACT
    code = CONTRACT_GENERATION_FAILED
