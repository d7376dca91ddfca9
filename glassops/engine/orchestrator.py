"""Linear phase orchestrator: Policy -> Bootstrap -> Identity -> Contract.

Each phase either completes or raises its phase-tagged ``PhaseError``; the
first failure ends the run. There is no retry and no backward transition.
``run()`` is the single error boundary: it always returns a ``RunResult``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
from pathlib import Path
from typing import Callable, Protocol, Sequence
import uuid

from glassops.application.run_context import RunContext
from glassops.application.run_inputs import RunInputs
from glassops.domain.deployment_contract import (
    CONTRACT_FILE_NAME,
    DeploymentContract,
    TestCounts,
    build_contract_payload,
    utc_timestamp,
)
from glassops.domain.error_codes import PHASE_BOOTSTRAP, PHASE_CONTRACT, PHASE_IDENTITY, PHASE_ORDER, PHASE_POLICY
from glassops.domain.errors import (
    BootstrapError,
    ContractError,
    FreezeViolation,
    IdentityError,
    PhaseError,
    PolicyError,
)
from glassops.domain.protocol_config import ProtocolConfig
from glassops.engine.contract_validator import ContractValidator
from glassops.engine.policy_engine import PolicyEngine
from glassops.infrastructure.fs_atomic import atomic_write_json
from glassops.infrastructure.identity_resolver import AuthRequest
from glassops.infrastructure.workflow_logging import log_group

logger = logging.getLogger(__name__)

# Org identifier recorded when authentication is skipped for dry runs.
SKIPPED_AUTH_ORG_ID = "00D000000000000000"
UNKNOWN_ORG_ID = "unknown"


class Installer(Protocol):
    def install(self, version: str = ...) -> None:
        ...

    def install_plugins(self, config: ProtocolConfig, plugins: Sequence[str], policy: PolicyEngine) -> None:
        ...


class Authenticator(Protocol):
    def authenticate(self, request: AuthRequest) -> str:
        ...


@dataclass(frozen=True)
class RunResult:
    runtime_id: str
    is_locked: bool
    org_id: str | None = None
    contract: DeploymentContract | None = None
    contract_path: Path | None = None
    failure: PhaseError | None = None
    completed_phases: tuple[str, ...] = field(default_factory=tuple)

    @property
    def ready(self) -> bool:
        return self.failure is None

    @property
    def message(self) -> str:
        if self.failure is None:
            return "GlassOps Runtime is ready for governed execution."
        return self.failure.message

    def outputs(self) -> dict[str, str]:
        outputs = {
            "runtime_id": self.runtime_id,
            "is_locked": "true" if self.is_locked else "false",
        }
        if self.org_id is not None:
            outputs["org_id"] = self.org_id
        if self.contract_path is not None:
            outputs["contract_path"] = str(self.contract_path)
        outputs["glassops_ready"] = "true" if self.ready else "false"
        return outputs


@dataclass
class _RunState:
    runtime_id: str
    is_locked: bool = False
    config: ProtocolConfig | None = None
    org_id: str | None = None
    contract: DeploymentContract | None = None
    contract_path: Path | None = None
    completed: list[str] = field(default_factory=list)


class PhaseOrchestrator:
    def __init__(
        self,
        *,
        context: RunContext,
        policy: PolicyEngine,
        installer: Installer,
        identity: Authenticator,
        validator: ContractValidator | None = None,
        clock: Callable[[], datetime] | None = None,
        runtime_id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._context = context
        self._policy = policy
        self._installer = installer
        self._identity = identity
        self._validator = validator if validator is not None else ContractValidator()
        self._clock = clock if clock is not None else (lambda: datetime.now(timezone.utc))
        self._new_runtime_id = runtime_id_factory if runtime_id_factory is not None else (lambda: str(uuid.uuid4()))

    @property
    def contract_path(self) -> Path:
        return self._context.workspace / CONTRACT_FILE_NAME

    def run(self, inputs: RunInputs) -> RunResult:
        state = _RunState(runtime_id=self._new_runtime_id())
        logger.info("GlassOps run %s started (%s on %s)", state.runtime_id, self._context.trigger, self._context.repository)
        failure: PhaseError | None = None
        try:
            self._policy_phase(state, inputs)
            self._bootstrap_phase(state, inputs)
            self._identity_phase(state, inputs)
            self._contract_phase(state, inputs)
        except PhaseError as exc:
            failure = exc
        except Exception as exc:  # noqa: BLE001
            failure = self._wrap_unexpected(state, exc)

        if failure is not None:
            logger.error("%s phase failed [%s]: %s", failure.phase, failure.code, failure.message)
            if failure.phase != PHASE_CONTRACT:
                self._write_failure_contract(state, failure, inputs)
        else:
            logger.info("GlassOps Runtime is ready for governed execution.")

        return RunResult(
            runtime_id=state.runtime_id,
            is_locked=state.is_locked,
            org_id=state.org_id,
            contract=state.contract,
            contract_path=state.contract_path,
            failure=failure,
            completed_phases=tuple(state.completed),
        )

    def _policy_phase(self, state: _RunState, inputs: RunInputs) -> None:
        with log_group("Policy", logger):
            try:
                state.config = self._policy.load()
                if inputs.enforce_policy:
                    self._policy.check_freeze(state.config, now=self._clock())
                    logger.info("No active freeze window.")
                else:
                    logger.info("Policy enforcement not requested; freeze windows not evaluated.")
            except Exception as exc:
                state.is_locked = True
                raise PolicyError(str(exc), cause=exc) from exc
            state.is_locked = False
            state.completed.append(PHASE_POLICY)

    def _bootstrap_phase(self, state: _RunState, inputs: RunInputs) -> None:
        config = self._require_config(state)
        try:
            self._installer.install(config.runtime.cli_version)
            self._installer.install_plugins(config, inputs.plugins, self._policy)
        except Exception as exc:
            raise BootstrapError(str(exc), cause=exc) from exc
        state.completed.append(PHASE_BOOTSTRAP)

    def _identity_phase(self, state: _RunState, inputs: RunInputs) -> None:
        if inputs.skip_auth:
            logger.warning("Authentication skipped (skip_auth=true); use for non-production dry runs only.")
            state.org_id = SKIPPED_AUTH_ORG_ID
            state.completed.append(PHASE_IDENTITY)
            return
        try:
            request = inputs.auth_request()
            state.org_id = self._identity.authenticate(request)
        except Exception as exc:
            raise IdentityError(str(exc), cause=exc) from exc
        state.completed.append(PHASE_IDENTITY)

    def _contract_phase(self, state: _RunState, inputs: RunInputs) -> None:
        with log_group("Deployment Contract", logger):
            logger.info("Generating Deployment Contract v1.0...")
            try:
                actual, required = inputs.coverage()
                payload = self._contract_payload(
                    status="Succeeded",
                    org_id=state.org_id or UNKNOWN_ORG_ID,
                    coverage_actual=actual,
                    coverage_required=required,
                    tests=inputs.test_counts(),
                )
                contract = self._validator.validate(payload)
                atomic_write_json(self.contract_path, contract.to_dict())
            except Exception as exc:
                raise ContractError(str(exc), cause=exc) from exc
            state.contract = contract
            state.contract_path = self.contract_path
            state.completed.append(PHASE_CONTRACT)
            logger.info("Deployment contract written to %s", self.contract_path)

    def _contract_payload(
        self,
        *,
        status: str,
        org_id: str,
        coverage_actual: float,
        coverage_required: float,
        tests: TestCounts,
    ) -> dict:
        return build_contract_payload(
            status=status,
            coverage_actual=coverage_actual,
            coverage_required=coverage_required,
            tests=tests,
            triggered_by=self._context.actor,
            org_id=org_id,
            repository=self._context.repository,
            commit=self._context.commit,
            trigger=self._context.trigger,
            timestamp=utc_timestamp(self._clock()),
        )

    def _write_failure_contract(self, state: _RunState, failure: PhaseError, inputs: RunInputs) -> None:
        """Record a Blocked/Failed audit contract; skipped if it does not validate.

        Nothing was deployed, so measured coverage and test counts are zero.
        """

        status = "Blocked" if isinstance(failure.cause, FreezeViolation) else "Failed"
        try:
            _, required = inputs.coverage()
            payload = self._contract_payload(
                status=status,
                org_id=state.org_id or UNKNOWN_ORG_ID,
                coverage_actual=0,
                coverage_required=required,
                tests=TestCounts(),
            )
            contract = self._validator.validate(payload)
            atomic_write_json(self.contract_path, contract.to_dict())
        except Exception as exc:  # noqa: BLE001
            logger.warning("Could not write %s audit contract: %s", status, exc)
            return
        state.contract = contract
        state.contract_path = self.contract_path
        logger.info("%s audit contract written to %s", status, self.contract_path)

    def _require_config(self, state: _RunState) -> ProtocolConfig:
        if state.config is None:
            raise BootstrapError("governance config was not loaded before bootstrap")
        return state.config

    def _wrap_unexpected(self, state: _RunState, exc: Exception) -> PhaseError:
        wrappers = {
            PHASE_POLICY: PolicyError,
            PHASE_BOOTSTRAP: BootstrapError,
            PHASE_IDENTITY: IdentityError,
            PHASE_CONTRACT: ContractError,
        }
        current = next((p for p in PHASE_ORDER if p not in state.completed), PHASE_CONTRACT)
        wrapped = wrappers[current](str(exc) or type(exc).__name__, cause=exc)
        wrapped.__cause__ = exc
        return wrapped
