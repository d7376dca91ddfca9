"""Deployment contract: the audit record emitted at the end of every run.

Serialized field names are camelCase because the JSON file is consumed by
signing and archival tooling outside this package.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Final, Literal, Mapping, cast

Engine = Literal["native", "hardis", "custom"]
ContractStatus = Literal["Succeeded", "Failed", "Blocked"]

CONTRACT_FILE_NAME: Final[str] = "glassops-contract.json"
DEFAULT_SCHEMA_VERSION: Final[str] = "1.0"
ENGINES: Final[tuple[str, ...]] = ("native", "hardis", "custom")
STATUSES: Final[tuple[str, ...]] = ("Succeeded", "Failed", "Blocked")

_PERCENT: Final[dict[str, object]] = {"type": "number", "minimum": 0, "maximum": 100}
_COUNT: Final[dict[str, object]] = {"type": "number", "minimum": 0}
_TEXT: Final[dict[str, object]] = {"type": "string"}

CONTRACT_SCHEMA: Final[dict[str, object]] = {
    "type": "object",
    "required": ["schemaVersion", "meta", "status", "quality", "audit"],
    "properties": {
        "schemaVersion": _TEXT,
        "meta": {
            "type": "object",
            "required": ["adapter", "engine", "timestamp", "trigger"],
            "properties": {
                "adapter": _TEXT,
                "engine": {"type": "string", "enum": list(ENGINES)},
                "timestamp": {"type": "string", "format": "date-time"},
                "trigger": _TEXT,
            },
        },
        "status": {"type": "string", "enum": list(STATUSES)},
        "quality": {
            "type": "object",
            "required": ["coverage", "tests"],
            "properties": {
                "coverage": {
                    "type": "object",
                    "required": ["actual", "required", "met"],
                    "properties": {
                        "actual": _PERCENT,
                        "required": _PERCENT,
                        "met": {"type": "boolean"},
                    },
                },
                "tests": {
                    "type": "object",
                    "required": ["total", "passed", "failed"],
                    "properties": {
                        "total": _COUNT,
                        "passed": _COUNT,
                        "failed": _COUNT,
                    },
                },
            },
        },
        "audit": {
            "type": "object",
            "required": ["triggeredBy", "orgId", "repository", "commit"],
            "properties": {
                "triggeredBy": _TEXT,
                "orgId": _TEXT,
                "repository": _TEXT,
                "commit": _TEXT,
            },
        },
    },
}


def utc_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""

    instant = now if now is not None else datetime.now(timezone.utc)
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    instant = instant.astimezone(timezone.utc)
    return instant.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def coverage_met(actual: float, required: float) -> bool:
    return actual >= required


@dataclass(frozen=True)
class ContractMeta:
    adapter: str
    engine: Engine
    timestamp: str
    trigger: str


@dataclass(frozen=True)
class CoverageResult:
    actual: float
    required: float
    met: bool


@dataclass(frozen=True)
class TestCounts:
    __test__ = False

    total: float = 0
    passed: float = 0
    failed: float = 0


@dataclass(frozen=True)
class ContractAudit:
    triggered_by: str
    org_id: str
    repository: str
    commit: str


@dataclass(frozen=True)
class DeploymentContract:
    meta: ContractMeta
    status: ContractStatus
    coverage: CoverageResult
    tests: TestCounts
    audit: ContractAudit
    schema_version: str = DEFAULT_SCHEMA_VERSION

    def to_dict(self) -> dict[str, Any]:
        return {
            "schemaVersion": self.schema_version,
            "meta": {
                "adapter": self.meta.adapter,
                "engine": self.meta.engine,
                "timestamp": self.meta.timestamp,
                "trigger": self.meta.trigger,
            },
            "status": self.status,
            "quality": {
                "coverage": {
                    "actual": self.coverage.actual,
                    "required": self.coverage.required,
                    "met": self.coverage.met,
                },
                "tests": {
                    "total": self.tests.total,
                    "passed": self.tests.passed,
                    "failed": self.tests.failed,
                },
            },
            "audit": {
                "triggeredBy": self.audit.triggered_by,
                "orgId": self.audit.org_id,
                "repository": self.audit.repository,
                "commit": self.audit.commit,
            },
        }


def contract_from_mapping(payload: Mapping[str, Any]) -> DeploymentContract:
    """Build a contract from a payload that already satisfies ``CONTRACT_SCHEMA``."""

    meta = payload["meta"]
    coverage = payload["quality"]["coverage"]
    tests = payload["quality"]["tests"]
    audit = payload["audit"]
    return DeploymentContract(
        schema_version=payload.get("schemaVersion", DEFAULT_SCHEMA_VERSION),
        meta=ContractMeta(
            adapter=meta["adapter"],
            engine=cast(Engine, meta["engine"]),
            timestamp=meta["timestamp"],
            trigger=meta["trigger"],
        ),
        status=cast(ContractStatus, payload["status"]),
        coverage=CoverageResult(
            actual=coverage["actual"],
            required=coverage["required"],
            met=coverage["met"],
        ),
        tests=TestCounts(total=tests["total"], passed=tests["passed"], failed=tests["failed"]),
        audit=ContractAudit(
            triggered_by=audit["triggeredBy"],
            org_id=audit["orgId"],
            repository=audit["repository"],
            commit=audit["commit"],
        ),
    )


def build_contract_payload(
    *,
    status: str,
    coverage_actual: float,
    coverage_required: float,
    tests: TestCounts,
    triggered_by: str,
    org_id: str,
    repository: str,
    commit: str,
    trigger: str,
    timestamp: str,
    adapter: str = "native",
    engine: str = "native",
) -> dict[str, Any]:
    """Assemble an unvalidated contract candidate with ``met`` derived from the figures."""

    return {
        "schemaVersion": DEFAULT_SCHEMA_VERSION,
        "meta": {
            "adapter": adapter,
            "engine": engine,
            "timestamp": timestamp,
            "trigger": trigger,
        },
        "status": status,
        "quality": {
            "coverage": {
                "actual": coverage_actual,
                "required": coverage_required,
                "met": coverage_met(coverage_actual, coverage_required),
            },
            "tests": {"total": tests.total, "passed": tests.passed, "failed": tests.failed},
        },
        "audit": {
            "triggeredBy": triggered_by,
            "orgId": org_id,
            "repository": repository,
            "commit": commit,
        },
    }
