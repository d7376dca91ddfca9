"""Deployment contract validation.

Validation is total and single pass: every violation is collected, the first
one is the reported field path. A candidate that fails is never turned into a
``DeploymentContract``, so no partial contract can reach the writer.
"""

from __future__ import annotations

import copy
from typing import Any, Mapping, cast

from glassops.domain.deployment_contract import (
    CONTRACT_SCHEMA,
    DEFAULT_SCHEMA_VERSION,
    DeploymentContract,
    contract_from_mapping,
)
from glassops.domain.errors import SchemaViolation
from glassops.engine.schema_validator import validate_against_schema


def apply_contract_defaults(candidate: Mapping[str, Any]) -> dict[str, Any]:
    normalized = copy.deepcopy(dict(candidate))
    normalized.setdefault("schemaVersion", DEFAULT_SCHEMA_VERSION)
    return normalized


def contract_errors(candidate: object) -> list[str]:
    if not isinstance(candidate, Mapping):
        return ["$:expected object"]
    return validate_against_schema(schema=CONTRACT_SCHEMA, value=apply_contract_defaults(candidate))


class ContractValidator:
    """Validates and normalizes contract candidates."""

    def validate(self, candidate: object) -> DeploymentContract:
        errors = contract_errors(candidate)
        if errors:
            raise SchemaViolation(errors, subject="Deployment contract")
        return contract_from_mapping(apply_contract_defaults(cast(Mapping[str, Any], candidate)))
