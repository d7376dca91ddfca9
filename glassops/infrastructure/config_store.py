"""Loader for the on-disk governance configuration (``devops-config.json``).

A missing file is not an error: the permissive default config is returned
and a warning is logged so the gap stays visible. A file that exists but does
not parse or does not satisfy ``CONFIG_SCHEMA`` halts the run with a
``GovernancePolicyError``; no partial config is ever returned.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from glassops.domain.errors import GovernancePolicyError, SchemaViolation
from glassops.domain.protocol_config import (
    CONFIG_FILE_NAME,
    CONFIG_SCHEMA,
    ProtocolConfig,
    default_unsafe_config,
    protocol_config_from_mapping,
)
from glassops.engine.schema_validator import validate_against_schema

logger = logging.getLogger(__name__)

INVALID_POLICY_PREFIX = "Invalid Governance Policy: "


def parse_protocol_config(raw: str) -> ProtocolConfig:
    payload = json.loads(raw)
    errors = validate_against_schema(schema=CONFIG_SCHEMA, value=payload)
    if errors:
        raise SchemaViolation(errors, subject="Governance config")
    return protocol_config_from_mapping(payload)


class ConfigStore:
    def __init__(self, workspace: Path, *, file_name: str = CONFIG_FILE_NAME) -> None:
        self.config_path = Path(workspace) / file_name

    def load(self) -> ProtocolConfig:
        if not self.config_path.exists():
            logger.warning(
                "No %s found. Using default unsafe policy (governance disabled).",
                self.config_path.name,
            )
            return default_unsafe_config()

        try:
            raw = self.config_path.read_text(encoding="utf-8")
            config = parse_protocol_config(raw)
        except Exception as exc:
            raise GovernancePolicyError(f"{INVALID_POLICY_PREFIX}{exc}") from exc

        logger.debug("Loaded governance config from %s", self.config_path)
        return config
