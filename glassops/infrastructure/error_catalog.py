"""Remediation catalog for phase error codes.

The catalog ships as package data (``error_catalog.yaml``). Lookups never
fail: an unknown code or an unreadable catalog yields the generic entry.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

CATALOG_PATH = Path(__file__).with_name("error_catalog.yaml")

_GENERIC_HOW_TO_FIX = "Inspect the run log above for the failing phase and its cause."


@dataclass(frozen=True)
class Remediation:
    code: str
    summary: str
    how_to_fix: str


def _default_remediation(code: str) -> Remediation:
    return Remediation(code=code, summary=code, how_to_fix=_GENERIC_HOW_TO_FIX)


def load_catalog(path: Path = CATALOG_PATH) -> dict[str, dict[str, Any]]:
    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError):
        return {}
    entries = payload.get("error_codes") if isinstance(payload, dict) else None
    if not isinstance(entries, dict):
        return {}
    return {str(k): v for k, v in entries.items() if isinstance(v, dict)}


@lru_cache(maxsize=1)
def _packaged_catalog() -> dict[str, dict[str, Any]]:
    return load_catalog(CATALOG_PATH)


def resolve_remediation(code: str, catalog: dict[str, dict[str, Any]] | None = None) -> Remediation:
    entries = _packaged_catalog() if catalog is None else catalog
    entry = entries.get(code)
    if entry is None:
        return _default_remediation(code)
    summary = entry.get("summary")
    how_to_fix = entry.get("how_to_fix")
    return Remediation(
        code=code,
        summary=summary.strip() if isinstance(summary, str) and summary.strip() else code,
        how_to_fix=how_to_fix.strip() if isinstance(how_to_fix, str) and how_to_fix.strip() else _GENERIC_HOW_TO_FIX,
    )
