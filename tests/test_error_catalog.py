from __future__ import annotations

from pathlib import Path

import pytest

from glassops.domain.error_codes import CANONICAL_ERROR_CODES
from glassops.infrastructure.error_catalog import load_catalog, resolve_remediation


@pytest.mark.governance
def test_packaged_catalog_covers_every_phase_error_code():
    catalog = load_catalog()
    for code in CANONICAL_ERROR_CODES:
        assert code in catalog, code
        remediation = resolve_remediation(code)
        assert remediation.summary != code
        assert remediation.how_to_fix


@pytest.mark.governance
def test_unknown_code_gets_generic_remediation():
    remediation = resolve_remediation("SOMETHING_ELSE")
    assert remediation.summary == "SOMETHING_ELSE"
    assert "run log" in remediation.how_to_fix


@pytest.mark.governance
def test_unreadable_or_malformed_catalog_yields_empty(tmp_path: Path):
    assert load_catalog(tmp_path / "missing.yaml") == {}
    broken = tmp_path / "broken.yaml"
    broken.write_text("error_codes: [unclosed", encoding="utf-8")
    assert load_catalog(broken) == {}
    listing = tmp_path / "list.yaml"
    listing.write_text("- a\n- b\n", encoding="utf-8")
    assert load_catalog(listing) == {}


@pytest.mark.governance
def test_custom_catalog_entries_are_trimmed(tmp_path: Path):
    custom = tmp_path / "catalog.yaml"
    custom.write_text(
        "error_codes:\n  POLICY_VIOLATION:\n    summary: '  Blocked.  '\n    how_to_fix: ''\n",
        encoding="utf-8",
    )
    remediation = resolve_remediation("POLICY_VIOLATION", load_catalog(custom))
    assert remediation.summary == "Blocked."
    assert "run log" in remediation.how_to_fix
