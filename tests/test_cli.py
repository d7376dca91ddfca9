from __future__ import annotations

import json
from pathlib import Path

import pytest

from glassops.cli import build_parser, main

from tests.util import FRIDAY_10_00, StubAdapter, config_with, ok, write_config


def _env(workspace: Path, output: Path) -> dict[str, str]:
    return {
        "GITHUB_WORKSPACE": str(workspace),
        "GITHUB_REPOSITORY": "test-org/test-repo",
        "GITHUB_ACTOR": "octocat",
        "GITHUB_SHA": "deadbeef",
        "GITHUB_EVENT_NAME": "push",
        "GITHUB_OUTPUT": str(output),
        "INPUT_SKIP_AUTH": "true",
        "INPUT_ENFORCE_POLICY": "true",
    }


def _outputs(path: Path) -> dict[str, str]:
    return dict(line.split("=", 1) for line in path.read_text(encoding="utf-8").splitlines())


@pytest.mark.governance
def test_run_succeeds_and_writes_outputs(tmp_path: Path):
    output = tmp_path / "github_output"
    code = main(["run"], env=_env(tmp_path, output), adapter=StubAdapter(on_path={"sf"}))

    assert code == 0
    outputs = _outputs(output)
    assert outputs["glassops_ready"] == "true"
    assert outputs["is_locked"] == "false"
    assert outputs["org_id"] == "00D000000000000000"
    assert json.loads((tmp_path / "glassops-contract.json").read_text(encoding="utf-8"))["status"] == "Succeeded"


@pytest.mark.governance
def test_run_is_default_command(tmp_path: Path):
    output = tmp_path / "github_output"
    assert main([], env=_env(tmp_path, output), adapter=StubAdapter(on_path={"sf"})) == 0


@pytest.mark.governance
def test_freeze_window_fails_run(tmp_path: Path):
    write_config(tmp_path, config_with(freeze_windows=[{"day": "Friday", "start": "09:00", "end": "17:00"}]))
    output = tmp_path / "github_output"
    adapter = StubAdapter(on_path={"sf"}, now_utc_value=FRIDAY_10_00)

    assert main(["run"], env=_env(tmp_path, output), adapter=adapter) == 1
    outputs = _outputs(output)
    assert outputs["is_locked"] == "true"
    assert outputs["glassops_ready"] == "false"
    assert adapter.calls == []


@pytest.mark.governance
def test_input_overrides_take_precedence(tmp_path: Path):
    output = tmp_path / "github_output"
    code = main(
        ["run", "--workspace", str(tmp_path), "--input", "coverage_percentage=150"],
        env=_env(tmp_path, output),
        adapter=StubAdapter(on_path={"sf"}),
    )
    assert code == 1
    assert _outputs(output)["glassops_ready"] == "false"


@pytest.mark.governance
def test_invalid_context_fails_before_any_phase(tmp_path: Path):
    env = _env(tmp_path, tmp_path / "github_output")
    env["GITHUB_REPOSITORY"] = "not-a-repo"
    adapter = StubAdapter(on_path={"sf"})

    assert main(["run"], env=env, adapter=adapter) == 1
    assert not (tmp_path / "github_output").exists()
    assert not (tmp_path / "glassops-contract.json").exists()


@pytest.mark.governance
def test_malformed_input_override_fails(tmp_path: Path):
    env = _env(tmp_path, tmp_path / "github_output")
    assert main(["run", "--input", "broken"], env=env, adapter=StubAdapter()) == 1


@pytest.mark.governance
def test_analyze_reports_violations(tmp_path: Path):
    report = [{"fileName": "Foo.cls", "violations": [{"ruleName": "R", "message": "m", "severity": 1, "line": 3}]}]
    adapter = StubAdapter().on(("sf", "code-analyzer"), lambda args, _: ok(args, json.dumps(report)))
    assert main(["analyze", "force-app"], env={}, adapter=adapter) == 1
    assert adapter.ran("sf", "code-analyzer", "run")


@pytest.mark.governance
def test_analyze_clean_scan_succeeds():
    adapter = StubAdapter().on(("sf", "code-analyzer"), lambda args, _: ok(args, "[]"))
    assert main(["analyze", "force-app", "--ruleset", "Recommended"], env={}, adapter=adapter) == 0


@pytest.mark.governance
def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.command is None
    assert args.timeout_minutes == 30
    assert args.log_level == "INFO"
