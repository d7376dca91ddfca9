from __future__ import annotations

from pathlib import Path

import pytest

from glassops.infrastructure.action_io import (
    format_output,
    input_env_name,
    parse_input_overrides,
    read_action_inputs,
    write_action_outputs,
)


@pytest.mark.governance
def test_input_env_name():
    assert input_env_name("client_id") == "INPUT_CLIENT_ID"
    assert input_env_name("test results") == "INPUT_TEST_RESULTS"


@pytest.mark.governance
def test_read_action_inputs_only_returns_present_values():
    env = {"INPUT_CLIENT_ID": " cid ", "INPUT_SKIP_AUTH": "true", "UNRELATED": "x"}
    assert read_action_inputs(env) == {"client_id": "cid", "skip_auth": "true"}


@pytest.mark.governance
def test_parse_input_overrides():
    assert parse_input_overrides(["skip_auth=true", "test_results={\"total\": 1}"]) == {
        "skip_auth": "true",
        "test_results": '{"total": 1}',
    }
    with pytest.raises(ValueError):
        parse_input_overrides(["no-separator"])
    with pytest.raises(ValueError):
        parse_input_overrides(["=value"])


@pytest.mark.governance
def test_format_output_uses_heredoc_for_multiline_values():
    assert format_output("is_locked", "false") == "is_locked=false\n"
    text = format_output("message", "line one\nline two")
    header, body = text.split("\n", 1)
    delimiter = header.split("<<", 1)[1]
    assert header.startswith("message<<ghadelimiter_")
    assert body == f"line one\nline two\n{delimiter}\n"


@pytest.mark.governance
def test_write_action_outputs_appends_to_github_output(tmp_path: Path):
    target = tmp_path / "github_output"
    target.write_text("existing=1\n", encoding="utf-8")
    path = write_action_outputs({"runtime_id": "abc", "is_locked": "false"}, {"GITHUB_OUTPUT": str(target)})

    assert path == target
    assert target.read_text(encoding="utf-8") == "existing=1\nruntime_id=abc\nis_locked=false\n"


@pytest.mark.governance
def test_write_action_outputs_without_github_output_only_logs(caplog: pytest.LogCaptureFixture):
    caplog.set_level("INFO", logger="glassops")
    assert write_action_outputs({"runtime_id": "abc"}, {}) is None
    assert "output runtime_id=abc" in caplog.text
