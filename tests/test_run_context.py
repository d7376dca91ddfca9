from __future__ import annotations

import logging
from pathlib import Path

import pytest

from glassops.application.run_context import RunContext, validate_run_context
from glassops.domain.errors import RunContextError

from tests.util import make_context


def _env(workspace: Path, **overrides: str) -> dict[str, str]:
    env = {
        "GITHUB_WORKSPACE": str(workspace),
        "GITHUB_ACTOR": "octocat",
        "GITHUB_REPOSITORY": "test-org/test-repo",
        "GITHUB_SHA": "deadbeef",
        "GITHUB_EVENT_NAME": "push",
    }
    env.update(overrides)
    return env


@pytest.mark.governance
def test_from_environment(tmp_path: Path):
    context = RunContext.from_environment(_env(tmp_path))
    assert context.workspace == tmp_path
    assert context.actor == "octocat"
    assert context.repository == "test-org/test-repo"
    assert context.commit == "deadbeef"
    assert context.trigger == "push"
    assert context.head_ref is None


@pytest.mark.governance
def test_missing_optional_variables_take_defaults(tmp_path: Path):
    env = {"GITHUB_REPOSITORY": "test-org/test-repo"}
    context = RunContext.from_environment(env, workspace=tmp_path)
    assert context.actor == "unknown"
    assert context.commit == "unknown"
    assert context.trigger == "manual"


@pytest.mark.governance
@pytest.mark.parametrize("repository", ("", "no-slash", "a/b/c", "owner/ name"))
def test_invalid_repository_is_rejected(tmp_path: Path, repository: str):
    with pytest.raises(RunContextError):
        RunContext.from_environment(_env(tmp_path, GITHUB_REPOSITORY=repository))


@pytest.mark.governance
def test_missing_workspace_is_rejected(tmp_path: Path):
    with pytest.raises(RunContextError):
        validate_run_context(make_context(tmp_path / "absent"))


@pytest.mark.governance
def test_pull_request_requires_head_ref(tmp_path: Path):
    with pytest.raises(RunContextError):
        RunContext.from_environment(_env(tmp_path, GITHUB_EVENT_NAME="pull_request"))
    context = RunContext.from_environment(_env(tmp_path, GITHUB_EVENT_NAME="pull_request", GITHUB_HEAD_REF="feature/x"))
    assert context.is_pull_request


@pytest.mark.governance
def test_fork_like_head_ref_logs_warning(tmp_path: Path, caplog: pytest.LogCaptureFixture):
    with caplog.at_level(logging.WARNING, logger="glassops"):
        validate_run_context(make_context(tmp_path, trigger="pull_request", head_ref="contributor:main"))
    assert "fork" in caplog.text


@pytest.mark.governance
def test_plain_head_ref_is_not_a_fork(tmp_path: Path, caplog: pytest.LogCaptureFixture):
    context = validate_run_context(make_context(tmp_path, trigger="pull_request", head_ref="main"))
    assert context.possible_fork is False
    assert "fork" not in caplog.text
