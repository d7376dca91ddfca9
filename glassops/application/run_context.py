"""Explicit run context for the orchestrator.

Everything the pipeline needs from the CI environment is captured once at
startup into a ``RunContext``; phases never read the environment directly.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
import re
from typing import Mapping

from glassops.domain.errors import RunContextError

logger = logging.getLogger(__name__)

_REPOSITORY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")
_PULL_REQUEST_EVENTS = frozenset({"pull_request", "pull_request_target"})
_FORK_DELIMITERS = ("/", ":")


@dataclass(frozen=True)
class RunContext:
    workspace: Path
    actor: str
    repository: str
    commit: str = "unknown"
    trigger: str = "manual"
    head_ref: str | None = None

    @property
    def is_pull_request(self) -> bool:
        return self.trigger in _PULL_REQUEST_EVENTS

    @property
    def possible_fork(self) -> bool:
        return bool(self.head_ref) and any(d in str(self.head_ref) for d in _FORK_DELIMITERS)

    @classmethod
    def from_environment(cls, env: Mapping[str, str], *, workspace: Path | None = None) -> "RunContext":
        def _get(key: str) -> str:
            return str(env.get(key, "")).strip()

        context = cls(
            workspace=Path(workspace if workspace is not None else (_get("GITHUB_WORKSPACE") or ".")),
            actor=_get("GITHUB_ACTOR") or "unknown",
            repository=_get("GITHUB_REPOSITORY"),
            commit=_get("GITHUB_SHA") or "unknown",
            trigger=_get("GITHUB_EVENT_NAME") or "manual",
            head_ref=_get("GITHUB_HEAD_REF") or None,
        )
        return validate_run_context(context)


def validate_run_context(context: RunContext) -> RunContext:
    if not _REPOSITORY_PATTERN.match(context.repository):
        raise RunContextError(
            f"Invalid repository identifier {context.repository!r}: expected 'owner/name'"
        )
    if not os.path.isdir(context.workspace):
        raise RunContextError(f"Workspace directory does not exist: {context.workspace}")
    if context.is_pull_request:
        if not context.head_ref:
            raise RunContextError(f"GITHUB_HEAD_REF is required for {context.trigger} events")
        if context.possible_fork:
            logger.warning(
                "Head ref %r looks like it comes from a fork; review secrets exposure for this run.",
                context.head_ref,
            )
    return context
