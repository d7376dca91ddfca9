"""Host adapter contracts for the governance runtime.

Adapters normalize host access (process execution, PATH lookup, clock,
environment) into one deterministic interface. The engine and the
collaborators it drives never call ``subprocess`` or ``datetime.now``
directly, which keeps every phase testable with an in-memory stub.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import os
from pathlib import Path
import shutil
import subprocess
from typing import Mapping, Protocol, Sequence


@dataclass(frozen=True)
class ExecResult:
    """Outcome of one external command invocation."""

    argv: tuple[str, ...]
    cwd: str
    exit_code: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    def detail(self) -> str:
        """Best available one-line failure description."""

        for text in (self.stderr, self.stdout):
            stripped = text.strip()
            if stripped:
                return stripped.splitlines()[-1]
        return f"exit code {self.exit_code}"


class HostAdapter(Protocol):
    """Minimal host interface consumed by the runtime."""

    def environment(self) -> Mapping[str, str]:
        ...

    def cwd(self) -> Path:
        ...

    def now_utc(self) -> datetime:
        ...

    def which(self, command: str) -> str | None:
        ...

    def exec_argv(
        self,
        argv: Sequence[str],
        *,
        cwd: Path | None = None,
        timeout_seconds: int = 600,
        input_text: str | None = None,
    ) -> ExecResult:
        """Run ``argv`` to completion.

        Raises ``OSError`` when the command cannot be started at all; a
        command that starts and fails is reported through ``exit_code``.
        """

        ...


@dataclass(frozen=True)
class LocalHostAdapter:
    """Default adapter executing real processes on the current machine."""

    def environment(self) -> Mapping[str, str]:
        return os.environ

    def cwd(self) -> Path:
        return Path.cwd().resolve()

    def now_utc(self) -> datetime:
        return datetime.now(timezone.utc)

    def which(self, command: str) -> str | None:
        return shutil.which(command)

    def exec_argv(
        self,
        argv: Sequence[str],
        *,
        cwd: Path | None = None,
        timeout_seconds: int = 600,
        input_text: str | None = None,
    ) -> ExecResult:
        args = tuple(str(x) for x in argv)
        run_cwd = cwd if cwd is not None else self.cwd()
        # npm and sf are .cmd shims on Windows and need PATH resolution.
        resolved = shutil.which(args[0]) if args else None
        command = (resolved, *args[1:]) if resolved else args
        try:
            completed = subprocess.run(
                command,
                cwd=str(run_cwd),
                input=input_text,
                text=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=timeout_seconds,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            return ExecResult(
                argv=args,
                cwd=str(run_cwd),
                exit_code=124,
                stdout=exc.stdout if isinstance(exc.stdout, str) else "",
                stderr=f"timed out after {timeout_seconds}s",
            )
        return ExecResult(
            argv=args,
            cwd=str(run_cwd),
            exit_code=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
