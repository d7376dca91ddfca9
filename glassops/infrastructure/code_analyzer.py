"""Runner for ``sf code-analyzer``.

The analyzer exits non-zero when it finds violations, so the exit code is
reported rather than treated as a failure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
from typing import Any, Sequence

from glassops.engine.adapters import HostAdapter

logger = logging.getLogger(__name__)

ANALYZER_TIMEOUT_SECONDS = 1800


@dataclass(frozen=True)
class Violation:
    rule: str
    description: str
    severity: int
    file: str
    line: int


@dataclass(frozen=True)
class AnalyzerResult:
    violations: tuple[Violation, ...] = field(default_factory=tuple)
    exit_code: int = 0


def build_scan_argv(paths: Sequence[str], ruleset: str | None = None) -> tuple[str, ...]:
    argv = ["sf", "code-analyzer", "run", "--normalize-severity", "--output-format", "json"]
    argv += ["--target", ",".join(paths)]
    if ruleset:
        argv += ["--ruleset", ruleset]
    return tuple(argv)


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return 0


def _to_violation(file_name: Any, raw: Any) -> Violation | None:
    if not isinstance(raw, dict):
        return None
    return Violation(
        rule=str(raw.get("ruleName", "")),
        description=str(raw.get("message", "")),
        severity=_as_int(raw.get("severity")),
        file=str(file_name or ""),
        line=_as_int(raw.get("line")),
    )


def parse_analyzer_output(stdout: str, exit_code: int) -> AnalyzerResult:
    start = stdout.find("[")
    end = stdout.rfind("]")
    if start == -1 or end == -1 or end < start:
        return AnalyzerResult(violations=(), exit_code=exit_code)

    try:
        raw_results = json.loads(stdout[start : end + 1])
        violations: list[Violation] = []
        for file_result in raw_results if isinstance(raw_results, list) else []:
            if not isinstance(file_result, dict):
                continue
            for raw in file_result.get("violations") or []:
                violation = _to_violation(file_result.get("fileName"), raw)
                if violation is not None:
                    violations.append(violation)
    except (json.JSONDecodeError, TypeError, ValueError) as exc:
        logger.warning("Failed to parse analyzer output: %s", exc)
        return AnalyzerResult(violations=(), exit_code=exit_code)

    return AnalyzerResult(violations=tuple(violations), exit_code=exit_code)


class CodeAnalyzer:
    def __init__(self, adapter: HostAdapter) -> None:
        self._adapter = adapter

    def scan(self, paths: Sequence[str], ruleset: str | None = None) -> AnalyzerResult:
        try:
            result = self._adapter.exec_argv(build_scan_argv(paths, ruleset), timeout_seconds=ANALYZER_TIMEOUT_SECONDS)
        except OSError as exc:
            logger.error("Analyzer execution failed: %s", exc)
            raise
        return parse_analyzer_output(result.stdout, result.exit_code)
