"""Command-line boundary for the governance runtime.

Usage:
    python -m glassops run [--workspace DIR] [--input NAME=VALUE ...]
    python -m glassops analyze PATH [PATH ...] [--ruleset NAME]

Inside GitHub Actions, run inputs are read from ``INPUT_<NAME>`` variables
and outputs are appended to ``$GITHUB_OUTPUT``.
"""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import Mapping, Sequence

from glassops.application.run_context import RunContext
from glassops.application.run_inputs import RunInputs
from glassops.application.watchdog import DEFAULT_TIMEOUT_SECONDS, Watchdog
from glassops.domain.errors import GlassOpsError
from glassops.engine.adapters import HostAdapter, LocalHostAdapter
from glassops.engine.orchestrator import PhaseOrchestrator, RunResult
from glassops.engine.policy_engine import PolicyEngine
from glassops.infrastructure.action_io import parse_input_overrides, read_action_inputs, write_action_outputs
from glassops.infrastructure.code_analyzer import CodeAnalyzer
from glassops.infrastructure.config_store import ConfigStore
from glassops.infrastructure.error_catalog import resolve_remediation
from glassops.infrastructure.identity_resolver import IdentityResolver
from glassops.infrastructure.runtime_installer import RuntimeInstaller
from glassops.infrastructure.workflow_logging import configure_logging, running_in_actions

logger = logging.getLogger("glassops.cli")


def build_orchestrator(context: RunContext, adapter: HostAdapter) -> PhaseOrchestrator:
    policy = PolicyEngine(ConfigStore(context.workspace), clock=adapter.now_utc)
    return PhaseOrchestrator(
        context=context,
        policy=policy,
        installer=RuntimeInstaller(adapter),
        identity=IdentityResolver(adapter),
        clock=adapter.now_utc,
    )


def report_failure(result: RunResult) -> None:
    if result.failure is None:
        return
    remediation = resolve_remediation(result.failure.code)
    logger.error("%s", result.failure.message)
    logger.info("[%s] %s %s", result.failure.code, remediation.summary, remediation.how_to_fix)


def run_command(args: argparse.Namespace, *, env: Mapping[str, str], adapter: HostAdapter) -> int:
    try:
        raw_inputs = read_action_inputs(env)
        raw_inputs.update(parse_input_overrides(args.input or ()))
        workspace = Path(args.workspace) if args.workspace else None
        context = RunContext.from_environment(env, workspace=workspace)
    except (GlassOpsError, ValueError) as exc:
        logger.error("%s", exc)
        return 1

    with Watchdog(args.timeout_minutes * 60):
        result = build_orchestrator(context, adapter).run(RunInputs.from_mapping(raw_inputs))

    write_action_outputs(result.outputs(), env)
    if not result.ready:
        report_failure(result)
        return 1
    return 0


def analyze_command(args: argparse.Namespace, *, adapter: HostAdapter) -> int:
    result = CodeAnalyzer(adapter).scan(args.paths, args.ruleset)
    for violation in result.violations:
        logger.warning(
            "%s:%s [%s] %s (severity %s)",
            violation.file,
            violation.line,
            violation.rule,
            violation.description,
            violation.severity,
        )
    logger.info("Analyzer reported %d violation(s).", len(result.violations))
    return 1 if result.violations else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="glassops", description="Governed deployment runtime")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    parser.add_argument(
        "--no-workflow-commands",
        action="store_true",
        help="Do not emit ::warning::/::error:: annotations even inside GitHub Actions",
    )
    parser.set_defaults(workspace=None, input=None, timeout_minutes=DEFAULT_TIMEOUT_SECONDS / 60)
    sub = parser.add_subparsers(dest="command")

    run = sub.add_parser("run", help="Run the Policy, Bootstrap, Identity and Contract phases")
    run.add_argument("--workspace", default=None, help="Workspace root (default: $GITHUB_WORKSPACE or .)")
    run.add_argument("--input", action="append", metavar="NAME=VALUE", help="Override a run input (repeatable)")
    run.add_argument(
        "--timeout-minutes",
        type=float,
        default=DEFAULT_TIMEOUT_SECONDS / 60,
        help="Wall-clock safety timeout for the whole run (default: 30)",
    )

    analyze = sub.add_parser("analyze", help="Run sf code-analyzer and report violations")
    analyze.add_argument("paths", nargs="+", help="Directories or files to scan")
    analyze.add_argument("--ruleset", default=None, help="Ruleset to enforce")
    return parser


def main(
    argv: Sequence[str] | None = None,
    *,
    env: Mapping[str, str] | None = None,
    adapter: HostAdapter | None = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    environment = env if env is not None else os.environ
    host = adapter if adapter is not None else LocalHostAdapter()
    configure_logging(
        args.log_level.upper(),
        workflow_commands=running_in_actions(environment) and not args.no_workflow_commands,
    )

    try:
        if args.command == "analyze":
            return analyze_command(args, adapter=host)
        if args.command in (None, "run"):
            return run_command(args, env=environment, adapter=host)
    except Exception:
        logger.exception("Unexpected failure")
        return 1
    parser.error(f"unknown command {args.command!r}")


if __name__ == "__main__":
    raise SystemExit(main())
