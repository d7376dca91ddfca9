"""Run input and output plumbing for GitHub Actions runners.

Inputs arrive as ``INPUT_<NAME>`` environment variables; outputs are
appended to the file named by ``GITHUB_OUTPUT``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Mapping
import uuid

logger = logging.getLogger(__name__)

RECOGNIZED_INPUTS: tuple[str, ...] = (
    "client_id",
    "jwt_key",
    "username",
    "instance_url",
    "enforce_policy",
    "skip_auth",
    "plugins",
    "test_results",
    "coverage_percentage",
    "coverage_required",
)


def input_env_name(name: str) -> str:
    return "INPUT_" + name.replace(" ", "_").upper()


def read_action_inputs(env: Mapping[str, str], names: Iterable[str] = RECOGNIZED_INPUTS) -> dict[str, str]:
    inputs: dict[str, str] = {}
    for name in names:
        value = env.get(input_env_name(name))
        if value is not None:
            inputs[name] = value.strip()
    return inputs


def parse_input_overrides(pairs: Iterable[str]) -> dict[str, str]:
    """Parse ``NAME=VALUE`` command-line pairs."""

    overrides: dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"expected NAME=VALUE, got {pair!r}")
        overrides[name.strip()] = value
    return overrides


def format_output(name: str, value: str) -> str:
    if "\n" not in value:
        return f"{name}={value}\n"
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    return f"{name}<<{delimiter}\n{value}\n{delimiter}\n"


def write_action_outputs(outputs: Mapping[str, str], env: Mapping[str, str]) -> Path | None:
    """Append outputs to ``$GITHUB_OUTPUT`` when set; always log them."""

    for name, value in outputs.items():
        logger.info("output %s=%s", name, value)

    target = str(env.get("GITHUB_OUTPUT", "")).strip()
    if not target:
        return None
    path = Path(target)
    with path.open("a", encoding="utf-8") as handle:
        for name, value in outputs.items():
            handle.write(format_output(name, value))
    return path
