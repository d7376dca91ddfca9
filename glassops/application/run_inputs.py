"""Caller-supplied run inputs.

All values arrive as strings. Parsing is split per phase: identity inputs are
checked when the Identity phase starts, quality figures when the Contract
phase starts, so each failure is attributed to the phase that needs it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
import math
from typing import Mapping
from urllib.parse import urlparse

from glassops.domain.deployment_contract import TestCounts
from glassops.domain.errors import RunContextError
from glassops.infrastructure.identity_resolver import DEFAULT_INSTANCE_URL, AuthRequest

logger = logging.getLogger(__name__)

DEFAULT_COVERAGE_REQUIRED = 75.0
_TRUE_VALUES = frozenset({"true", "1", "yes", "on"})


def parse_bool(value: str | None) -> bool:
    return str(value or "").strip().lower() in _TRUE_VALUES


def parse_plugin_list(value: str | None) -> tuple[str, ...]:
    return tuple(item.strip() for item in str(value or "").split(",") if item.strip())


def parse_test_results(value: str | None) -> TestCounts:
    """Parse the ``{total, passed, failed}`` payload.

    A malformed payload degrades to zero counts with a warning instead of
    failing the run.
    """

    raw = str(value or "").strip()
    if not raw:
        return TestCounts()
    try:
        payload = json.loads(raw)
        if not isinstance(payload, dict):
            raise ValueError("test_results must be a JSON object")
        counts = {}
        for key in ("total", "passed", "failed"):
            item = payload.get(key, 0)
            if isinstance(item, bool) or not isinstance(item, (int, float)) or not math.isfinite(item):
                raise ValueError(f"test_results.{key} must be a finite number")
            counts[key] = item
    except ValueError as exc:
        logger.warning("Failed to parse test_results input (%s); reporting zero tests.", exc)
        return TestCounts()
    return TestCounts(**counts)


def parse_percentage(value: str | None, *, name: str, default: float) -> float:
    raw = str(value or "").strip()
    if not raw:
        return default
    try:
        number = float(raw)
    except ValueError as exc:
        raise RunContextError(f"{name} must be a number, got {raw!r}") from exc
    if not math.isfinite(number):
        raise RunContextError(f"{name} must be finite, got {raw!r}")
    return number


def is_valid_instance_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


@dataclass(frozen=True)
class RunInputs:
    client_id: str = ""
    jwt_key: str = field(default="", repr=False)
    username: str = ""
    instance_url: str = DEFAULT_INSTANCE_URL
    enforce_policy: bool = False
    skip_auth: bool = False
    plugins: tuple[str, ...] = ()
    test_results: str = ""
    coverage_percentage: str = ""
    coverage_required: str = ""

    @classmethod
    def from_mapping(cls, raw: Mapping[str, str]) -> "RunInputs":
        def _get(key: str) -> str:
            return str(raw.get(key, "") or "").strip()

        return cls(
            client_id=_get("client_id"),
            jwt_key=str(raw.get("jwt_key", "") or ""),
            username=_get("username"),
            instance_url=_get("instance_url") or DEFAULT_INSTANCE_URL,
            enforce_policy=parse_bool(_get("enforce_policy")),
            skip_auth=parse_bool(_get("skip_auth")),
            plugins=parse_plugin_list(_get("plugins")),
            test_results=_get("test_results"),
            coverage_percentage=_get("coverage_percentage"),
            coverage_required=_get("coverage_required"),
        )

    def auth_request(self) -> AuthRequest:
        """Validate identity inputs and build the login request."""

        missing = [name for name in ("client_id", "username") if not getattr(self, name)]
        if missing:
            raise RunContextError(f"Missing required input(s): {', '.join(missing)}")
        if "BEGIN" not in self.jwt_key or "END" not in self.jwt_key:
            raise RunContextError("jwt_key must be PEM text with BEGIN and END markers")
        if not is_valid_instance_url(self.instance_url):
            raise RunContextError(f"instance_url is not a valid URL: {self.instance_url!r}")
        return AuthRequest(
            client_id=self.client_id,
            jwt_key=self.jwt_key,
            username=self.username,
            instance_url=self.instance_url,
        )

    def coverage(self) -> tuple[float, float]:
        actual = parse_percentage(self.coverage_percentage, name="coverage_percentage", default=0.0)
        required = parse_percentage(
            self.coverage_required, name="coverage_required", default=DEFAULT_COVERAGE_REQUIRED
        )
        return actual, required

    def test_counts(self) -> TestCounts:
        return parse_test_results(self.test_results)
