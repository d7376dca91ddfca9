"""JWT bearer login against the Salesforce identity endpoint."""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
import os
from pathlib import Path
import tempfile

from glassops.domain.errors import AuthenticationError
from glassops.engine.adapters import HostAdapter
from glassops.infrastructure.workflow_logging import log_group

logger = logging.getLogger(__name__)

DEFAULT_INSTANCE_URL = "https://login.salesforce.com"
LOGIN_TIMEOUT_SECONDS = 120
_FAILURE_MESSAGE = "Authentication Failed. Check Client ID and JWT Key."


@dataclass(frozen=True)
class AuthRequest:
    client_id: str
    jwt_key: str
    username: str
    instance_url: str | None = None

    def __repr__(self) -> str:
        return f"AuthRequest(client_id={self.client_id!r}, username={self.username!r}, instance_url={self.instance_url!r})"


def build_login_argv(request: AuthRequest, key_path: Path) -> tuple[str, ...]:
    argv = [
        "sf",
        "org",
        "login",
        "jwt",
        "--client-id",
        request.client_id,
        "--jwt-key-file",
        str(key_path),
        "--username",
        request.username,
        "--set-default",
        "--json",
    ]
    if request.instance_url:
        argv += ["--instance-url", request.instance_url]
    return tuple(argv)


def parse_org_id(stdout: str) -> str:
    payload = json.loads(stdout)
    org_id = payload["result"]["orgId"]
    if not isinstance(org_id, str) or not org_id.strip():
        raise ValueError("orgId missing from login result")
    return org_id


def _write_private_key(jwt_key: str) -> Path:
    # mkstemp creates the file readable and writable by the owner only.
    fd, name = tempfile.mkstemp(prefix="glassops-jwt-", suffix=".key")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(jwt_key)
    except BaseException:
        Path(name).unlink(missing_ok=True)
        raise
    return Path(name)


class IdentityResolver:
    def __init__(self, adapter: HostAdapter) -> None:
        self._adapter = adapter

    def authenticate(self, request: AuthRequest) -> str:
        with log_group("Authenticating Identity", logger):
            key_path = _write_private_key(request.jwt_key)
            try:
                result = self._adapter.exec_argv(
                    build_login_argv(request, key_path), timeout_seconds=LOGIN_TIMEOUT_SECONDS
                )
                if not result.ok:
                    raise AuthenticationError(f"sf org login jwt failed: {result.detail()}")
                org_id = parse_org_id(result.stdout)
            except (OSError, ValueError, KeyError, TypeError, AuthenticationError) as exc:
                logger.debug("Login failed: %s", exc)
                raise AuthenticationError(_FAILURE_MESSAGE) from exc
            finally:
                key_path.unlink(missing_ok=True)

            logger.info("Authenticated as %s (%s)", request.username, org_id)
            return org_id
