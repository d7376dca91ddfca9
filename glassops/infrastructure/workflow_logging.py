"""Logging setup for CI consoles.

On GitHub-hosted runners warnings and errors are rendered as workflow
commands (``::warning::``, ``::error::``) so they surface as annotations,
and phase boundaries become collapsible ``::group::`` sections.
"""

from __future__ import annotations

from contextlib import contextmanager
import logging
import sys
from typing import IO, Iterator, Mapping

ROOT_LOGGER_NAME = "glassops"
_HANDLER_MARKER = "_glassops_handler"
_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _escape_data(message: str) -> str:
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class WorkflowCommandFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        if record.levelno >= logging.ERROR:
            return f"::error::{_escape_data(message)}"
        if record.levelno >= logging.WARNING:
            return f"::warning::{_escape_data(message)}"
        if record.levelno <= logging.DEBUG:
            return f"::debug::{_escape_data(message)}"
        return message


def running_in_actions(env: Mapping[str, str]) -> bool:
    return str(env.get("GITHUB_ACTIONS", "")).strip().lower() == "true"


def configure_logging(
    level: int | str = logging.INFO,
    *,
    workflow_commands: bool = False,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Install a single stream handler on the package logger (idempotent)."""

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for existing in list(logger.handlers):
        if getattr(existing, _HANDLER_MARKER, False):
            logger.removeHandler(existing)

    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.setFormatter(WorkflowCommandFormatter() if workflow_commands else logging.Formatter(_PLAIN_FORMAT))
    setattr(handler, _HANDLER_MARKER, True)
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger


def workflow_commands_enabled() -> bool:
    """True when the installed package handler renders workflow commands."""

    for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
        if getattr(handler, _HANDLER_MARKER, False) and isinstance(handler.formatter, WorkflowCommandFormatter):
            return True
    return False


@contextmanager
def log_group(title: str, logger: logging.Logger | None = None) -> Iterator[None]:
    log = logger if logger is not None else logging.getLogger(ROOT_LOGGER_NAME)
    grouped = workflow_commands_enabled()
    if grouped:
        log.info("::group::%s", title)
    else:
        log.info("== %s", title)
    try:
        yield
    finally:
        if grouped:
            log.info("::endgroup::")
