"""Pytest configuration for governance runtime tests."""

from __future__ import annotations

import logging

import pytest


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Drop handlers installed by CLI tests so output does not leak between tests."""

    logger = logging.getLogger("glassops")
    before = list(logger.handlers)
    yield
    for handler in list(logger.handlers):
        if handler not in before:
            logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
