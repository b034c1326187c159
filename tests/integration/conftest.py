"""Fixtures for end-to-end CLI tests."""

import logging

import pytest


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Undo the handler changes setup_logging makes to the root logger."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
