"""Shared pytest fixtures for test files."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from gpdb_toolkit.common import waiter_utils


@pytest.fixture
def mock_client():
    """AcsClient stand-in; API calls are patched at call_api."""
    client = MagicMock()
    client.get_region_id.return_value = "cn-hangzhou"
    return client


@pytest.fixture(autouse=True)
def no_settle_wait(monkeypatch):
    """Replace the settle wait so sweeps never block."""
    wait = MagicMock()
    monkeypatch.setattr(waiter_utils._WAIT_EVENT, "wait", wait)  # pylint: disable=protected-access
    return wait
