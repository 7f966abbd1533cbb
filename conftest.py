"""Pytest configuration and shared fixtures for the GPDB toolkit."""

# pylint: disable=wrong-import-position

import sys
from pathlib import Path
from unittest import mock

PROJECT_ROOT = Path(__file__).resolve().parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

_CREDENTIAL_VARS = ("ALICLOUD_ACCESS_KEY", "ALICLOUD_SECRET_KEY", "ALICLOUD_SECURITY_TOKEN")


@pytest.fixture(autouse=True)
def mock_alicloud_env_file(tmp_path, monkeypatch):
    """Auto-use fixture that provides a mock .env file with fake credentials.

    Credential variables are cleared first and restored afterwards, so values
    loaded by python-dotenv never leak between tests.
    """
    for name in _CREDENTIAL_VARS:
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)
    env_file = tmp_path / ".env"
    env_file.write_text("ALICLOUD_ACCESS_KEY=test_key\nALICLOUD_SECRET_KEY=test_secret\n")
    monkeypatch.setenv("ALICLOUD_ENV_FILE", str(env_file))
    yield str(env_file)


@pytest.fixture(name="mock_print")
def fixture_mock_print(monkeypatch):
    """Patch builtins.print and return the mock for assertions."""
    patched = mock.Mock()
    monkeypatch.setattr("builtins.print", patched)
    return patched
