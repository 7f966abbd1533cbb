"""Tests for gpdb_toolkit/common/settings.py"""

from __future__ import annotations

from gpdb_toolkit.common import settings
from tests.assertions import assert_equal


def test_settle_delay_and_page_size_constants():
    """The sweep settles for 30 seconds and lists 50 per page."""
    assert_equal(settings.SETTLE_DELAY_SECONDS, 30)
    assert_equal(settings.PAGE_SIZE_LARGE, 50)


def test_sweep_regions_from_environment(monkeypatch):
    """GPDB_SWEEP_REGIONS is split on commas and trimmed."""
    monkeypatch.setenv("GPDB_SWEEP_REGIONS", "cn-hangzhou, cn-beijing,,")
    assert_equal(settings.get_sweep_regions(), ["cn-hangzhou", "cn-beijing"])


def test_sweep_regions_default_to_region(monkeypatch):
    """Without GPDB_SWEEP_REGIONS the configured region is swept."""
    monkeypatch.delenv("GPDB_SWEEP_REGIONS", raising=False)
    monkeypatch.setenv("ALICLOUD_REGION", "cn-shanghai")
    assert_equal(settings.get_sweep_regions(), ["cn-shanghai"])
