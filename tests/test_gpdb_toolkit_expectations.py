"""Tests for gpdb_toolkit/acceptance/expectations.py"""

from __future__ import annotations

from gpdb_toolkit.acceptance.expectations import (
    ANY_NON_EMPTY,
    Exact,
    ExpectedAttributeSet,
    flatten_attributes,
)
from tests.assertions import assert_equal


def test_flatten_attributes_lists_maps_and_scalars():
    """Lists and maps use .# / .% counters; bools and None are normalised."""
    flat = flatten_attributes(
        {
            "name": "x",
            "count": 4,
            "enabled": True,
            "missing": None,
            "security_ip_list": ["10.0.0.1", "10.0.0.2"],
            "tags": {"env": "test"},
        }
    )
    assert_equal(
        flat,
        {
            "name": "x",
            "count": "4",
            "enabled": "true",
            "security_ip_list.#": "2",
            "security_ip_list.0": "10.0.0.1",
            "security_ip_list.1": "10.0.0.2",
            "tags.%": "1",
            "tags.env": "test",
        },
    )


def test_raw_values_become_exact_and_lists_expand():
    """Plain values are Exact; lists expand to count plus elements."""
    expected = ExpectedAttributeSet({"seg_node_num": "4", "security_ip_list": ["10.168.1.12"]})
    assert_equal(expected["seg_node_num"], Exact("4"))
    assert_equal(expected["security_ip_list.#"], Exact(1))
    assert_equal(expected["security_ip_list.0"], Exact("10.168.1.12"))


def test_check_reports_mismatches_with_context():
    """Each failing key is reported with expected and actual values."""
    expected = ExpectedAttributeSet({"engine": "gpdb", "seg_node_num": 4, "payment_type": "PayAsYouGo"})

    mismatches = expected.check({"engine": "gpdb", "seg_node_num": "8"})

    assert_equal([m.key for m in mismatches], ["seg_node_num", "payment_type"])
    assert_equal(mismatches[0].actual, "8")
    assert_equal(str(mismatches[1]), "payment_type: expected 'PayAsYouGo', got <missing>")


def test_any_non_empty_requires_presence_only():
    """ANY_NON_EMPTY accepts any value except missing or empty."""
    expected = ExpectedAttributeSet({"vswitch_id": ANY_NON_EMPTY})
    assert_equal(expected.check({"vswitch_id": "vsw-abc"}), [])
    assert_equal(len(expected.check({"vswitch_id": ""})), 1)
    assert_equal(len(expected.check({})), 1)


def test_merged_is_last_write_wins():
    """Later expectations replace earlier ones per key and keep the rest."""
    first = ExpectedAttributeSet({"engine": "gpdb", "db_instance_description": "X"})
    second = ExpectedAttributeSet({"db_instance_description": "Y"})

    merged = first.merged(second)

    assert_equal(dict(merged), {"engine": Exact("gpdb"), "db_instance_description": Exact("Y")})
    assert_equal(first["db_instance_description"], Exact("X"))


def test_merged_list_replaces_earlier_list():
    """A shorter list in a later step drops the earlier list's extra elements."""
    first = ExpectedAttributeSet({"security_ip_list": ["a", "b"], "engine": "gpdb"})
    second = ExpectedAttributeSet({"security_ip_list": ["c"]})

    merged = first.merged(second)

    assert_equal(
        dict(merged),
        {"security_ip_list.#": Exact(1), "security_ip_list.0": Exact("c"), "engine": Exact("gpdb")},
    )
    assert_equal(merged.check({"security_ip_list.#": "1", "security_ip_list.0": "c", "engine": "gpdb"}), [])
