"""Tests for gpdb_toolkit/acceptance/config_steps.py"""

from __future__ import annotations

import pytest

from gpdb_toolkit.acceptance.config_steps import (
    ConfigStep,
    cumulative_configs,
    render_configuration,
    render_resource_block,
)
from tests.assertions import assert_equal


def test_cumulative_configs_preserve_earlier_keys():
    """Each step keeps keys from previous steps unless it overrides them."""
    steps = [
        ConfigStep(overrides={"engine": "gpdb", "db_instance_description": "X"}),
        ConfigStep.import_state(),
        ConfigStep(overrides={"db_instance_description": "Y"}),
        ConfigStep(overrides={"security_ip_list": ["10.168.1.12"]}),
    ]

    configs = list(cumulative_configs(steps))

    assert_equal(configs[1], {"engine": "gpdb", "db_instance_description": "X"})
    assert_equal(configs[2], {"engine": "gpdb", "db_instance_description": "Y"})
    assert_equal(
        configs[3],
        {"engine": "gpdb", "db_instance_description": "Y", "security_ip_list": ["10.168.1.12"]},
    )


def test_import_step_has_no_overrides():
    """Import steps only flag the verification."""
    step = ConfigStep.import_state()
    assert step.import_verify
    assert_equal(dict(step.overrides), {})
    assert_equal(len(step.expected), 0)


def test_render_resource_block_values():
    """Strings are quoted, references stay bare, lists and numbers render as HCL."""
    block = render_resource_block(
        "alicloud_gpdb_elastic_instance.default",
        {
            "engine": "gpdb",
            "seg_node_num": 4,
            "vswitch_id": "${local.vswitch_id}",
            "security_ip_list": ["10.168.1.12"],
            "db_instance_description": 'say "hi"',
            "enabled": False,
        },
    )
    assert block.startswith('resource "alicloud_gpdb_elastic_instance" "default" {\n')
    assert '  engine = "gpdb"\n' in block
    assert "  seg_node_num = 4\n" in block
    assert "  vswitch_id = local.vswitch_id\n" in block
    assert '  security_ip_list = ["10.168.1.12"]\n' in block
    assert '  db_instance_description = "say \\"hi\\""\n' in block
    assert "  enabled = false\n" in block
    assert block.endswith("}\n")


def test_render_resource_block_rejects_bad_address():
    """Addresses need a type and a name."""
    with pytest.raises(ValueError):
        render_resource_block("no_name", {})


def test_render_configuration_prepends_dependencies():
    """Dependency blocks come before the resource."""
    text = render_configuration("a_b.c", {"x": "1"}, 'variable "name" {}\n')
    assert text.index('variable "name"') < text.index('resource "a_b" "c"')
