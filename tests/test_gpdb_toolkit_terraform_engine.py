"""Tests for gpdb_toolkit/acceptance/terraform_engine.py"""

from __future__ import annotations

import json
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from gpdb_toolkit.acceptance.terraform_engine import TerraformEngine, find_resource_values
from gpdb_toolkit.common.exceptions import ApplyError, ResourceNotFoundError
from tests.assertions import assert_equal

RUN = "gpdb_toolkit.acceptance.terraform_engine.subprocess.run"
ADDRESS = "alicloud_gpdb_elastic_instance.default"


def _completed(stdout="", returncode=0, stderr=""):
    return MagicMock(returncode=returncode, stdout=stdout, stderr=stderr)


def _show_document(values):
    return json.dumps(
        {"values": {"root_module": {"resources": [{"address": ADDRESS, "values": values}]}}}
    )


def _commands(mock_run):
    return [call.args[0][1] for call in mock_run.call_args_list]


@pytest.fixture(name="work_dir")
def fixture_work_dir(tmp_path):
    """Empty Terraform working directory."""
    path = tmp_path / "work"
    path.mkdir()
    return path


def test_find_resource_values():
    """Resources are located by address in show -json output."""
    document = json.loads(_show_document({"id": "gp-1"}))
    assert_equal(find_resource_values(document, ADDRESS), {"id": "gp-1"})
    assert find_resource_values(document, "other.address") is None
    assert find_resource_values({}, ADDRESS) is None


@patch(RUN)
def test_apply_writes_config_and_inits_once(mock_run, work_dir):
    """The first apply runs init; later applies only apply."""
    mock_run.return_value = _completed()
    engine = TerraformEngine(working_dir=str(work_dir), binary="tf")

    engine.apply('resource "a" "b" {}\n')
    engine.apply('resource "a" "b" { x = 1 }\n')

    assert_equal(_commands(mock_run), ["init", "apply", "apply"])
    assert_equal((work_dir / "main.tf").read_text(), 'resource "a" "b" { x = 1 }\n')
    assert_equal(mock_run.call_args.kwargs["cwd"], str(work_dir))
    assert_equal(mock_run.call_args.kwargs["env"]["TF_IN_AUTOMATION"], "1")


@patch(RUN)
def test_nonzero_exit_raises_apply_error(mock_run, work_dir):
    """A failing command raises ApplyError with stderr."""
    mock_run.return_value = _completed(returncode=1, stderr="Error: quota exceeded")
    engine = TerraformEngine(working_dir=str(work_dir))

    with pytest.raises(ApplyError, match="quota exceeded"):
        engine.apply("")


@patch(RUN)
def test_timeout_raises_apply_error(mock_run, work_dir):
    """Timeouts surface as ApplyError."""
    mock_run.side_effect = subprocess.TimeoutExpired(["terraform"], 5)
    engine = TerraformEngine(working_dir=str(work_dir), timeout=5)

    with pytest.raises(ApplyError, match="timed out"):
        engine.apply("")


@patch(RUN)
def test_state_attributes_flattens_values(mock_run, work_dir):
    """show -json values are flattened."""
    mock_run.return_value = _completed(_show_document({"id": "gp-1", "security_ip_list": ["10.168.1.12"]}))
    engine = TerraformEngine(working_dir=str(work_dir))

    attributes = engine.state_attributes(ADDRESS)

    assert_equal(attributes, {"id": "gp-1", "security_ip_list.#": "1", "security_ip_list.0": "10.168.1.12"})


@patch(RUN)
def test_state_attributes_missing_resource(mock_run, work_dir):
    """A resource absent from state is not found."""
    mock_run.return_value = _completed("{}")
    with pytest.raises(ResourceNotFoundError):
        TerraformEngine(working_dir=str(work_dir)).state_attributes(ADDRESS)


@patch(RUN)
def test_import_uses_scratch_directory(mock_run, work_dir):
    """Imports run in a removed scratch directory, never the main one."""
    outputs = {"init": _completed(), "import": _completed(), "show": _completed(_show_document({"id": "gp-1"}))}
    mock_run.side_effect = lambda command, **_: outputs[command[1]]
    engine = TerraformEngine(working_dir=str(work_dir))

    attributes = engine.import_attributes(ADDRESS, "gp-1", 'resource "a" "b" {}\n')

    assert_equal(attributes, {"id": "gp-1"})
    assert_equal(_commands(mock_run), ["init", "import", "show"])
    import_call = mock_run.call_args_list[1]
    assert_equal(import_call.args[0][-2:], [ADDRESS, "gp-1"])
    assert import_call.kwargs["cwd"] != str(work_dir)
    assert_equal([path.name for path in work_dir.iterdir()], [])


@patch(RUN)
def test_destroy_before_apply_is_a_no_op(mock_run, work_dir):
    """Nothing to destroy until something was applied."""
    TerraformEngine(working_dir=str(work_dir)).destroy()
    mock_run.assert_not_called()


@patch(RUN)
def test_destroy_after_apply(mock_run, work_dir):
    """destroy runs with auto-approve."""
    mock_run.return_value = _completed()
    engine = TerraformEngine(working_dir=str(work_dir))
    engine.apply("")
    engine.destroy()

    destroy_command = mock_run.call_args.args[0]
    assert_equal(destroy_command[1], "destroy")
    assert "-auto-approve" in destroy_command
