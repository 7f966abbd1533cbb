#!/usr/bin/env python3
"""
GPDB Elastic Instance Lifecycle Acceptance Run
Creates an alicloud_gpdb_elastic_instance, verifies import, updates its
description and IP whitelist, then destroys it and confirms it is gone.
"""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
from typing import Optional

from aliyunsdkcore.acs_exception.exceptions import ClientException, ServerException

from gpdb_toolkit.acceptance.config_steps import ConfigStep
from gpdb_toolkit.acceptance.expectations import ANY_NON_EMPTY, ExpectedAttributeSet
from gpdb_toolkit.acceptance.lifecycle import LifecycleDriver, LifecycleResult, LifecycleRun
from gpdb_toolkit.acceptance.terraform_engine import TerraformEngine
from gpdb_toolkit.common.acs_client_factory import create_client
from gpdb_toolkit.common.cli_utils import configure_logging
from gpdb_toolkit.common.credential_utils import setup_credentials
from gpdb_toolkit.common.exceptions import LifecycleFailure, PreCheckError
from gpdb_toolkit.common.settings import DEFAULT_REGION, TERRAFORM_BINARY
from gpdb_toolkit.common.sweep_constants import ACCEPTANCE_NAME_PREFIX
from gpdb_toolkit.scripts.gpdb_operations import GpdbService
from gpdb_toolkit.scripts.vpc_operations import VpcService

RESOURCE_ADDRESS = "alicloud_gpdb_elastic_instance.default"
DEFAULT_NAME = f"{ACCEPTANCE_NAME_PREFIX}_vpc"


def config_dependence(name: str) -> str:
    """Blocks the elastic instance depends on: provider, zone, VPC and vswitch lookups."""
    return f"""
terraform {{
  required_providers {{
    alicloud = {{
      source = "aliyun/alicloud"
    }}
  }}
}}

data "alicloud_gpdb_zones" "default" {{}}

variable "name" {{
  default = "{name}"
}}

data "alicloud_vpcs" "default" {{
  is_default = true
}}

data "alicloud_vswitches" "default" {{
  vpc_id  = data.alicloud_vpcs.default.ids.0
  zone_id = data.alicloud_gpdb_zones.default.ids.0
}}

resource "alicloud_vswitch" "vswitch" {{
  count        = length(data.alicloud_vswitches.default.ids) > 0 ? 0 : 1
  vpc_id       = data.alicloud_vpcs.default.ids.0
  cidr_block   = cidrsubnet(data.alicloud_vpcs.default.vpcs[0].cidr_block, 8, 8)
  zone_id      = data.alicloud_gpdb_zones.default.ids.0
  vswitch_name = var.name
}}

locals {{
  vswitch_id = length(data.alicloud_vswitches.default.ids) > 0 ? data.alicloud_vswitches.default.ids[0] : concat(alicloud_vswitch.vswitch.*.id, [""])[0]
}}
"""


def build_steps(name: str = DEFAULT_NAME) -> list[ConfigStep]:
    """Create, import, and three updates of the elastic instance."""
    create_description = f"{ACCEPTANCE_NAME_PREFIX}_6.0"
    updated_description = f"{ACCEPTANCE_NAME_PREFIX}_test"
    final_description = f"{ACCEPTANCE_NAME_PREFIX}_elastic_6.0"
    create = {
        "engine": "gpdb",
        "engine_version": "6.0",
        "seg_storage_type": "cloud_essd",
        "seg_node_num": "4",
        "storage_size": "50",
        "instance_spec": "2C16G",
        "db_instance_description": create_description,
    }
    return [
        ConfigStep(
            name=f"create {name}",
            overrides={**create, "vswitch_id": "${local.vswitch_id}"},
            expected=ExpectedAttributeSet(
                {
                    **create,
                    "instance_network_type": "VPC",
                    "payment_type": "PayAsYouGo",
                    "vswitch_id": ANY_NON_EMPTY,
                }
            ),
        ),
        ConfigStep.import_state(),
        ConfigStep(
            name="change db_instance_description",
            overrides={"db_instance_description": updated_description},
            expected=ExpectedAttributeSet({"db_instance_description": updated_description}),
        ),
        ConfigStep(
            name="change security_ip_list",
            overrides={"security_ip_list": ["10.168.1.12"]},
            expected=ExpectedAttributeSet({"security_ip_list": ["10.168.1.12"]}),
        ),
        ConfigStep(
            name="change description and security_ip_list",
            overrides={
                "db_instance_description": final_description,
                "security_ip_list": ["10.168.1.13"],
            },
            expected=ExpectedAttributeSet(
                {
                    "db_instance_description": final_description,
                    "security_ip_list": ["10.168.1.13"],
                }
            ),
        ),
    ]


def pre_check(region: str, terraform_binary: str = TERRAFORM_BINARY, client=None) -> None:
    """
    Verify credentials, the terraform binary, and a default VPC in the region.

    Raises:
        PreCheckError: If any requirement is missing
    """
    try:
        setup_credentials()
    except ValueError as exc:
        raise PreCheckError(str(exc)) from exc
    if shutil.which(terraform_binary) is None:
        raise PreCheckError(f"Terraform binary {terraform_binary!r} not found on PATH")
    client = client or create_client(region)
    try:
        vpc_ids = VpcService(client).default_vpc_ids(region)
    except (ServerException, ClientException) as exc:
        raise PreCheckError(f"Could not look up default VPC in {region}: {exc}") from exc
    if not vpc_ids:
        raise PreCheckError(f"Region {region} has no default VPC")


def run_lifecycle(
    region: str,
    name: str = DEFAULT_NAME,
    engine=None,
    service: Optional[GpdbService] = None,
) -> LifecycleResult:
    """Run the elastic instance lifecycle in a region."""
    service = service or GpdbService(create_client(region), region)
    engine = engine or TerraformEngine(env={"ALICLOUD_REGION": region})
    run = LifecycleRun(
        resource_address=RESOURCE_ADDRESS,
        steps=build_steps(name),
        describe=service.elastic_instance_attributes,
        dependencies=config_dependence(name),
    )
    return LifecycleDriver(engine).run(run)


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run the GPDB elastic instance acceptance lifecycle.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--region", default=DEFAULT_REGION, help="Region to run in")
    parser.add_argument("--name", default=DEFAULT_NAME, help="Name used for created dependencies")
    parser.add_argument("--working-dir", help="Terraform working directory (default: a temp dir)")
    parser.add_argument("--terraform-binary", default=TERRAFORM_BINARY, help="Terraform executable")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point; returns a process exit code."""
    args = _parse_args(argv if argv is not None else sys.argv[1:])
    configure_logging(args.verbose)

    print("GPDB Elastic Instance Lifecycle")
    print("=" * 50)
    try:
        pre_check(args.region, args.terraform_binary)
    except PreCheckError as exc:
        print(f"❌ Pre-check failed: {exc}")
        return 1

    engine = TerraformEngine(
        working_dir=args.working_dir,
        binary=args.terraform_binary,
        env={"ALICLOUD_REGION": args.region},
    )
    try:
        result = run_lifecycle(args.region, args.name, engine=engine)
    except LifecycleFailure as exc:
        logging.error("Lifecycle run failed")
        print(f"❌ {exc}")
        return 1

    print(f"✅ {result.steps_run} step(s) passed for {result.resource_id}")
    print("✅ Resource destroyed and confirmed gone")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
