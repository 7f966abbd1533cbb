#!/usr/bin/env python3
"""
VPC Operations Module
Decides whether an instance's network placement belongs to a test run.
"""

from __future__ import annotations

import enum
import logging

from aliyunsdkcore.acs_exception.exceptions import ClientException, ServerException

from gpdb_toolkit.common.acs_client_factory import VPC_PRODUCT, call_api, is_not_found_error
from gpdb_toolkit.common.sweep_constants import SWEEP_PREFIXES, has_sweep_prefix


class NetworkVerdict(enum.Enum):
    """Outcome of a network placement check."""

    SWEEP = "sweep"
    KEEP = "keep"
    UNKNOWN = "unknown"


class VpcService:
    """VPC lookups used as the fallback eligibility check of sweepers."""

    def __init__(self, client, prefixes=SWEEP_PREFIXES):
        self.client = client
        self.prefixes = tuple(prefixes)

    def describe_vpc(self, vpc_id: str) -> dict:
        """Return DescribeVpcAttribute for a VPC; empty dict when it does not exist."""
        try:
            response = call_api(self.client, VPC_PRODUCT, "DescribeVpcAttribute", {"VpcId": vpc_id})
        except (ServerException, ClientException) as exc:
            if is_not_found_error(exc):
                return {}
            raise
        return response if response.get("VpcId") else {}

    def describe_vswitch(self, vswitch_id: str) -> dict:
        """Return DescribeVSwitchAttributes for a vswitch; empty dict when it does not exist."""
        try:
            response = call_api(
                self.client, VPC_PRODUCT, "DescribeVSwitchAttributes", {"VSwitchId": vswitch_id}
            )
        except (ServerException, ClientException) as exc:
            if is_not_found_error(exc):
                return {}
            raise
        return response if response.get("VSwitchId") else {}

    def need_sweep_vpc(self, vpc_id: str, vswitch_id: str) -> NetworkVerdict:
        """
        Check whether a VPC / vswitch pair was created by a test run.

        Returns:
            NetworkVerdict: SWEEP when the vswitch or VPC name carries a sweep
            prefix, KEEP when it does not (or the network is gone), UNKNOWN
            when the lookup itself failed.
        """
        try:
            if not vpc_id and vswitch_id:
                vswitch = self.describe_vswitch(vswitch_id)
                if has_sweep_prefix(vswitch.get("VSwitchName"), self.prefixes):
                    logging.debug(
                        "Need to sweep the vswitch %s (%s)", vswitch_id, vswitch.get("VSwitchName")
                    )
                    return NetworkVerdict.SWEEP
                vpc_id = vswitch.get("VpcId", "")

            if not vpc_id:
                return NetworkVerdict.KEEP

            vpc = self.describe_vpc(vpc_id)
        except (ServerException, ClientException, ValueError, KeyError) as exc:
            logging.warning("Could not check network %s/%s: %s", vpc_id, vswitch_id, exc)
            return NetworkVerdict.UNKNOWN

        if has_sweep_prefix(vpc.get("VpcName"), self.prefixes):
            logging.debug("Need to sweep the VPC %s (%s)", vpc_id, vpc.get("VpcName"))
            return NetworkVerdict.SWEEP
        return NetworkVerdict.KEEP

    def default_vpc_ids(self, region: str) -> list[str]:
        """Return the ids of the region's default VPCs."""
        response = call_api(
            self.client,
            VPC_PRODUCT,
            "DescribeVpcs",
            {"RegionId": region, "IsDefault": "true", "PageSize": 50},
        )
        vpcs = (response.get("Vpcs") or {}).get("Vpc") or []
        return [vpc["VpcId"] for vpc in vpcs if vpc.get("VpcId")]
