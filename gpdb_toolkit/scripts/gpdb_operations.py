#!/usr/bin/env python3
"""
GPDB Operations Module
Common AnalyticDB for PostgreSQL API operations used by sweepers and acceptance runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from aliyunsdkcore.acs_exception.exceptions import ClientException, ServerException

from gpdb_toolkit.acceptance.expectations import flatten_attributes
from gpdb_toolkit.common.acs_client_factory import GPDB_PRODUCT, call_api, is_not_found_error
from gpdb_toolkit.common.exceptions import ResourceNotFoundError
from gpdb_toolkit.common.pagination import PaginationCursor, collect_pages
from gpdb_toolkit.common.settings import PAGE_SIZE_LARGE

PAY_TYPE_TO_PAYMENT_TYPE = {
    "Postpaid": "PayAsYouGo",
    "Prepaid": "Subscription",
}

DEFAULT_IP_ARRAY_NAME = "default"


@dataclass(frozen=True)
class RemoteResourceRecord:
    """One GPDB instance as returned by DescribeDBInstances."""

    instance_id: str
    description: str
    vpc_id: str = ""
    vswitch_id: str = ""

    @classmethod
    def from_api(cls, item: dict) -> "RemoteResourceRecord":
        """Build a record from a DBInstance item."""
        return cls(
            instance_id=item["DBInstanceId"],
            description=item.get("DBInstanceDescription") or "",
            vpc_id=item.get("VpcId") or "",
            vswitch_id=item.get("VSwitchId") or "",
        )


def _instance_spec(attribute: dict) -> str:
    """Return the instance spec (e.g. 2C16G) of a DBInstanceAttribute item."""
    cores = attribute.get("CpuCoresPerNode")
    memory_mb = attribute.get("MemoryPerNode")
    if cores and memory_mb:
        return f"{cores}C{int(memory_mb) // 1024}G"
    return attribute.get("InstanceSpec") or attribute.get("DBInstanceClass") or ""


class GpdbService:
    """Thin wrapper over the GPDB OpenAPI for one region-scoped client."""

    def __init__(self, client, region: Optional[str] = None):
        self.client = client
        self.region = region or client.get_region_id()

    def _call(self, action: str, params: dict) -> dict:
        return call_api(self.client, GPDB_PRODUCT, action, params)

    def describe_db_instances_page(self, cursor: PaginationCursor) -> list[RemoteResourceRecord]:
        """
        Fetch one page of instances in the client's region.

        Raises:
            ServerException, ClientException: If the API call fails
        """
        response = self._call(
            "DescribeDBInstances",
            {
                "RegionId": self.region,
                "PageNumber": cursor.page_number,
                "PageSize": cursor.page_size,
            },
        )
        items = (response.get("Items") or {}).get("DBInstance") or []
        return [RemoteResourceRecord.from_api(item) for item in items]

    def list_db_instances(self, page_size: int = PAGE_SIZE_LARGE) -> list[RemoteResourceRecord]:
        """List every instance in the region, page by page."""
        return collect_pages(self.describe_db_instances_page, page_size)

    def delete_db_instance(self, instance_id: str) -> dict:
        """Issue DeleteDBInstance for one instance."""
        return self._call("DeleteDBInstance", {"DBInstanceId": instance_id})

    def describe_elastic_instance(self, instance_id: str) -> dict:
        """
        Return the DBInstanceAttribute item of an instance.

        Raises:
            ResourceNotFoundError: If the instance does not exist
        """
        try:
            response = self._call("DescribeDBInstanceAttribute", {"DBInstanceId": instance_id})
        except (ServerException, ClientException) as exc:
            if is_not_found_error(exc):
                raise ResourceNotFoundError(instance_id) from exc
            raise
        items = (response.get("Items") or {}).get("DBInstanceAttribute") or []
        if not items:
            raise ResourceNotFoundError(instance_id)
        return items[0]

    def describe_security_ips(self, instance_id: str) -> list[str]:
        """Return the IP whitelist of the default group."""
        response = self._call("DescribeDBInstanceIPArrayList", {"DBInstanceId": instance_id})
        groups = (response.get("Items") or {}).get("DBInstanceIPArray") or []
        for group in groups:
            if group.get("DBInstanceIPArrayName") == DEFAULT_IP_ARRAY_NAME:
                raw = group.get("SecurityIPList") or ""
                return [ip.strip() for ip in raw.split(",") if ip.strip()]
        return []

    def elastic_instance_attributes(self, instance_id: str) -> dict[str, str]:
        """
        Describe an instance in the elastic instance resource's attribute names.

        Returns:
            dict: Flat attribute map; security_ip_list is expanded to .# / .N keys

        Raises:
            ResourceNotFoundError: If the instance does not exist
        """
        attribute = self.describe_elastic_instance(instance_id)
        values = {
            "id": attribute.get("DBInstanceId", instance_id),
            "engine": attribute.get("Engine"),
            "engine_version": attribute.get("EngineVersion"),
            "seg_storage_type": attribute.get("StorageType"),
            "seg_node_num": attribute.get("SegNodeNum"),
            "storage_size": attribute.get("StorageSize"),
            "instance_spec": _instance_spec(attribute),
            "db_instance_description": attribute.get("DBInstanceDescription"),
            "instance_network_type": attribute.get("InstanceNetworkType"),
            "payment_type": PAY_TYPE_TO_PAYMENT_TYPE.get(attribute.get("PayType"), attribute.get("PayType")),
            "vswitch_id": attribute.get("VSwitchId"),
            "zone_id": attribute.get("ZoneId"),
            "security_ip_list": self.describe_security_ips(instance_id),
        }
        logging.debug("Observed attributes for %s: %s", instance_id, values)
        return flatten_attributes(values)
