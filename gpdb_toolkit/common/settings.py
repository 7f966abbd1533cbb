"""
Configuration for the GPDB toolkit.

Values are module-level constants with environment overrides so sweeps and
acceptance runs can be pointed at another region or endpoint without edits.
"""

from __future__ import annotations

import os

# Region used when neither --region nor ALICLOUD_REGION is supplied
DEFAULT_REGION: str = os.environ.get("ALICLOUD_REGION", "cn-hangzhou")

# Fixed wait after a sweep deleted something so dependent network sweepers
# see the instances gone
SETTLE_DELAY_SECONDS: int = 30

# Page size used for list calls
PAGE_SIZE_LARGE: int = 50

# OpenAPI endpoints and versions
GPDB_ENDPOINT: str = os.environ.get("GPDB_ENDPOINT", "gpdb.aliyuncs.com")
GPDB_API_VERSION: str = "2016-05-03"
VPC_ENDPOINT: str = os.environ.get("VPC_ENDPOINT", "vpc.aliyuncs.com")
VPC_API_VERSION: str = "2016-04-28"

# Terraform CLI used by the acceptance harness
TERRAFORM_BINARY: str = os.environ.get("TF_BINARY", "terraform")
TERRAFORM_TIMEOUT_SECONDS: int = int(os.environ.get("TF_TIMEOUT_SECONDS", "3600"))


def get_sweep_regions() -> list[str]:
    """Return the regions to sweep, from GPDB_SWEEP_REGIONS or the default region."""
    raw = os.environ.get("GPDB_SWEEP_REGIONS", "")
    regions = [region.strip() for region in raw.split(",") if region.strip()]
    if regions:
        return regions
    return [os.environ.get("ALICLOUD_REGION", DEFAULT_REGION)]
