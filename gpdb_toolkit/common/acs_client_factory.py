#!/usr/bin/env python3
"""
Alibaba Cloud Client Factory Module
Provides standardized AcsClient creation and OpenAPI calls.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from aliyunsdkcore.acs_exception.exceptions import ClientException, ServerException
from aliyunsdkcore.auth.credentials import StsTokenCredential
from aliyunsdkcore.client import AcsClient
from aliyunsdkcore.request import CommonRequest
from dotenv import load_dotenv

from gpdb_toolkit.common import settings


@dataclass(frozen=True)
class ApiProduct:
    """Endpoint and API version of an OpenAPI product."""

    domain: str
    version: str


GPDB_PRODUCT = ApiProduct(settings.GPDB_ENDPOINT, settings.GPDB_API_VERSION)
VPC_PRODUCT = ApiProduct(settings.VPC_ENDPOINT, settings.VPC_API_VERSION)


def _resolve_env_path(env_path: Optional[str] = None) -> str:
    """
    Determine which .env file should be used for Alibaba Cloud credentials.

    Priority order:
      1. Explicit parameter
      2. ALICLOUD_ENV_FILE environment variable
      3. ~/.env
    """
    if env_path:
        return env_path
    env_file = os.environ.get("ALICLOUD_ENV_FILE")
    if env_file:
        return env_file
    return str(Path.home() / ".env")


def load_credentials_from_env(env_path: Optional[str] = None) -> tuple[str, str]:
    """
    Load Alibaba Cloud credentials from .env file and return them as a tuple.

    Args:
        env_path: Optional override path (defaults to ~/.env)

    Returns:
        tuple: (access_key, secret_key)

    Raises:
        ValueError: If credentials are not found in .env file or environment
    """
    resolved_path = _resolve_env_path(env_path)
    load_dotenv(resolved_path)

    access_key = os.getenv("ALICLOUD_ACCESS_KEY")
    secret_key = os.getenv("ALICLOUD_SECRET_KEY")
    if access_key and secret_key:
        logging.info("✅ Alibaba Cloud credentials loaded from %s", resolved_path)
        if os.getenv("ALICLOUD_SECURITY_TOKEN"):
            logging.info("✅ Alibaba Cloud security token loaded from %s", resolved_path)
        return access_key, secret_key

    raise ValueError(f"Alibaba Cloud credentials not found in {resolved_path}")


def create_client(
    region: str,
    access_key: Optional[str] = None,
    secret_key: Optional[str] = None,
    security_token: Optional[str] = None,
):
    """
    Create an AcsClient scoped to a region.

    Args:
        region: Region id (e.g. 'cn-hangzhou')
        access_key: Optional access key (loads from env if not provided)
        secret_key: Optional secret key (loads from env if not provided)
        security_token: Optional STS token; read from ALICLOUD_SECURITY_TOKEN when omitted

    Returns:
        AcsClient: Configured client
    """
    if access_key is None or secret_key is None:
        access_key, secret_key = load_credentials_from_env()
    if security_token is None:
        security_token = os.getenv("ALICLOUD_SECURITY_TOKEN") or None

    if security_token:
        credential = StsTokenCredential(access_key, secret_key, security_token)
        return AcsClient(region_id=region, credential=credential)
    return AcsClient(access_key, secret_key, region)


def call_api(client, product: ApiProduct, action: str, params: Optional[dict] = None) -> dict:
    """
    Call an OpenAPI action and decode the JSON response.

    Args:
        client: AcsClient instance
        product: Endpoint/version of the product to call
        action: API action name (e.g. 'DescribeDBInstances')
        params: Query parameters; None values are dropped

    Returns:
        dict: Decoded response document

    Raises:
        ServerException: If the service rejects the call
        ClientException: If the SDK cannot send the call
    """
    request = CommonRequest()
    request.set_accept_format("json")
    request.set_domain(product.domain)
    request.set_method("POST")
    request.set_protocol_type("https")
    request.set_version(product.version)
    request.set_action_name(action)
    for key, value in (params or {}).items():
        if value is not None:
            request.add_query_param(key, str(value))

    raw = client.do_action_with_exception(request)
    logging.debug("%s response: %s", action, raw)
    return json.loads(raw)


def error_code(exc) -> str:
    """Return the SDK error code of an exception, or an empty string."""
    if isinstance(exc, (ServerException, ClientException)):
        return exc.get_error_code() or ""
    return ""


def is_not_found_error(exc) -> bool:
    """Return True when an SDK error reports a missing resource."""
    code = error_code(exc)
    return code.endswith("NotFound") or code.endswith("NotExist")
