"""
Shared credential loading utilities.

This module provides common credential loading patterns
for the sweeper and acceptance scripts.
"""

from gpdb_toolkit.common.acs_client_factory import (
    _resolve_env_path,
    load_credentials_from_env,
)


def setup_credentials(env_path=None):
    """
    Load Alibaba Cloud credentials from .env file.

    Args:
        env_path: Optional path to .env file. If not provided, uses ~/.env

    Returns:
        tuple: (access_key, secret_key)

    Raises:
        ValueError: If credentials are not found in .env file
    """
    return load_credentials_from_env(env_path)


def check_credentials():
    """
    Check if Alibaba Cloud credentials can be loaded from .env file.

    Returns:
        bool: True if credentials found, False otherwise (prints error message)
    """
    try:
        load_credentials_from_env()
    except ValueError:
        resolved_path = _resolve_env_path()
        print(f"⚠️  Alibaba Cloud credentials not found in {resolved_path}.")
        print(f"Please ensure {resolved_path} contains:")
        print("  ALICLOUD_ACCESS_KEY=your-access-key")
        print("  ALICLOUD_SECRET_KEY=your-secret-key")
        print("  ALICLOUD_REGION=cn-hangzhou")
        return False
    return True
