"""boto3 client factory."""

from __future__ import annotations

from typing import Any, Optional

import boto3
from botocore.config import Config

# Cleanup units and the notifier rely on these timeouts; the orchestrator sets none.
DEFAULT_CLIENT_CONFIG = Config(
    connect_timeout=10,
    read_timeout=60,
    retries={"max_attempts": 5, "mode": "standard"},
)


def create_boto_client(
    service_name: str,
    region_name: Optional[str] = None,
    profile_name: Optional[str] = None,
) -> Any:
    """Create a boto3 client.

    Args:
        service_name: AWS service name (e.g. "ec2", "ses")
        region_name: AWS region (optional, default from environment)
        profile_name: AWS profile name (optional)

    Returns:
        boto3 client for the service
    """
    session = boto3.Session(profile_name=profile_name, region_name=region_name)
    return session.client(service_name, config=DEFAULT_CLIENT_CONFIG)
