"""Shared AWS helpers for service clients."""

from __future__ import annotations

from typing import Any

import boto3
from botocore.config import Config


def create_boto3_client(
    service_name: str,
    *,
    region_name: str,
    aws_access_key_id: str | None = None,
    aws_secret_access_key: str | None = None,
    read_timeout: int = 60,
    max_attempts: int = 3,
) -> Any:
    """Instantiate a boto3 client with explicit timeouts and bounded retries."""

    client_kwargs: dict[str, Any] = {
        "region_name": region_name,
        "config": Config(
            connect_timeout=10,
            read_timeout=read_timeout,
            retries={"max_attempts": max_attempts, "mode": "standard"},
        ),
    }
    if aws_access_key_id and aws_secret_access_key:
        client_kwargs["aws_access_key_id"] = aws_access_key_id
        client_kwargs["aws_secret_access_key"] = aws_secret_access_key
    return boto3.client(service_name, **client_kwargs)


__all__ = ["create_boto3_client"]
