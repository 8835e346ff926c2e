"""Shared boto3 client construction and error helpers."""

from __future__ import annotations

import os
from typing import Any

import boto3
from botocore.exceptions import ClientError


def build_client(service_name: str, *, region: str | None = None, endpoint_url: str | None = None) -> Any:
    return boto3.client(
        service_name,
        region_name=region or os.getenv("AWS_DEFAULT_REGION") or os.getenv("AWS_REGION"),
        endpoint_url=endpoint_url or os.getenv("AWS_ENDPOINT_URL"),
    )


def error_code(exc: Exception) -> str:
    if isinstance(exc, ClientError):
        return str(exc.response.get("Error", {}).get("Code") or "")
    return exc.__class__.__name__


def error_detail(exc: Exception) -> str:
    if isinstance(exc, ClientError):
        return str(exc.response.get("Error", {}).get("Message") or "")[:256]
    return str(exc)[:256]
