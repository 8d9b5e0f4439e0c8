"""Secrets Manager lookup for values that must not sit in the Lambda environment."""

from __future__ import annotations

from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from agreements_pdf.errors import ConfigurationError


def fetch_secret_string(secret_id: str, region: Optional[str] = None, client: Any = None) -> str:
    """Return the ``SecretString`` of ``secret_id`` (name or ARN).

    Raises ConfigurationError when the secret cannot be read or holds no
    string value; the function cannot sign tokens without it.
    """
    sm = client or boto3.client("secretsmanager", region_name=region)
    try:
        resp = sm.get_secret_value(SecretId=secret_id)
    except (ClientError, BotoCoreError) as exc:
        raise ConfigurationError(f"Unable to read secret {secret_id}: {exc}") from exc
    value = resp.get("SecretString")
    if not value:
        raise ConfigurationError(f"Secret {secret_id} has no string value")
    return value
