import json
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from utils.logger import get_logger

logger = get_logger("secrets")


def get_secret_json(secret_name: str, region_name: str = "us-east-1") -> Dict[str, Any]:
    """
    Fetch a JSON credentials object from AWS Secrets Manager.

    Expects the secret value to be a JSON object, e.g. for Twilio:

        {
          "account_sid": "...",
          "auth_token": "...",
          "msid": "..."
        }

    Raises RuntimeError if the secret has no string payload and
    json.JSONDecodeError if the payload is not JSON.
    """
    logger.info(
        "secrets.fetch",
        extra={"secret_name": secret_name, "region": region_name},
    )

    client = boto3.client("secretsmanager", region_name=region_name)

    resp = client.get_secret_value(SecretId=secret_name)
    secret_str = resp.get("SecretString")

    if not secret_str:
        msg = f"Secret '{secret_name}' has no SecretString payload"
        logger.error(msg)
        raise RuntimeError(msg)

    try:
        data = json.loads(secret_str)
    except json.JSONDecodeError as e:
        logger.error(
            "SecretString is not valid JSON",
            extra={"secret_name": secret_name, "error": str(e)},
        )
        raise

    if not isinstance(data, dict):
        msg = f"Secret '{secret_name}' is not a JSON object"
        logger.error(msg)
        raise RuntimeError(msg)

    return data


def load_optional_secret(secret_name: Optional[str], region_name: str) -> Dict[str, Any]:
    """
    Like get_secret_json, but never raises.

    Missing credentials must not stop the function from starting; any
    failure is logged and an empty dict returned so the caller falls back
    to environment values (or to an unconfigured notifier).
    """
    if not secret_name:
        return {}

    try:
        return get_secret_json(secret_name, region_name)
    except (ClientError, BotoCoreError, RuntimeError, json.JSONDecodeError) as e:
        logger.warning(
            "secrets.unavailable",
            extra={"secret_name": secret_name, "error": str(e)},
        )
        return {}
