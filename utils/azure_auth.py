# utils/azure_auth.py
import json
import logging
import os
from functools import lru_cache
from pathlib import Path

from azure.identity import ClientSecretCredential

logging.getLogger("azure.identity").setLevel(logging.WARNING)

_REQUIRED_FIELDS = ("tenant_id", "client_id", "client_secret")


class IdentityConfigurationError(RuntimeError):
    """Raised when the identity platform service credential is missing or unusable."""


def _read_credential_blob() -> str:
    """
    Locate the service credential blob.

    Priority:
    1. IDENTITY_CREDENTIALS_JSON: the JSON document itself
    2. IDENTITY_CREDENTIALS_FILE: path to a JSON document on disk
    """
    raw = os.getenv("IDENTITY_CREDENTIALS_JSON", "").strip()
    if raw:
        return raw

    path = os.getenv("IDENTITY_CREDENTIALS_FILE", "").strip()
    if not path:
        raise IdentityConfigurationError(
            "Missing identity credentials (IDENTITY_CREDENTIALS_JSON or IDENTITY_CREDENTIALS_FILE)."
        )
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise IdentityConfigurationError(
            f"Unable to read identity credentials file '{path}': {exc}"
        ) from exc


def load_service_account() -> dict:
    """Parse and validate the service credential blob."""
    blob = _read_credential_blob()
    try:
        account = json.loads(blob)
    except json.JSONDecodeError as exc:
        raise IdentityConfigurationError(f"Identity credentials are not valid JSON: {exc}") from exc

    if not isinstance(account, dict):
        raise IdentityConfigurationError("Identity credentials must be a JSON object.")

    missing = [name for name in _REQUIRED_FIELDS if not account.get(name)]
    if missing:
        raise IdentityConfigurationError(
            f"Identity credentials missing required fields: {', '.join(missing)}"
        )
    return account


def _create_credential_internal() -> ClientSecretCredential:
    account = load_service_account()
    kwargs = {}
    if account.get("authority_host"):
        kwargs["authority"] = account["authority_host"]
    return ClientSecretCredential(
        tenant_id=account["tenant_id"],
        client_id=account["client_id"],
        client_secret=account["client_secret"],
        **kwargs,
    )


@lru_cache(maxsize=1)
def get_credential() -> ClientSecretCredential:
    """
    Get the identity platform credential for service-to-service calls.

    Credential creation is cheap and does not contact the platform; token
    acquisition happens on first use. The credential object is cached for reuse.

    Raises:
        IdentityConfigurationError: when no usable credential blob is configured.
    """
    return _create_credential_internal()
