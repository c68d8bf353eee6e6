"""
Admin credential for the privileged catalog and order-management endpoints.

An unset INTERNAL_API_KEY falls back to an insecure default with a loud
warning so local development still works while production misconfiguration
is surfaced.
"""
import os
import secrets
import warnings

_INTERNAL_API_KEY: str = os.getenv("INTERNAL_API_KEY", "")

if not _INTERNAL_API_KEY:
    warnings.warn(
        "INTERNAL_API_KEY is not set. Admin endpoints accept an insecure default key. "
        "Set this env var in production!",
        stacklevel=2,
    )
    _INTERNAL_API_KEY = "insecure-default-change-me"

INTERNAL_API_KEY: str = _INTERNAL_API_KEY
API_KEY_HEADER_NAME = "X-Internal-API-Key"


def verify_api_key(provided_key: str | None) -> bool:
    """Verify an admin key using constant-time comparison."""
    if not provided_key:
        return False
    return secrets.compare_digest(str(provided_key), str(INTERNAL_API_KEY))
