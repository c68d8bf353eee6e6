import os

from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request
from .jwt_handler import user_id_from_token

RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() in ("1", "true", "yes", "on")
CHECKOUT_RATE_LIMIT = os.getenv("CHECKOUT_RATE_LIMIT", "10/minute")


def user_id_or_ip(request: Request) -> str:
    """
    Key function for SlowAPI.
    Buckets authenticated shoppers by user id, everyone else by client IP.
    """
    auth_header = request.headers.get("Authorization")

    if auth_header and auth_header.startswith("Bearer "):
        user_id = user_id_from_token(auth_header.split(" ", 1)[1])
        if user_id is not None:
            return f"user:{user_id}"

    return f"ip:{get_remote_address(request)}"

# Checkout and payment routes share this limiter; see CHECKOUT_RATE_LIMIT
limiter = Limiter(key_func=user_id_or_ip, enabled=RATE_LIMIT_ENABLED)
