from .jwt_handler import create_access_token, verify_access_token, user_id_from_token
from .api_key import verify_api_key
from .dependencies import get_current_user, require_admin
from .rate_limiter import limiter, user_id_or_ip, CHECKOUT_RATE_LIMIT

__all__ = [
    "create_access_token",
    "verify_access_token",
    "user_id_from_token",
    "verify_api_key",
    "get_current_user",
    "require_admin",
    "limiter",
    "user_id_or_ip",
    "CHECKOUT_RATE_LIMIT",
]
