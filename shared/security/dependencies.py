from fastapi import Depends, HTTPException, status, Request
from fastapi.security import OAuth2PasswordBearer, APIKeyHeader
from .jwt_handler import user_id_from_token
from .api_key import API_KEY_HEADER_NAME, verify_api_key

# Defines the expected header format (Bearer <token>)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)

# Admin endpoints authenticate with a shared key instead of a user token
api_key_header = APIKeyHeader(name=API_KEY_HEADER_NAME, auto_error=False)

async def get_current_user(request: Request, token: str = Depends(oauth2_scheme)) -> int:
    """Dependency to validate the bearer token and return the user id."""
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = user_id_from_token(token)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid Token or Expire Token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # Store in request state for downstream use (like rate limiting)
    request.state.user_id = user_id
    return user_id

async def require_admin(api_key: str = Depends(api_key_header)) -> bool:
    """Dependency guarding catalog writes and order administration."""
    if not verify_api_key(api_key):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Invalid or missing {API_KEY_HEADER_NAME} header"
        )
    return True
