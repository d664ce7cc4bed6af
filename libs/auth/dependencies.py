from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import ValidationError

from libs.auth.models import AuthUser
from libs.common.config import get_settings

security = HTTPBearer(auto_error=False)


def decode_admin_token(token: str) -> Optional[AuthUser]:
    """Verify an admin token and return its user, or None when invalid."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.ADMIN_JWT_SECRET, algorithms=["HS256"])
        return AuthUser(**payload)
    except (JWTError, ValidationError):
        return None


async def get_optional_admin(
    request: Request,
    credentials: Annotated[
        Optional[HTTPAuthorizationCredentials], Depends(security)
    ] = None,
) -> Optional[AuthUser]:
    """
    Resolve the dashboard user from the admin cookie or a Bearer token.

    Token issuance belongs to the CMS login; this only verifies.
    """
    settings = get_settings()
    token = request.cookies.get(settings.ADMIN_COOKIE_NAME)
    if not token and credentials:
        token = credentials.credentials
    if not token:
        return None
    return decode_admin_token(token)


async def require_admin(
    current_user: Annotated[Optional[AuthUser], Depends(get_optional_admin)],
) -> AuthUser:
    """Ensure the request carries a valid token with the 'admin' role."""
    if current_user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return current_user
