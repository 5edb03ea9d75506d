from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from .auth import AuthService, AuthUser
from .db import init_db
from .errors import Unauthorized

# Missing credentials are reported as our own 401, not FastAPI's default 403
security = HTTPBearer(auto_error=False)


async def ensure_db():
    """
    FastAPI dependency: call on routes/routers requiring DB.
    First call triggers init_beanie once; subsequent calls are cheap.
    """
    await init_db()


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthUser:
    """Identity from the bearer token; attached to the request for handlers"""
    if not credentials or not credentials.credentials:
        raise Unauthorized()
    return AuthService.verify_token(credentials.credentials)
