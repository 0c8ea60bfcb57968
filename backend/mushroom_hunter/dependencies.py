"""
Mushroom Hunter Backend — Request Dependencies
================================================

What:  FastAPI dependencies that resolve the calling user from the
       `Authorization: Bearer <token>` header.
Who:   Every route except /health, /api/auth/register and /api/auth/login.

Failure modes (all 401, distinguished by `details.code`):
    no header              → authentication_required
    expired token          → token_expired
    malformed/bad signature→ invalid_token
    unknown/inactive user  → invalid_authentication
"""

from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from mushroom_hunter.database import get_db_session
from mushroom_hunter.exceptions import AuthenticationError
from mushroom_hunter.models.user import User
from mushroom_hunter.security import decode_access_token
from mushroom_hunter.utils.authorization import require_admin as ensure_admin

# auto_error=False: missing credentials go through our own 401 envelope
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> User:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()

    user_id = decode_access_token(credentials.credentials)
    user = await db.get(User, user_id)

    if user is None or not user.is_active:
        raise AuthenticationError(message="Invalid authentication", code="invalid_authentication")
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    ensure_admin(user)
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
AdminUser = Annotated[User, Depends(require_admin)]
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
