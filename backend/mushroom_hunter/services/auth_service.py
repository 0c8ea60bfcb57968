"""
Mushroom Hunter Backend — Auth Service
========================================

What:  Registration and login.
How:   Passwords are bcrypt-hashed before storage; both operations answer
       with the public user view plus a freshly issued access token.
Who:   Called by the /api/auth route handlers.
"""

import logging

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mushroom_hunter.exceptions import AuthenticationError, ValidationError
from mushroom_hunter.models.user import ROLE_USER, User
from mushroom_hunter.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserResponse
from mushroom_hunter.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)


class AuthService:

    async def register(self, db: AsyncSession, payload: RegisterRequest) -> AuthResponse:
        """
        Create a regular user account.

        Raises:
            ValidationError: email or username already taken (400)
        """
        result = await db.execute(
            select(User).where(
                or_(User.email == payload.email, User.username == payload.username)
            )
        )
        if result.scalars().first() is not None:
            raise ValidationError(message="User already exists")

        user = User(
            email=payload.email,
            username=payload.username,
            password_hash=hash_password(payload.password),
            role=ROLE_USER,
            is_active=True,
        )
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            # A concurrent registration took the email or username first
            raise ValidationError(message="User already exists")
        logger.info("Registered user %s (%s)", user.username, user.id)

        return AuthResponse(
            user=UserResponse.model_validate(user),
            token=create_access_token(user.id),
        )

    async def login(self, db: AsyncSession, payload: LoginRequest) -> AuthResponse:
        """
        Exchange credentials for a token.

        Unknown email, inactive account and wrong password all answer with
        the same message so the endpoint cannot be used to probe accounts.
        """
        result = await db.execute(select(User).where(User.email == payload.email))
        user = result.scalar_one_or_none()

        if user is None or not user.is_active or not verify_password(payload.password, user.password_hash):
            logger.info("Failed login for %s", payload.email)
            raise AuthenticationError(message="Invalid credentials", code="invalid_credentials")

        return AuthResponse(
            user=UserResponse.model_validate(user),
            token=create_access_token(user.id),
        )


auth_service = AuthService()
