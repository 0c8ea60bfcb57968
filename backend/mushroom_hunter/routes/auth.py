"""
Mushroom Hunter Backend — Auth Route Handlers
===============================================

What:  Registration, login and "who am I".
How:   Tokens are returned in the response body; clients send them back as
       `Authorization: Bearer <token>`.
"""

from fastapi import APIRouter, status

from mushroom_hunter.dependencies import CurrentUser, DbSession
from mushroom_hunter.schemas.auth import (
    AuthResponse,
    CurrentUserResponse,
    LoginRequest,
    RegisterRequest,
    UserResponse,
)
from mushroom_hunter.schemas.common import ErrorResponse
from mushroom_hunter.services.auth_service import auth_service

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "User already exists", "model": ErrorResponse}},
    summary="Create an account",
)
async def register(payload: RegisterRequest, db: DbSession) -> AuthResponse:
    return await auth_service.register(db, payload)


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={401: {"description": "Invalid credentials", "model": ErrorResponse}},
    summary="Exchange email and password for an access token",
)
async def login(payload: LoginRequest, db: DbSession) -> AuthResponse:
    return await auth_service.login(db, payload)


@router.get(
    "/me",
    response_model=CurrentUserResponse,
    responses={401: {"description": "Not authenticated", "model": ErrorResponse}},
    summary="Current user",
)
async def me(user: CurrentUser) -> CurrentUserResponse:
    return CurrentUserResponse(user=UserResponse.model_validate(user))
