"""Authentication routes.

This module handles HTTP endpoints for user registration and login. These
are the only routes that do not pass through the access control gate.
"""

import logging

from fastapi import APIRouter, status

from core.dependencies import (
    CurrentIdentity,
    SettingsDep,
    TokenServiceDep,
    UserManagerDep,
)
from schemas.response import success_response
from schemas.user import AuthResult, LoginRequest, RegisterRequest, UserPublic

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


def _auth_result(user, token_service) -> AuthResult:
    token, expires_at = token_service.issue(user.id, user.role, user.email)
    return AuthResult(
        token=token,
        expires_at=expires_at,
        user=UserPublic.model_validate(user),
    )


@router.post("/register", summary="Register a new account")
def register(
    req: RegisterRequest,
    user_manager: UserManagerDep,
    token_service: TokenServiceDep,
    settings: SettingsDep,
):
    """Register a new user and log them in immediately.

    Admin registration requires ``admin_token`` when
    ADMIN_REGISTRATION_TOKEN is configured.

    Returns:
        201 envelope with token, expiry and the public user projection.
    """
    user = user_manager.register(
        name=req.name,
        email=req.email,
        password=req.password,
        role=req.role,
        admin_token=req.admin_token,
        required_admin_token=settings.admin_registration_token,
    )
    return success_response(
        "registration successful",
        _auth_result(user, token_service),
        status_code=status.HTTP_201_CREATED,
    )


@router.post("/login", summary="Log in with email and password")
def login(
    req: LoginRequest,
    user_manager: UserManagerDep,
    token_service: TokenServiceDep,
):
    """Login with email and password.

    Any failure returns the same 401 message.
    """
    user = user_manager.authenticate(req.email, req.password)
    logger.info("User id=%s logged in", user.id)
    return success_response("login successful", _auth_result(user, token_service))


@router.get("/me", summary="Current user")
def me(identity: CurrentIdentity, user_manager: UserManagerDep):
    user = user_manager.get_user_by_id(identity.user_id)
    return success_response("current user", UserPublic.model_validate(user))
