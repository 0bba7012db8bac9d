"""Dependency injection module for FastAPI.

This module provides dependency injection functions for FastAPI routes:
request-scoped managers, the startup-built services kept on ``app.state``,
and the access control gate that turns a bearer token into an Identity.
"""

import logging
from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from config import Settings
from core.database import get_db
from core.exceptions import AuthenticationError, ExpiredTokenError, TokenError
from core.security import TokenService
from schemas.user import Identity
from utils import course_manager
from utils import feature_manager
from utils import subject_manager
from utils import user_manager
from utils.thumbnail_storage import ThumbnailStorage

logger = logging.getLogger(__name__)

# auto_error=False so a missing header reaches the gate and gets our envelope
bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_thumbnail_storage(request: Request) -> ThumbnailStorage:
    return request.app.state.thumbnail_storage


def get_user_manager(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> user_manager.UserManager:
    """Get UserManager instance with request-scoped DB session.

    Args:
        db: Database session.
        settings: Application settings (bcrypt cost).

    Returns:
        UserManager instance.
    """
    return user_manager.UserManager(db, bcrypt_rounds=settings.bcrypt_rounds)


def get_feature_manager(db: Session = Depends(get_db)) -> feature_manager.FeatureManager:
    """Get FeatureManager instance with request-scoped DB session."""
    return feature_manager.FeatureManager(db)


def get_subject_manager(db: Session = Depends(get_db)) -> subject_manager.SubjectManager:
    """Get SubjectManager instance with request-scoped DB session."""
    return subject_manager.SubjectManager(db)


def get_course_manager(
    db: Session = Depends(get_db),
    storage: ThumbnailStorage = Depends(get_thumbnail_storage),
) -> course_manager.CourseManager:
    """Get CourseManager instance with request-scoped DB session."""
    return course_manager.CourseManager(db, storage)


def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    token_service: TokenService = Depends(get_token_service),
) -> Identity:
    """Verify the bearer token and return the caller's Identity.

    Args:
        credentials: Parsed ``Authorization: Bearer`` header, if any.
        token_service: Verifier built from the startup settings.

    Returns:
        Identity of the authenticated caller.

    Raises:
        AuthenticationError: If the token is missing, invalid or expired.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("unauthorized: missing or invalid token")

    try:
        claims = token_service.verify(credentials.credentials)
    except ExpiredTokenError:
        raise AuthenticationError("token expired")
    except TokenError as e:
        logger.info("Rejected bearer token: %s", e)
        raise AuthenticationError("unauthorized: invalid or expired token")

    return Identity(**claims.model_dump())


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_settings)]
TokenServiceDep = Annotated[TokenService, Depends(get_token_service)]
UserManagerDep = Annotated[user_manager.UserManager, Depends(get_user_manager)]
FeatureManagerDep = Annotated[
    feature_manager.FeatureManager, Depends(get_feature_manager)
]
SubjectManagerDep = Annotated[
    subject_manager.SubjectManager, Depends(get_subject_manager)
]
CourseManagerDep = Annotated[
    course_manager.CourseManager, Depends(get_course_manager)
]
CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]
