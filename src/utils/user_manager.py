"""User management utilities.

This module provides the credential store: user persistence with the linked
tutor/participant record, password hashing, and authentication.
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import (
    DuplicateEmailError,
    ForbiddenError,
    InvalidCredentialsError,
    UserNotFoundError,
    ValidationError,
)
from core.security import hash_password, verify_password
from models.user import ParticipantModel, TutorModel, UserModel
from schemas.user import Role

logger = logging.getLogger(__name__)

# Bcrypt rounds for password hashing (higher = more secure but slower)
BCRYPT_ROUNDS = 12


class UserManager:
    """Manages user data persistence and operations using SQLAlchemy."""

    def __init__(self, db: Session, bcrypt_rounds: int = BCRYPT_ROUNDS):
        """Initialize UserManager.

        Args:
            db: SQLAlchemy Session.
            bcrypt_rounds: Cost factor used when hashing new passwords.
        """
        self.db = db
        self.bcrypt_rounds = bcrypt_rounds

    def _active_users(self):
        return self.db.query(UserModel).filter(
            UserModel.is_active.is_(True),
            UserModel.deleted_at.is_(None),
        )

    def find_by_email(self, email: str) -> Optional[UserModel]:
        """Get an active, not deleted user by email.

        Args:
            email: Email to look up (exact match).

        Returns:
            UserModel if found, None otherwise.
        """
        return self._active_users().filter(UserModel.email == email).first()

    def email_exists(self, email: str) -> bool:
        """Check whether any user row, active or not, holds the email."""
        return (
            self.db.query(UserModel.id).filter(UserModel.email == email).first()
            is not None
        )

    def get_user_by_id(self, user_id: int) -> UserModel:
        """Get a user by id.

        Raises:
            UserNotFoundError: If no live user has this id.
        """
        model = (
            self.db.query(UserModel)
            .filter(UserModel.id == user_id, UserModel.deleted_at.is_(None))
            .first()
        )
        if not model:
            raise UserNotFoundError(f"user {user_id} not found")
        return model

    def find_linked_identity(self, user_id: int) -> UserModel:
        """Resolve a user's own tutor/participant id for ownership checks."""
        return self.get_user_by_id(user_id)

    def tutor_exists(self, tutor_id: int) -> bool:
        return (
            self.db.query(TutorModel.id)
            .filter(TutorModel.id == tutor_id, TutorModel.is_active.is_(True))
            .first()
            is not None
        )

    def create_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        role: Role,
    ) -> UserModel:
        """Insert the linked record and the user row in one transaction.

        Args:
            name: Display name.
            email: Unique email.
            password_hash: Already hashed password.
            role: Account role; tutor and participant get a linked record.

        Returns:
            The persisted UserModel.

        Raises:
            DuplicateEmailError: If the email unique constraint fires.
        """
        tutor_id = None
        participant_id = None
        try:
            if role == Role.TUTOR:
                tutor = TutorModel(is_active=True)
                self.db.add(tutor)
                self.db.flush()
                tutor_id = tutor.id
            elif role == Role.PARTICIPANT:
                participant = ParticipantModel(is_active=True)
                self.db.add(participant)
                self.db.flush()
                participant_id = participant.id

            user = UserModel(
                name=name,
                email=email,
                password_hash=password_hash,
                role=role.value,
                is_active=True,
                tutor_id=tutor_id,
                participant_id=participant_id,
            )
            self.db.add(user)
            self.db.commit()
        except IntegrityError as e:
            # Two registrations can pass the pre-check at once; the unique
            # constraint decides and the linked row goes with the rollback
            self.db.rollback()
            if "email" in str(e).lower() or "unique" in str(e).lower():
                raise DuplicateEmailError() from e
            raise
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Failed to create user %s", email)
            raise

        self.db.refresh(user)
        logger.info("Created user %s (id=%s, role=%s)", email, user.id, user.role)
        return user

    def register(
        self,
        name: str,
        email: str,
        password: str,
        role: str,
        admin_token: Optional[str] = None,
        required_admin_token: Optional[str] = None,
    ) -> UserModel:
        """Validate a registration and create the account.

        Args:
            name: Display name.
            email: Email address.
            password: Plain text password.
            role: Requested role name.
            admin_token: Token supplied by the client for admin registration.
            required_admin_token: Configured token; None disables the check.

        Returns:
            Created UserModel.

        Raises:
            ValidationError: If a field is missing or the role is unknown.
            ForbiddenError: If admin registration is gated and the token is wrong.
            DuplicateEmailError: If the email is already registered.
        """
        name = (name or "").strip()
        email = (email or "").strip()
        if not name or not email or not password or not (role or "").strip():
            raise ValidationError("name, email, password and role are required")

        parsed_role = Role.parse(role)
        if parsed_role is None:
            raise ValidationError(
                f"invalid role: {role}. Must be 'admin', 'tutor' or 'participant'"
            )

        if (
            parsed_role == Role.ADMIN
            and required_admin_token
            and admin_token != required_admin_token
        ):
            logger.warning("Rejected admin registration for %s: bad admin token", email)
            raise ForbiddenError("invalid admin token")

        if self.email_exists(email):
            raise DuplicateEmailError()

        password_hash = hash_password(password, rounds=self.bcrypt_rounds)
        return self.create_user(name, email, password_hash, parsed_role)

    def authenticate(self, email: str, password: str) -> UserModel:
        """Check credentials.

        Every failure raises the same InvalidCredentialsError so callers
        cannot tell a missing account from a wrong password.
        """
        if not email or not password:
            raise InvalidCredentialsError()

        user = self.find_by_email(email.strip())
        if user is None:
            logger.info("Login failed: unknown or inactive account")
            raise InvalidCredentialsError()

        if not verify_password(password, user.password_hash):
            logger.info("Login failed: wrong password for user id=%s", user.id)
            raise InvalidCredentialsError()

        return user
