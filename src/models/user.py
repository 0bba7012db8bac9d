"""User database models.

This module defines the User model and the role-linked tutor/participant
records using SQLAlchemy.
"""

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .base import Base


class TutorModel(Base):
    """Secondary identity row for users with the tutor role."""

    __tablename__ = "tutors"

    id = Column(Integer, primary_key=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class ParticipantModel(Base):
    """Secondary identity row for users with the participant role."""

    __tablename__ = "participants"

    id = Column(Integer, primary_key=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class UserModel(Base):
    """User database model."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "tutor_id IS NULL OR participant_id IS NULL",
            name="ck_users_single_linked_identity",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False)  # 'admin', 'tutor' or 'participant'
    is_active = Column(Boolean, nullable=False, default=True)

    tutor_id = Column(Integer, ForeignKey("tutors.id"), unique=True, nullable=True)
    participant_id = Column(
        Integer, ForeignKey("participants.id"), unique=True, nullable=True
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    tutor = relationship("TutorModel", uselist=False)
    participant = relationship("ParticipantModel", uselist=False)
