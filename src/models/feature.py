from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .base import Base


class FeatureModel(Base):
    __tablename__ = "features"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    role_links = relationship(
        "FeatureRoleModel",
        back_populates="feature",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    subjects = relationship("SubjectModel", back_populates="feature")

    @property
    def roles(self) -> set:
        return {link.role for link in self.role_links}


class FeatureRoleModel(Base):
    """One row per role allowed to see a feature."""

    __tablename__ = "feature_roles"
    __table_args__ = (UniqueConstraint("feature_id", "role", name="uq_feature_role"),)

    id = Column(Integer, primary_key=True, index=True)
    feature_id = Column(
        Integer, ForeignKey("features.id", ondelete="CASCADE"), index=True, nullable=False
    )
    role = Column(String(32), nullable=False, index=True)

    feature = relationship("FeatureModel", back_populates="role_links")
