from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from .base import Base


class CourseModel(Base):
    """A bimbel (tutoring course) owned by one tutor."""

    __tablename__ = "bimbels"

    id = Column(Integer, primary_key=True, index=True)
    tutor_id = Column(Integer, ForeignKey("tutors.id"), index=True, nullable=False)
    feature_id = Column(Integer, ForeignKey("features.id"), index=True, nullable=False)
    subject_id = Column(Integer, ForeignKey("subjects.id"), index=True, nullable=False)

    name = Column(String(255), nullable=False)
    deskripsi = Column(Text, nullable=False)
    harga = Column(Float, nullable=False)
    limit_peserta = Column(Integer, nullable=False, default=0)
    thumbnail = Column(String(512), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
    # Soft delete marker; rows with a value are invisible to every read
    deleted_at = Column(DateTime(timezone=True), nullable=True)
