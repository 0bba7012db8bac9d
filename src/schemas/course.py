"""Course (bimbel) schema definitions."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


@dataclass
class CourseDraft:
    """Form values for a create or update, before validation."""

    name: str = ""
    deskripsi: str = ""
    harga: float = 0
    feature_id: int = 0
    subject_id: int = 0
    limit_peserta: Optional[int] = None
    tutor_id: Optional[int] = None
    is_active: Optional[bool] = None


@dataclass
class ThumbnailUpload:
    filename: str
    content: bytes


class CourseInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tutor_id: int
    feature_id: int
    subject_id: int
    name: str
    deskripsi: str
    harga: float
    limit_peserta: int
    thumbnail: str
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
