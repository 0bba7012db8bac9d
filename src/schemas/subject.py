from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class SubjectCreateRequest(BaseModel):
    feature_id: int = 0
    name: str = ""
    deskripsi: Optional[str] = None
    is_active: Optional[bool] = None


class SubjectUpdateRequest(BaseModel):
    feature_id: int = 0
    name: str = ""
    deskripsi: Optional[str] = None
    is_active: bool = True


class SubjectInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    feature_id: int
    name: str
    deskripsi: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
