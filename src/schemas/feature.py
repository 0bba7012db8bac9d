from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from schemas.user import Role

ROLE_ORDER = [Role.ADMIN.value, Role.TUTOR.value, Role.PARTICIPANT.value]


def join_roles(roles) -> str:
    """Render a role set in the comma-joined form used on the wire."""
    return ",".join(r for r in ROLE_ORDER if r in roles)


class FeatureCreateRequest(BaseModel):
    name: str = ""
    # Accepts "admin,tutor" or ["admin", "tutor"]
    roles: Union[str, List[str]] = ""
    is_active: Optional[bool] = None


class FeatureUpdateRequest(BaseModel):
    name: str = ""
    roles: Union[str, List[str]] = ""
    is_active: bool = True


class FeatureInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    roles: str = Field(description="Comma-joined roles allowed to see the feature.")
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("roles", mode="before")
    @classmethod
    def render_roles(cls, value):
        if isinstance(value, (set, frozenset, list, tuple)):
            return join_roles(value)
        return value
