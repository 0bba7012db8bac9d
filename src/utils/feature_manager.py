"""Feature management utilities."""

import logging
from typing import Iterable, List, Optional, Set, Union

from sqlalchemy import func
from sqlalchemy.orm import Session

from core.exceptions import ConflictError, NotFoundError, ValidationError
from models.course import CourseModel
from models.feature import FeatureModel, FeatureRoleModel
from models.subject import SubjectModel
from schemas.user import Identity, Role
from utils.access_policy import require_admin

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 3


def parse_roles(raw: Union[str, Iterable[str], None]) -> Set[str]:
    """Parse "admin,tutor" (or a list) into a validated role set.

    Raises:
        ValidationError: If no role is given or one is unknown.
    """
    if raw is None:
        items = []
    elif isinstance(raw, str):
        items = raw.split(",")
    else:
        items = list(raw)

    roles = set()
    for item in items:
        item = (item or "").strip()
        if not item:
            continue
        role = Role.parse(item)
        if role is None:
            raise ValidationError(f"unknown role in roles: {item}")
        roles.add(role.value)

    if not roles:
        raise ValidationError("roles is required")
    return roles


class FeatureManager:
    """Manages role-gated features."""

    def __init__(self, db: Session):
        self.db = db

    def list_for_role(self, role: Role) -> List[FeatureModel]:
        """List active features visible to a role."""
        role_value = role.value if isinstance(role, Role) else role
        return (
            self.db.query(FeatureModel)
            .join(FeatureRoleModel, FeatureRoleModel.feature_id == FeatureModel.id)
            .filter(
                FeatureModel.is_active.is_(True),
                FeatureRoleModel.role == role_value,
            )
            .order_by(FeatureModel.id)
            .all()
        )

    def get_feature(self, feature_id: int) -> FeatureModel:
        model = self.db.query(FeatureModel).filter(FeatureModel.id == feature_id).first()
        if not model:
            raise NotFoundError("feature not found")
        return model

    def is_active_feature(self, feature_id: int) -> bool:
        return (
            self.db.query(FeatureModel.id)
            .filter(FeatureModel.id == feature_id, FeatureModel.is_active.is_(True))
            .first()
            is not None
        )

    def name_exists(self, name: str, exclude_id: Optional[int] = None) -> bool:
        query = self.db.query(FeatureModel.id).filter(
            func.lower(func.trim(FeatureModel.name)) == name.strip().lower()
        )
        if exclude_id is not None:
            query = query.filter(FeatureModel.id != exclude_id)
        return query.first() is not None

    def _validate(self, name: str, roles, exclude_id: Optional[int] = None):
        name = (name or "").strip()
        if not name:
            raise ValidationError("name is required")
        if len(name) < MIN_NAME_LENGTH:
            raise ValidationError(f"name must be at least {MIN_NAME_LENGTH} characters")
        role_set = parse_roles(roles)
        if self.name_exists(name, exclude_id=exclude_id):
            raise ConflictError("a feature with this name already exists")
        return name, role_set

    def create_feature(
        self,
        identity: Identity,
        name: str,
        roles,
        is_active: Optional[bool] = None,
    ) -> FeatureModel:
        """Create a feature (admin only)."""
        require_admin(identity, "create features")
        name, role_set = self._validate(name, roles)

        model = FeatureModel(
            name=name,
            is_active=True if is_active is None else is_active,
            role_links=[FeatureRoleModel(role=r) for r in sorted(role_set)],
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        logger.info("Created feature %s (id=%s, roles=%s)", name, model.id, sorted(role_set))
        return model

    def update_feature(
        self,
        identity: Identity,
        feature_id: int,
        name: str,
        roles,
        is_active: bool,
    ) -> FeatureModel:
        """Replace a feature's name, roles and active flag (admin only)."""
        require_admin(identity, "update features")
        model = self.get_feature(feature_id)
        name, role_set = self._validate(name, roles, exclude_id=feature_id)

        model.name = name
        model.is_active = is_active
        current = {link.role: link for link in model.role_links}
        for role in set(current) - role_set:
            model.role_links.remove(current[role])
        for role in sorted(role_set - set(current)):
            model.role_links.append(FeatureRoleModel(role=role))

        self.db.commit()
        self.db.refresh(model)
        logger.info("Updated feature id=%s", feature_id)
        return model

    def delete_feature(self, identity: Identity, feature_id: int) -> None:
        """Hard delete a feature (admin only)."""
        require_admin(identity, "delete features")
        model = self.get_feature(feature_id)
        in_use = (
            self.db.query(SubjectModel.id)
            .filter(SubjectModel.feature_id == feature_id)
            .first()
        )
        if in_use:
            raise ConflictError("feature still has subjects")
        if (
            self.db.query(CourseModel.id)
            .filter(CourseModel.feature_id == feature_id)
            .first()
        ):
            raise ConflictError("feature is still used by a bimbel")
        self.db.delete(model)
        self.db.commit()
        logger.info("Deleted feature id=%s", feature_id)
