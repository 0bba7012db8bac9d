"""Subject (matpel) management utilities."""

import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from core.exceptions import (
    ConflictError,
    InvalidFeatureReferenceError,
    NotFoundError,
    ValidationError,
)
from models.course import CourseModel
from models.subject import SubjectModel
from schemas.user import Identity
from utils.access_policy import require_admin
from utils.feature_manager import FeatureManager

logger = logging.getLogger(__name__)


class SubjectManager:
    """Manages subjects belonging to features."""

    def __init__(self, db: Session):
        self.db = db
        self.features = FeatureManager(db)

    def list_by_feature(self, feature_id: int) -> List[SubjectModel]:
        return (
            self.db.query(SubjectModel)
            .filter(
                SubjectModel.feature_id == feature_id,
                SubjectModel.is_active.is_(True),
            )
            .order_by(SubjectModel.id)
            .all()
        )

    def get_subject(self, subject_id: int) -> SubjectModel:
        model = self.db.query(SubjectModel).filter(SubjectModel.id == subject_id).first()
        if not model:
            raise NotFoundError("subject not found")
        return model

    def name_exists(
        self, name: str, feature_id: int, exclude_id: Optional[int] = None
    ) -> bool:
        query = self.db.query(SubjectModel.id).filter(
            SubjectModel.feature_id == feature_id,
            func.lower(func.trim(SubjectModel.name)) == name.strip().lower(),
        )
        if exclude_id is not None:
            query = query.filter(SubjectModel.id != exclude_id)
        return query.first() is not None

    def _in_use(self, subject_id: int) -> bool:
        return (
            self.db.query(CourseModel.id)
            .filter(CourseModel.subject_id == subject_id)
            .first()
            is not None
        )

    def _validate(self, feature_id: int, name: str, exclude_id: Optional[int] = None) -> str:
        if not feature_id or not self.features.is_active_feature(feature_id):
            raise InvalidFeatureReferenceError()
        name = (name or "").strip()
        if not name:
            raise ValidationError("name is required")
        if self.name_exists(name, feature_id, exclude_id=exclude_id):
            raise ConflictError("a subject with this name already exists in this feature")
        return name

    def create_subject(
        self,
        identity: Identity,
        feature_id: int,
        name: str,
        deskripsi: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> SubjectModel:
        require_admin(identity, "create subjects")
        name = self._validate(feature_id, name)

        model = SubjectModel(
            feature_id=feature_id,
            name=name,
            deskripsi=deskripsi,
            is_active=True if is_active is None else is_active,
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        logger.info("Created subject %s (id=%s, feature=%s)", name, model.id, feature_id)
        return model

    def update_subject(
        self,
        identity: Identity,
        subject_id: int,
        feature_id: int,
        name: str,
        deskripsi: Optional[str],
        is_active: bool,
    ) -> SubjectModel:
        require_admin(identity, "update subjects")
        model = self.get_subject(subject_id)
        name = self._validate(feature_id, name, exclude_id=subject_id)
        # Courses keep their feature_id; the subject must stay under it
        if feature_id != model.feature_id and self._in_use(subject_id):
            raise ConflictError("subject is used by a bimbel and cannot change feature")

        model.feature_id = feature_id
        model.name = name
        model.deskripsi = deskripsi
        model.is_active = is_active
        self.db.commit()
        self.db.refresh(model)
        logger.info("Updated subject id=%s", subject_id)
        return model

    def delete_subject(self, identity: Identity, subject_id: int) -> None:
        require_admin(identity, "delete subjects")
        model = self.get_subject(subject_id)
        if self._in_use(subject_id):
            raise ConflictError("subject is still used by a bimbel")
        self.db.delete(model)
        self.db.commit()
        logger.info("Deleted subject id=%s", subject_id)
