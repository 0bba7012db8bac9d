"""Course (bimbel) management utilities.

This module validates and persists bimbels, applies the tutor ownership
rules, and keeps stored thumbnails in step with the database rows.
"""

import logging
import math
from datetime import datetime
from typing import List, Optional

import pytz
from sqlalchemy import func
from sqlalchemy.orm import Session

from core.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidFeatureReferenceError,
    NotATutorError,
    NotFoundError,
    UserNotFoundError,
    ValidationError,
)
from models.course import CourseModel
from schemas.course import CourseDraft, ThumbnailUpload
from schemas.user import Identity, Role
from utils.access_policy import ensure_course_owner
from utils.feature_manager import FeatureManager
from utils.subject_manager import SubjectManager
from utils.thumbnail_storage import ThumbnailStorage
from utils.user_manager import UserManager

logger = logging.getLogger(__name__)


class CourseManager:
    """Manages bimbel operations using SQLAlchemy and the thumbnail store."""

    def __init__(self, db: Session, storage: ThumbnailStorage):
        """Initialize CourseManager.

        Args:
            db: SQLAlchemy Session.
            storage: Where thumbnails are written and removed.
        """
        self.db = db
        self.storage = storage
        self.users = UserManager(db)
        self.features = FeatureManager(db)
        self.subjects = SubjectManager(db)

    # --- lookups ---

    def _live_courses(self):
        return self.db.query(CourseModel).filter(CourseModel.deleted_at.is_(None))

    def get_course(self, course_id: int) -> CourseModel:
        model = self._live_courses().filter(CourseModel.id == course_id).first()
        if not model:
            raise NotFoundError("bimbel not found")
        return model

    def name_exists_for_tutor(self, name: str, tutor_id: int) -> bool:
        return (
            self._live_courses()
            .filter(
                CourseModel.tutor_id == tutor_id,
                func.lower(func.trim(CourseModel.name)) == name.strip().lower(),
            )
            .first()
            is not None
        )

    def name_exists_in_catalog(
        self,
        name: str,
        feature_id: int,
        subject_id: int,
        exclude_id: Optional[int] = None,
    ) -> bool:
        query = self._live_courses().filter(
            CourseModel.feature_id == feature_id,
            CourseModel.subject_id == subject_id,
            func.lower(func.trim(CourseModel.name)) == name.strip().lower(),
        )
        if exclude_id is not None:
            query = query.filter(CourseModel.id != exclude_id)
        return query.first() is not None

    # --- rules ---

    def caller_tutor_id(self, identity: Identity) -> Optional[int]:
        """Return the caller's linked tutor id, or None for non-tutors.

        Raises:
            NotATutorError: If a tutor account has no linked tutor record.
        """
        if not identity.is_tutor:
            return None
        try:
            user = self.users.find_linked_identity(identity.user_id)
        except UserNotFoundError as e:
            raise NotATutorError() from e
        if user.tutor_id is None:
            raise NotATutorError()
        return user.tutor_id

    def _resolve_owner(self, identity: Identity, draft: CourseDraft) -> int:
        if identity.role == Role.TUTOR:
            # Any tutor_id sent by the client is ignored
            return self.caller_tutor_id(identity)
        if identity.role == Role.ADMIN:
            if not draft.tutor_id:
                raise ValidationError("tutor_id is required for admin")
            if not self.users.tutor_exists(draft.tutor_id):
                raise ValidationError("tutor_id not found")
            return draft.tutor_id
        raise ForbiddenError("role is not allowed to create bimbels")

    @staticmethod
    def _require_fields(draft: CourseDraft) -> None:
        missing = (
            not (draft.name or "").strip()
            or not (draft.deskripsi or "").strip()
            or draft.harga is None
            or not math.isfinite(draft.harga)
            or draft.harga <= 0
            or not draft.subject_id
            or not draft.feature_id
        )
        if missing:
            raise ValidationError(
                "name, deskripsi, harga, feature_id and subject_id are required"
            )

    def _check_catalog(self, feature_id: int, subject_id: int) -> None:
        if not self.features.is_active_feature(feature_id):
            raise InvalidFeatureReferenceError()
        try:
            subject = self.subjects.get_subject(subject_id)
        except NotFoundError as e:
            raise ValidationError("subject_id not found") from e
        if not subject.is_active or subject.feature_id != feature_id:
            raise ValidationError("subject_id is inactive or not part of this feature")

    def _require_mutator(self, identity: Identity, model: CourseModel) -> None:
        if identity.role not in (Role.ADMIN, Role.TUTOR):
            raise ForbiddenError("role is not allowed to modify bimbels")
        ensure_course_owner(identity, self.caller_tutor_id(identity), model.tutor_id)

    # --- operations ---

    def create_course(
        self,
        identity: Identity,
        draft: CourseDraft,
        thumbnail: Optional[ThumbnailUpload],
    ) -> CourseModel:
        """Create a bimbel.

        The thumbnail is written first; if any later check or the insert
        fails, the file is removed again before the error propagates.

        Returns:
            Created CourseModel.
        """
        if thumbnail is None:
            raise ValidationError("thumbnail is required")
        reference = self.storage.save(thumbnail.filename, thumbnail.content)

        try:
            self._require_fields(draft)
            tutor_id = self._resolve_owner(identity, draft)
            self._check_catalog(draft.feature_id, draft.subject_id)

            name = draft.name.strip()
            if self.name_exists_for_tutor(name, tutor_id):
                raise ConflictError("bimbel name is already used")

            model = CourseModel(
                tutor_id=tutor_id,
                feature_id=draft.feature_id,
                subject_id=draft.subject_id,
                name=name,
                deskripsi=draft.deskripsi.strip(),
                harga=draft.harga,
                limit_peserta=draft.limit_peserta or 0,
                thumbnail=reference,
                is_active=True if draft.is_active is None else draft.is_active,
            )
            self.db.add(model)
            self.db.commit()
        except Exception:
            self.db.rollback()
            self.storage.remove(reference)
            raise

        self.db.refresh(model)
        logger.info("Created bimbel %s (id=%s, tutor=%s)", model.name, model.id, tutor_id)
        return model

    def update_course(
        self,
        identity: Identity,
        course_id: int,
        draft: CourseDraft,
        thumbnail: Optional[ThumbnailUpload] = None,
    ) -> CourseModel:
        """Update a bimbel owned by the caller (or any bimbel for admins).

        A replacement thumbnail is saved before the row is touched; the old
        file is deleted only after the new one is saved and committed.
        """
        model = self.get_course(course_id)
        self._require_mutator(identity, model)

        if not draft.feature_id:
            draft.feature_id = model.feature_id
        self._require_fields(draft)
        self._check_catalog(draft.feature_id, draft.subject_id)

        name = draft.name.strip()
        if self.name_exists_in_catalog(
            name, draft.feature_id, draft.subject_id, exclude_id=course_id
        ):
            raise ConflictError("duplicate bimbel name for this feature and subject")

        old_reference = model.thumbnail
        new_reference = None
        if thumbnail is not None:
            new_reference = self.storage.save(thumbnail.filename, thumbnail.content)

        try:
            model.feature_id = draft.feature_id
            model.subject_id = draft.subject_id
            model.name = name
            model.deskripsi = draft.deskripsi.strip()
            model.harga = draft.harga
            if draft.limit_peserta is not None:
                model.limit_peserta = draft.limit_peserta
            if draft.is_active is not None:
                model.is_active = draft.is_active
            if new_reference:
                model.thumbnail = new_reference
            self.db.commit()
        except Exception:
            self.db.rollback()
            if new_reference:
                self.storage.remove(new_reference)
            raise

        if new_reference and old_reference:
            self.storage.remove(old_reference)

        self.db.refresh(model)
        logger.info("Updated bimbel id=%s", course_id)
        return model

    def delete_course(self, identity: Identity, course_id: int) -> None:
        """Soft delete a bimbel."""
        model = self.get_course(course_id)
        self._require_mutator(identity, model)
        model.deleted_at = datetime.now(pytz.utc)
        self.db.commit()
        logger.info("Soft deleted bimbel id=%s", course_id)

    def get_course_for(self, identity: Identity, course_id: int) -> CourseModel:
        """Read one bimbel, applying the tutor ownership rule."""
        model = self.get_course(course_id)
        if identity.is_tutor:
            ensure_course_owner(identity, self.caller_tutor_id(identity), model.tutor_id)
        return model

    def list_courses(
        self, identity: Identity, tutor_id: Optional[int] = None
    ) -> List[CourseModel]:
        """List live bimbels visible to the caller.

        Tutors see their own, admins see all (optionally for one tutor),
        participants see active ones.
        """
        query = self._live_courses()
        if identity.is_tutor:
            query = query.filter(CourseModel.tutor_id == self.caller_tutor_id(identity))
        elif identity.is_admin:
            if tutor_id:
                query = query.filter(CourseModel.tutor_id == tutor_id)
        else:
            query = query.filter(CourseModel.is_active.is_(True))
            if tutor_id:
                query = query.filter(CourseModel.tutor_id == tutor_id)
        return query.order_by(CourseModel.id).all()
