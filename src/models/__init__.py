"""ORM models. Importing this package registers every table on Base.metadata."""

from .base import Base
from .user import ParticipantModel, TutorModel, UserModel
from .feature import FeatureModel, FeatureRoleModel
from .subject import SubjectModel
from .course import CourseModel

__all__ = [
    "Base",
    "UserModel",
    "TutorModel",
    "ParticipantModel",
    "FeatureModel",
    "FeatureRoleModel",
    "SubjectModel",
    "CourseModel",
]
