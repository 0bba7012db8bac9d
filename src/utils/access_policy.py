"""Role and ownership rules shared by the catalog managers."""

from core.exceptions import ForbiddenError, UnauthorizedError
from schemas.user import Identity


def require_admin(identity: Identity, action: str) -> None:
    """Raise ForbiddenError unless the caller is an admin.

    Args:
        identity: Authenticated caller.
        action: Short description used in the error message, e.g. "create features".
    """
    if not identity.is_admin:
        raise ForbiddenError(f"forbidden: only admin can {action}")


def ensure_course_owner(identity: Identity, caller_tutor_id, course_tutor_id: int) -> None:
    """Tutors may only touch their own courses; admins bypass the check."""
    if identity.is_tutor and course_tutor_id != caller_tutor_id:
        raise UnauthorizedError("unauthorized: course belongs to another tutor")
