"""Bimbel (course) routes.

Create and update take multipart forms so the thumbnail can travel with the
other fields.
"""

from typing import Optional

from fastapi import APIRouter, File, Form, Query, UploadFile, status

from core.dependencies import CourseManagerDep, CurrentIdentity
from schemas.course import CourseDraft, CourseInfo, ThumbnailUpload
from schemas.response import success_response

router = APIRouter(prefix="/bimbels", tags=["Bimbel"])


async def _read_upload(file: Optional[UploadFile]) -> Optional[ThumbnailUpload]:
    if file is None or not file.filename:
        return None
    content = await file.read()
    return ThumbnailUpload(filename=file.filename, content=content)


@router.get("", summary="List bimbels visible to the caller")
def list_bimbels(
    identity: CurrentIdentity,
    course_manager: CourseManagerDep,
    tutor_id: Optional[int] = Query(default=None),
):
    courses = course_manager.list_courses(identity, tutor_id=tutor_id)
    return success_response(
        "bimbel list", [CourseInfo.model_validate(c) for c in courses]
    )


@router.post("", summary="Create a bimbel")
async def create_bimbel(
    identity: CurrentIdentity,
    course_manager: CourseManagerDep,
    name: str = Form(default=""),
    deskripsi: str = Form(default=""),
    harga: float = Form(default=0),
    feature_id: int = Form(default=0),
    subject_id: int = Form(default=0),
    limit_peserta: int = Form(default=0),
    tutor_id: Optional[int] = Form(default=None),
    thumbnail: Optional[UploadFile] = File(default=None, description="jpg, jpeg or png"),
):
    """Create a bimbel.

    Tutors always create for themselves; admins must pass ``tutor_id``.
    """
    draft = CourseDraft(
        name=name,
        deskripsi=deskripsi,
        harga=harga,
        feature_id=feature_id,
        subject_id=subject_id,
        limit_peserta=limit_peserta,
        tutor_id=tutor_id,
    )
    upload = await _read_upload(thumbnail)
    model = course_manager.create_course(identity, draft, upload)
    return success_response(
        "bimbel created",
        CourseInfo.model_validate(model),
        status_code=status.HTTP_201_CREATED,
    )


@router.put("/{bimbel_id}", summary="Update a bimbel")
async def update_bimbel(
    bimbel_id: int,
    identity: CurrentIdentity,
    course_manager: CourseManagerDep,
    name: str = Form(default=""),
    deskripsi: str = Form(default=""),
    harga: float = Form(default=0),
    feature_id: int = Form(default=0),
    subject_id: int = Form(default=0),
    limit_peserta: Optional[int] = Form(default=None),
    is_active: Optional[bool] = Form(default=None),
    thumbnail: Optional[UploadFile] = File(default=None),
):
    draft = CourseDraft(
        name=name,
        deskripsi=deskripsi,
        harga=harga,
        feature_id=feature_id,
        subject_id=subject_id,
        limit_peserta=limit_peserta,
        is_active=is_active,
    )
    upload = await _read_upload(thumbnail)
    model = course_manager.update_course(identity, bimbel_id, draft, upload)
    return success_response("bimbel updated", CourseInfo.model_validate(model))


@router.delete("/{bimbel_id}", summary="Delete a bimbel")
def delete_bimbel(
    bimbel_id: int,
    identity: CurrentIdentity,
    course_manager: CourseManagerDep,
):
    course_manager.delete_course(identity, bimbel_id)
    return success_response("bimbel deleted")


@router.get("/show/{bimbel_id}", summary="Bimbel detail")
def show_bimbel(
    bimbel_id: int,
    identity: CurrentIdentity,
    course_manager: CourseManagerDep,
):
    model = course_manager.get_course_for(identity, bimbel_id)
    return success_response("bimbel detail", CourseInfo.model_validate(model))
