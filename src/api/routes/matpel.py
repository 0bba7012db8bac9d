"""Subject (matpel) routes."""

from fastapi import APIRouter, status

from core.dependencies import CurrentIdentity, SubjectManagerDep
from schemas.response import success_response
from schemas.subject import SubjectCreateRequest, SubjectInfo, SubjectUpdateRequest

router = APIRouter(prefix="/matpels", tags=["Matpel"])


@router.get("/show/{subject_id}", summary="Subject detail")
def show_subject(
    subject_id: int,
    identity: CurrentIdentity,
    subject_manager: SubjectManagerDep,
):
    model = subject_manager.get_subject(subject_id)
    return success_response("subject detail", SubjectInfo.model_validate(model))


@router.get("/{feature_id}", summary="List active subjects of a feature")
def list_subjects(
    feature_id: int,
    identity: CurrentIdentity,
    subject_manager: SubjectManagerDep,
):
    subjects = subject_manager.list_by_feature(feature_id)
    return success_response(
        f"subjects for feature {feature_id}",
        [SubjectInfo.model_validate(s) for s in subjects],
    )


@router.post("", summary="Create a subject")
def create_subject(
    req: SubjectCreateRequest,
    identity: CurrentIdentity,
    subject_manager: SubjectManagerDep,
):
    model = subject_manager.create_subject(
        identity, req.feature_id, req.name, req.deskripsi, req.is_active
    )
    return success_response(
        "subject created",
        SubjectInfo.model_validate(model),
        status_code=status.HTTP_201_CREATED,
    )


@router.put("/{subject_id}", summary="Update a subject")
def update_subject(
    subject_id: int,
    req: SubjectUpdateRequest,
    identity: CurrentIdentity,
    subject_manager: SubjectManagerDep,
):
    model = subject_manager.update_subject(
        identity, subject_id, req.feature_id, req.name, req.deskripsi, req.is_active
    )
    return success_response("subject updated", SubjectInfo.model_validate(model))


@router.delete("/{subject_id}", summary="Delete a subject")
def delete_subject(
    subject_id: int,
    identity: CurrentIdentity,
    subject_manager: SubjectManagerDep,
):
    subject_manager.delete_subject(identity, subject_id)
    return success_response("subject deleted")
