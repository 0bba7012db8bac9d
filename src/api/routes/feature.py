"""Feature routes."""

from fastapi import APIRouter, status

from core.dependencies import CurrentIdentity, FeatureManagerDep
from schemas.feature import FeatureCreateRequest, FeatureInfo, FeatureUpdateRequest
from schemas.response import success_response

router = APIRouter(prefix="/features", tags=["Feature"])


@router.get("", summary="List features visible to the caller's role")
def list_features(identity: CurrentIdentity, feature_manager: FeatureManagerDep):
    features = feature_manager.list_for_role(identity.role)
    return success_response(
        f"features for role {identity.role.value}",
        [FeatureInfo.model_validate(f) for f in features],
    )


@router.post("", summary="Create a feature")
def create_feature(
    req: FeatureCreateRequest,
    identity: CurrentIdentity,
    feature_manager: FeatureManagerDep,
):
    model = feature_manager.create_feature(identity, req.name, req.roles, req.is_active)
    return success_response(
        "feature created",
        FeatureInfo.model_validate(model),
        status_code=status.HTTP_201_CREATED,
    )


@router.put("/{feature_id}", summary="Update a feature")
def update_feature(
    feature_id: int,
    req: FeatureUpdateRequest,
    identity: CurrentIdentity,
    feature_manager: FeatureManagerDep,
):
    model = feature_manager.update_feature(
        identity, feature_id, req.name, req.roles, req.is_active
    )
    return success_response("feature updated", FeatureInfo.model_validate(model))


@router.delete("/{feature_id}", summary="Delete a feature")
def delete_feature(
    feature_id: int,
    identity: CurrentIdentity,
    feature_manager: FeatureManagerDep,
):
    feature_manager.delete_feature(identity, feature_id)
    return success_response("feature deleted")


@router.get("/show/{feature_id}", summary="Feature detail")
def show_feature(
    feature_id: int,
    identity: CurrentIdentity,
    feature_manager: FeatureManagerDep,
):
    model = feature_manager.get_feature(feature_id)
    return success_response("feature detail", FeatureInfo.model_validate(model))
