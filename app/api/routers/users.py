from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.deps import (
    get_change_password_use_case,
    get_current_claims,
    get_get_profile_use_case,
    get_update_profile_use_case,
)
from app.api.routers.auth import user_response
from app.api.schemas.auth import MessageResponse
from app.api.schemas.users import ChangePasswordRequest, ProfileResponse, UpdateProfileRequest
from app.application.dto.auth import AccessTokenClaims, ChangePasswordInput
from app.application.dto.profile import ProfileOutput, UpdateProfileInput
from app.application.use_cases.change_password import ChangePasswordUseCase
from app.application.use_cases.manage_profile import GetProfileUseCase, UpdateProfileUseCase


router = APIRouter(prefix="/api/users", tags=["users"])


def _profile_response(output: ProfileOutput) -> ProfileResponse:
    return ProfileResponse(
        user=user_response(output.user),
        google_linked=output.google_linked,
        restaurant_name=output.restaurant_name,
        restaurant_address=output.restaurant_address,
        vehicle_type=output.vehicle_type,
        license_plate=output.license_plate,
    )


@router.get("/me", response_model=ProfileResponse)
def get_me(
    claims: AccessTokenClaims = Depends(get_current_claims),
    use_case: GetProfileUseCase = Depends(get_get_profile_use_case),
):
    return _profile_response(use_case.execute(user_id=claims.user_id))


@router.patch("/me", response_model=ProfileResponse)
def update_me(
    req: UpdateProfileRequest,
    claims: AccessTokenClaims = Depends(get_current_claims),
    use_case: UpdateProfileUseCase = Depends(get_update_profile_use_case),
):
    output = use_case.execute(
        UpdateProfileInput(
            user_id=claims.user_id,
            fields=req.model_dump(exclude_unset=True),
        )
    )
    return _profile_response(output)


@router.put("/me/password", response_model=MessageResponse)
def change_password(
    req: ChangePasswordRequest,
    claims: AccessTokenClaims = Depends(get_current_claims),
    use_case: ChangePasswordUseCase = Depends(get_change_password_use_case),
):
    output = use_case.execute(
        ChangePasswordInput(
            user_id=claims.user_id,
            current_password=req.current_password,
            new_password=req.new_password,
        )
    )
    return MessageResponse(message=output.message)
