from __future__ import annotations

from typing import Any

from app.application.dto.profile import ProfileOutput, UpdateProfileInput
from app.application.ports.auth_port import AuthPort
from app.domain.entities.user import User
from app.domain.exceptions import InvalidInputError, UserNotFoundError

from .auth_common import build_auth_user_output, utcnow


# Every profile field a user may change, mapped to its users column.
PROFILE_FIELD_COLUMNS: dict[str, str] = {
    "full_name": "full_name",
    "phone_number": "phone_number",
    "profile_picture_url": "profile_picture_url",
    "restaurant_name": "restaurant_name",
    "restaurant_address": "restaurant_address",
    "vehicle_type": "vehicle_type",
    "license_plate": "license_plate",
}


def build_profile_output(user: User) -> ProfileOutput:
    return ProfileOutput(
        user=build_auth_user_output(user),
        google_linked=bool(user.google_id),
        restaurant_name=user.restaurant_name,
        restaurant_address=user.restaurant_address,
        vehicle_type=user.vehicle_type,
        license_plate=user.license_plate,
    )


class GetProfileUseCase:
    def __init__(self, *, auth_port: AuthPort):
        self._auth_port = auth_port

    def execute(self, *, user_id: str) -> ProfileOutput:
        user = self._auth_port.get_user_by_id(user_id=user_id)
        if user is None:
            raise UserNotFoundError("User not found.")
        return build_profile_output(user)


class UpdateProfileUseCase:
    def __init__(self, *, auth_port: AuthPort):
        self._auth_port = auth_port

    def execute(self, command: UpdateProfileInput) -> ProfileOutput:
        values: dict[str, Any] = {
            PROFILE_FIELD_COLUMNS[field]: value
            for field, value in command.fields.items()
            if field in PROFILE_FIELD_COLUMNS
        }
        if not values:
            raise InvalidInputError("No update data provided.")
        if "full_name" in values and not (values["full_name"] or "").strip():
            raise InvalidInputError("full_name cannot be empty.")

        user = self._auth_port.update_profile_columns(user_id=command.user_id, values=values, now=utcnow())
        if user is None:
            raise UserNotFoundError("User not found.")
        return build_profile_output(user)
