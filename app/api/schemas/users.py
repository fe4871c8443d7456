from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from app.api.schemas.auth import AuthUserResponse


class ProfileResponse(BaseModel):
    user: AuthUserResponse
    google_linked: bool
    restaurant_name: str | None = None
    restaurant_address: str | None = None
    vehicle_type: str | None = None
    license_plate: str | None = None


class UpdateProfileRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    full_name: str | None = Field(default=None, max_length=120, alias="fullName")
    phone_number: str | None = Field(default=None, max_length=32, alias="phoneNumber")
    profile_picture_url: str | None = Field(default=None, max_length=2048, alias="profilePictureUrl")
    restaurant_name: str | None = Field(default=None, max_length=255, alias="restaurantName")
    restaurant_address: str | None = Field(default=None, max_length=500, alias="restaurantAddress")
    vehicle_type: str | None = Field(default=None, max_length=64, alias="vehicleType")
    license_plate: str | None = Field(default=None, max_length=32, alias="licensePlate")


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(..., min_length=1, max_length=256, alias="currentPassword")
    new_password: str = Field(..., min_length=1, max_length=256, alias="newPassword")


class AccessProbeResponse(BaseModel):
    message: str
    user_id: str
    role: str
