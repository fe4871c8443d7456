from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from app.application.dto.auth import AuthUserOutput


@dataclass(frozen=True)
class ProfileOutput:
    user: AuthUserOutput
    google_linked: bool
    restaurant_name: str | None
    restaurant_address: str | None
    vehicle_type: str | None
    license_plate: str | None


@dataclass(frozen=True)
class UpdateProfileInput:
    user_id: str
    fields: dict[str, Any]
