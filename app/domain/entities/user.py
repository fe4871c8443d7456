from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    CUSTOMER = "customer"
    SELLER = "seller"
    DELIVERY_DRIVER = "delivery_driver"
    ADMIN = "admin"


@dataclass(frozen=True)
class User:
    id: str
    email: str
    password_hash: str | None
    full_name: str
    phone_number: str | None
    role: Role
    is_verified: bool
    google_id: str | None
    profile_picture_url: str | None
    email_verification_token: str | None
    email_verification_token_expires_at: datetime | None
    password_reset_token: str | None
    password_reset_token_expires_at: datetime | None
    restaurant_name: str | None
    restaurant_address: str | None
    vehicle_type: str | None
    license_plate: str | None
    created_at: datetime
    updated_at: datetime

    @property
    def has_password(self) -> bool:
        return bool(self.password_hash)

    @property
    def is_social_only(self) -> bool:
        return not self.password_hash and bool(self.google_id)
