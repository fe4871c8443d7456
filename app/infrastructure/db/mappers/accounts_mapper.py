from __future__ import annotations

from typing import Any, Mapping

from app.domain.entities.refresh_token import RefreshToken
from app.domain.entities.user import Role, User


def _as_str(value: Any) -> str:
    return str(value)


def map_row_to_user(row: Mapping[str, Any]) -> User:
    return User(
        id=_as_str(row["id"]),
        email=row["email"],
        password_hash=row.get("password_hash"),
        full_name=row["full_name"],
        phone_number=row.get("phone_number"),
        role=Role(row["role"]),
        is_verified=bool(row["is_verified"]),
        google_id=row.get("google_id"),
        profile_picture_url=row.get("profile_picture_url"),
        email_verification_token=row.get("email_verification_token"),
        email_verification_token_expires_at=row.get("email_verification_token_expires_at"),
        password_reset_token=row.get("password_reset_token"),
        password_reset_token_expires_at=row.get("password_reset_token_expires_at"),
        restaurant_name=row.get("restaurant_name"),
        restaurant_address=row.get("restaurant_address"),
        vehicle_type=row.get("vehicle_type"),
        license_plate=row.get("license_plate"),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def map_row_to_refresh_token(row: Mapping[str, Any]) -> RefreshToken:
    return RefreshToken(
        token_id=row["token_id"],
        user_id=_as_str(row["user_id"]),
        expires_at=row["expires_at"],
        is_revoked=bool(row["is_revoked"]),
        created_at=row["created_at"],
    )
