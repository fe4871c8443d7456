from __future__ import annotations

import pytest

from app.application.dto.profile import UpdateProfileInput
from app.application.use_cases.manage_profile import GetProfileUseCase, UpdateProfileUseCase
from app.domain.entities.user import Role
from app.domain.exceptions import InvalidInputError, UserNotFoundError

from conftest import make_user


def test_get_profile_reports_google_link(auth_port):
    auth_port.add_user(make_user(google_id="google-sub-1", role=Role.SELLER, restaurant_name="Koshary Corner"))

    output = GetProfileUseCase(auth_port=auth_port).execute(user_id="user-1")

    assert output.google_linked is True
    assert output.user.role is Role.SELLER
    assert output.restaurant_name == "Koshary Corner"


def test_get_profile_unknown_user(auth_port):
    with pytest.raises(UserNotFoundError):
        GetProfileUseCase(auth_port=auth_port).execute(user_id="missing")


def test_update_profile_ignores_fields_outside_allow_list(auth_port):
    auth_port.add_user(make_user())
    use_case = UpdateProfileUseCase(auth_port=auth_port)

    output = use_case.execute(
        UpdateProfileInput(
            user_id="user-1",
            fields={"full_name": "Renamed", "role": "admin", "is_verified": False, "vehicle_type": "bike"},
        )
    )

    stored = auth_port.get_user_by_id(user_id="user-1")
    assert output.user.full_name == "Renamed"
    assert output.vehicle_type == "bike"
    assert stored.role is Role.CUSTOMER
    assert stored.is_verified is True


def test_update_profile_without_allowed_fields_is_rejected(auth_port):
    auth_port.add_user(make_user())

    with pytest.raises(InvalidInputError, match="No update data"):
        UpdateProfileUseCase(auth_port=auth_port).execute(UpdateProfileInput(user_id="user-1", fields={"role": "admin"}))


def test_update_profile_rejects_blank_name(auth_port):
    auth_port.add_user(make_user())

    with pytest.raises(InvalidInputError):
        UpdateProfileUseCase(auth_port=auth_port).execute(UpdateProfileInput(user_id="user-1", fields={"full_name": " "}))
