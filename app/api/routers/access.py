from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.deps import get_current_claims, require_roles
from app.api.schemas.users import AccessProbeResponse
from app.application.dto.auth import AccessTokenClaims
from app.domain.entities.user import Role


router = APIRouter(prefix="/api", tags=["access"])


def _probe(message: str, claims: AccessTokenClaims) -> AccessProbeResponse:
    return AccessProbeResponse(message=message, user_id=claims.user_id, role=claims.role.value)


@router.get("/protected", response_model=AccessProbeResponse)
def protected(claims: AccessTokenClaims = Depends(get_current_claims)):
    return _probe("Authenticated.", claims)


@router.get("/customer-only", response_model=AccessProbeResponse)
def customer_only(claims: AccessTokenClaims = Depends(require_roles(Role.CUSTOMER))):
    return _probe("Welcome, customer.", claims)


@router.get("/seller-only", response_model=AccessProbeResponse)
def seller_only(claims: AccessTokenClaims = Depends(require_roles(Role.SELLER))):
    return _probe("Welcome, seller.", claims)


@router.get("/admin-only", response_model=AccessProbeResponse)
def admin_only(claims: AccessTokenClaims = Depends(require_roles(Role.ADMIN))):
    return _probe("Welcome, admin.", claims)
