from __future__ import annotations

from typing import Iterable

from app.domain.entities.user import Role


def has_role(role: Role | str, allowed_roles: Iterable[Role | str]) -> bool:
    value = role.value if isinstance(role, Role) else role
    allowed = {r.value if isinstance(r, Role) else r for r in allowed_roles}
    return value in allowed
