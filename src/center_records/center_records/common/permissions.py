from __future__ import annotations

from ..core.enums import Role
from ..core.exceptions import AuthorizationError


def require_admin(current_role: Role) -> None:
    """Staff accounts are read-only; every mutation needs an admin."""
    if current_role != Role.ADMIN:
        raise AuthorizationError("Admin access required")
