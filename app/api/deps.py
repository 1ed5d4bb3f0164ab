from fastapi import Depends

from app.db import get_db
from app.models.user import UserRole
from app.services.auth_dependencies import require_role, require_user_auth


def get_current_user(auth=Depends(require_user_auth)):
    """Get current authenticated user info.

    Returns a dict with user_id, role, company_id and name.
    """
    return auth


require_admin = require_role(UserRole.admin.value)


__all__ = [
    "get_db",
    "get_current_user",
    "require_admin",
    "require_role",
    "require_user_auth",
]
