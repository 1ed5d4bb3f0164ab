from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from app.db import get_db as _get_db
from app.errors import AuthenticationError, AuthorizationError
from app.models.user import User
from app.services.auth import decode_access_token


def _extract_bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1].strip()
    return None


def require_user_auth(
    request: Request = None,  # type: ignore[assignment]
    authorization: str | None = Header(default=None),
    db: Session = Depends(_get_db),
):
    token = _extract_bearer_token(authorization)
    if not token:
        raise AuthenticationError("Access token required")
    payload = decode_access_token(token)
    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError) as exc:
        raise AuthenticationError("Invalid token") from exc

    user = db.get(User, user_id)
    if not user or not user.is_active:
        raise AuthenticationError("User not found or inactive")

    if request is not None:
        request.state.actor_id = str(user.id)
        request.state.actor_type = "user"
    return {
        "user_id": user.id,
        "role": user.role.value,
        "company_id": user.company_id,
        "name": user.name,
    }


def require_role(*role_names: str):
    allowed = {name.lower() for name in role_names}

    def _require_role(auth=Depends(require_user_auth)):
        if str(auth.get("role") or "").lower() not in allowed:
            raise AuthorizationError("Insufficient permissions")
        return auth

    return _require_role
