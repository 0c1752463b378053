"""
Authentication dependencies for FastAPI.

Callers present the platform-issued access token as
``Authorization: Bearer <jwt>``. The token subject is the user id; roles are
looked up from ``user_roles`` rather than trusted from the token.
"""

import logging
import uuid
from typing import Any

from fastapi import Depends, Header, HTTPException
from pydantic import BaseModel

from app import repo
from app.auth.security import decode_access_token
from app.config import DEV_MODE

logger = logging.getLogger(__name__)


class AuthErrorDetail(BaseModel):
    message: str = "unauthorized"
    reason: str
    trace_id: str


class AuthError(Exception):
    """Raised when authentication fails with detailed reason."""

    def __init__(self, reason: str, detail: str = "unauthorized"):
        self.reason = reason
        self.detail = detail
        self.trace_id = str(uuid.uuid4())
        super().__init__(detail)


def _log_auth_failure(
    reason: str,
    trace_id: str,
    token_prefix: str | None = None,
    payload: dict[str, Any] | None = None,
) -> None:
    log_data = {
        "trace_id": trace_id,
        "reason": reason,
        "token_prefix": token_prefix,
        "token_user_id": payload.get("sub") if payload else None,
    }
    logger.warning(f"[AUTH_FAILURE] {log_data}")


def _unauthorized(message: str, reason: str, trace_id: str, status_code: int = 401) -> HTTPException:
    detail: dict[str, Any]
    if DEV_MODE:
        detail = AuthErrorDetail(message=message, reason=reason, trace_id=trace_id).model_dump()
    else:
        detail = {"message": message, "trace_id": trace_id}
    return HTTPException(status_code=status_code, detail=detail)


def _extract_bearer(authorization: str | None) -> str:
    if not authorization:
        raise AuthError(reason="missing_token", detail="Authentication required")
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        raise AuthError(reason="malformed_token", detail="Invalid Authorization header")
    return parts[1].strip()


def get_current_user(
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> dict[str, Any]:
    try:
        token = _extract_bearer(authorization)
    except AuthError as e:
        _log_auth_failure(e.reason, e.trace_id)
        raise _unauthorized(e.detail, e.reason, e.trace_id)

    trace_id = str(uuid.uuid4())
    token_prefix = token[:8] + "..." if len(token) > 8 else token
    try:
        payload = decode_access_token(token)
    except HTTPException as e:
        reason = "token_expired" if "expired" in str(e.detail).lower() else "signature_invalid"
        _log_auth_failure(reason, trace_id, token_prefix)
        raise _unauthorized("unauthorized", reason, trace_id)

    user_id = str(payload.get("sub") or "").strip()
    if not user_id:
        _log_auth_failure("token_missing_subject", trace_id, token_prefix, payload)
        raise _unauthorized("unauthorized", "token_missing_subject", trace_id)

    logger.debug(f"[auth] token valid, sub={user_id}")
    return {
        "id": user_id,
        "email": payload.get("email"),
        "roles": repo.get_user_roles(user_id),
    }


def require_role(role: str):
    def _dep(current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
        if role not in (current_user.get("roles") or []):
            raise HTTPException(status_code=403, detail=f"{role} role required")
        return current_user

    return _dep


require_admin = require_role("admin")
