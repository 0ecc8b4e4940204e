from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from regixo.core.exceptions import UnauthorizedError
from regixo.core.security import decode_token

# Organizer requests carry "Authorization: Bearer <token>"
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """The authenticated caller behind an organizer request."""

    user_id: str
    role: Optional[str] = None


def get_current_organizer(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Principal:
    """
    Validates the bearer token. If valid, returns the caller as a Principal.
    If missing or invalid, raises 401 Unauthorized.
    """
    if credentials is None:
        raise UnauthorizedError("Not authenticated")

    payload = decode_token(credentials.credentials)
    if not payload:
        raise UnauthorizedError()

    user_id = payload.get("sub")
    if not user_id:
        raise UnauthorizedError()

    return Principal(user_id=str(user_id), role=payload.get("role"))
