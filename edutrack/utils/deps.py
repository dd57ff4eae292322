from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError

from edutrack.core.config import settings
from edutrack.core.database import get_db
from edutrack.core.exceptions import UnauthorizedError
from edutrack.services.identity import clerk_client
from edutrack.utils.logger import setup_logger

logger = setup_logger("deps")

http_bearer = HTTPBearer(auto_error=False)

SESSION_COOKIE = "__session"

def get_identity_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer),
) -> Optional[str]:
    """Resolve the caller's external identity id from the session token, or None."""
    token = credentials.credentials if credentials else request.cookies.get(SESSION_COOKIE)
    if not token:
        return None
    if not settings.CLERK_JWT_KEY:
        logger.error("CLERK_JWT_KEY is not configured; rejecting session token")
        return None
    try:
        payload = jwt.decode(
            token, settings.CLERK_JWT_KEY, algorithms=[settings.CLERK_JWT_ALGORITHM]
        )
    except JWTError as exc:
        logger.info(f"Rejected session token: {exc}")
        return None
    identity_id = payload.get("sub")
    request.state.identity_id = identity_id
    return identity_id

def require_identity_id(identity_id: Optional[str] = Depends(get_identity_id)) -> str:
    if not identity_id:
        raise UnauthorizedError()
    return identity_id

def get_identity_provider():
    return clerk_client
