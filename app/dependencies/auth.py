"""Authentication dependencies."""
from typing import Annotated, Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.config import settings
from app.core.security import identity_from_payload, verify_token

# HTTP Bearer token security scheme
security = HTTPBearer()


async def get_token_payload(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> dict[str, Any]:
    """Extract and verify the JWT token."""
    payload = verify_token(credentials.credentials)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload


async def get_current_identity(
    payload: Annotated[dict[str, Any], Depends(get_token_payload)],
) -> str:
    """Return the identity string of the caller."""
    identity = identity_from_payload(payload)
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity


async def get_admin_identity(
    payload: Annotated[dict[str, Any], Depends(get_token_payload)],
    identity: Annotated[str, Depends(get_current_identity)],
) -> str:
    """Ensure the caller is an admin: listed in settings.admin_emails or holding the admin role claim."""
    admin_emails = {email.strip().lower() for email in settings.admin_emails}
    if identity.lower() not in admin_emails and payload.get("role") != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions. Admin access required",
        )
    return identity


# Typed dependencies for use in route handlers
CurrentIdentityDep = Annotated[str, Depends(get_current_identity)]
AdminIdentityDep = Annotated[str, Depends(get_admin_identity)]
