# anchor/auth/middleware.py
"""
FastAPI dependency guarding the admin endpoints with a shared password.
"""

import hmac
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader

from anchor import config

ADMIN_HEADER = "X-Admin-Password"

admin_header = APIKeyHeader(name=ADMIN_HEADER, auto_error=False)


@dataclass
class AuthResult:
    """Result of authentication check."""
    authenticated: bool
    error: Optional[str] = None


async def require_admin(password: Optional[str] = Depends(admin_header)) -> AuthResult:
    """
    Dependency that requires the admin password header.

    Raises:
        HTTPException 503: If ADMIN_PASSWORD is not configured
        HTTPException 401: If the header is missing or wrong
    """
    expected = config.admin_password()
    if not expected:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Admin access not configured. Set ADMIN_PASSWORD.",
            headers={"X-Auth-Status": "not_configured"},
        )

    if not password:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin password required",
        )

    if not hmac.compare_digest(password.encode("utf-8"), expected.encode("utf-8")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin password",
        )

    return AuthResult(authenticated=True)
