"""
Bearer token authentication for FastAPI.

Tokens are HS256 JWTs issued by the learning platform. Claims used:
``sub`` (user id), ``lang`` (optional, default "en"), ``role`` (optional).
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

logger = logging.getLogger(__name__)

ALGO = "HS256"


@dataclass
class UserInfo:
    """Authenticated user information."""
    user_id: int
    language: str = "en"
    role: str = "user"


security = HTTPBearer(auto_error=False)


def _dev_mode() -> bool:
    return os.getenv("AUTH_DEV_MODE", "false").lower() == "true"


def _decode(token: str) -> dict:
    secret = os.getenv("JWT_SECRET")
    if not secret:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication service not available",
        )
    audience = os.getenv("JWT_AUDIENCE")
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[ALGO],
            audience=audience,
            issuer=os.getenv("JWT_ISSUER"),
            options={"verify_aud": bool(audience)},
        )
    except ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired",
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        )


def get_current_user(
    request: Request,
    cred: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> UserInfo:
    """
    FastAPI dependency that verifies the bearer token.

    In dev mode (AUTH_DEV_MODE=true) a request without a token is accepted;
    header X-Dev-User-Id selects the user (default 1).
    """
    if _dev_mode() and cred is None:
        dev_user = (request.headers.get("X-Dev-User-Id") or "1").strip()
        if not dev_user.isdigit() or int(dev_user) <= 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="X-Dev-User-Id must be a positive integer",
            )
        return UserInfo(
            user_id=int(dev_user),
            language=request.headers.get("Accept-Language", "en")[:2] or "en",
            role=request.headers.get("X-Dev-User-Role", "admin"),
        )

    if cred is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    claims = _decode(cred.credentials)
    try:
        user_id = int(claims["sub"])
    except (KeyError, TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has no valid subject",
        )

    return UserInfo(
        user_id=user_id,
        language=claims.get("lang") or "en",
        role=claims.get("role") or "user",
    )


def get_current_admin(
    user: UserInfo = Depends(get_current_user),
) -> UserInfo:
    """Dependency that requires admin role."""
    if user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user
