"""
Identity at the API boundary

Bearer tokens are issued by the user service. They are verified once per
request and turned into a CurrentUser value that is passed explicitly into the
service layer.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from fulfillment.config import DEFAULT_JWT_SECRET, settings
from fulfillment.exceptions import AuthenticationError, AuthorizationError

logger = logging.getLogger(__name__)

ADMIN_ROLE = "ADMIN"

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    """Trusted identity claims for one request"""
    id: int
    role: str
    email: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


def decode_token(token: str, secret: str = None, algorithm: str = None) -> CurrentUser:
    """Verify a bearer token and extract the {sub, email, role} claims"""
    try:
        claims = jwt.decode(
            token,
            secret or settings.JWT_SECRET,
            algorithms=[algorithm or settings.JWT_ALGORITHM],
            # The user service issues numeric subjects
            options={"verify_sub": False},
        )
    except jwt.PyJWTError as e:
        logger.info("JWT verification failed: %s", e)
        raise AuthenticationError("Invalid or expired token")

    try:
        subject = claims["sub"]
        if isinstance(subject, bool):
            raise TypeError(subject)
        user_id = int(subject)
    except (KeyError, TypeError, ValueError):
        raise AuthenticationError("Token is missing a valid subject")

    return CurrentUser(
        id=user_id,
        role=str(claims.get("role") or "CUSTOMER").upper(),
        email=claims.get("email"),
    )


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> CurrentUser:
    """Dependency: require a valid bearer token"""
    if credentials is None:
        raise AuthenticationError("Authorization header missing")
    if credentials.scheme.lower() != "bearer":
        raise AuthenticationError("Invalid authorization header format")
    return decode_token(credentials.credentials)


def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Dependency: require the ADMIN role"""
    if not user.is_admin:
        raise AuthorizationError("Admin access required")
    return user


def ensure_owner_or_admin(user: CurrentUser, owner_id: int, message: str) -> None:
    if not user.is_admin and user.id != owner_id:
        raise AuthorizationError(message)


def uses_default_secret(secret: str = None) -> bool:
    """Warn when tokens are verified with the built-in development secret"""
    if (secret or settings.JWT_SECRET) != DEFAULT_JWT_SECRET:
        return False
    logger.warning("JWT_SECRET is the development default; set JWT_SECRET before deploying")
    return True
