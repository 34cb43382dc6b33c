"""
Access Guard
Turns a bearer token from the Authorization header into an authorization decision.
"""
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends, Request

from .. import config as tracker_config
from ..config import AuthConfig
from ..core.errors import InternalError, InvalidToken, Unauthorized
from ..core.logging import auth_logger

log = auth_logger().child("guard")


class AccessGuard:
    """Stateless verifier for admin bearer tokens."""

    def __init__(self, auth_config: Optional[AuthConfig] = None, leeway: int = 0):
        self.auth = auth_config or tracker_config.config.auth
        self.leeway = leeway

    @staticmethod
    def extract_bearer(header: Optional[str]) -> Optional[str]:
        """Return the token from a "Bearer <token>" header, or None."""
        if not header:
            return None
        parts = header.split()
        if len(parts) != 2 or parts[0].lower() != "bearer":
            return None
        return parts[1]

    def verify(self, token: Optional[str]) -> Dict[str, Any]:
        """
        Verify signature and expiry, returning the decoded claims.

        Raises:
            Unauthorized: no token
            InvalidToken: bad signature, expired, garbled, or not an admin token
        """
        if not token:
            raise Unauthorized()
        if not self.auth.jwt_secret:
            log.error("JWT_SECRET is not configured; cannot verify tokens")
            raise InternalError()

        try:
            claims = jwt.decode(
                token,
                self.auth.jwt_secret,
                algorithms=[self.auth.algorithm],
                leeway=self.leeway,
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError:
            log.info("Rejected expired token")
            raise InvalidToken()
        except jwt.InvalidTokenError as e:
            log.warning(f"Rejected invalid token: {type(e).__name__}")
            raise InvalidToken()

        if claims.get("isAdmin") is not True:
            log.warning("Rejected token without admin claim")
            raise InvalidToken()
        return claims

    def authorize(self, header: Optional[str]) -> Dict[str, Any]:
        """Extract and verify the bearer token from an Authorization header value."""
        return self.verify(self.extract_bearer(header))


def get_access_guard() -> AccessGuard:
    """FastAPI dependency; reads the config current at request time."""
    return AccessGuard(tracker_config.config.auth)


async def require_admin(
    request: Request,
    guard: AccessGuard = Depends(get_access_guard),
) -> Dict[str, Any]:
    """Dependency for mutating endpoints: fails with 401 unless the token is valid."""
    return guard.authorize(request.headers.get("Authorization"))
