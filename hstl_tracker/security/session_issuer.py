"""
Session Issuer
Checks the admin password and issues signed, time-limited bearer tokens.
"""
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import bcrypt
import jwt

from .. import config as tracker_config
from ..config import AuthConfig
from ..core.errors import InternalError, InvalidCredentials
from ..core.logging import auth_logger

log = auth_logger()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionIssuer:
    """
    Turns a plaintext admin password into a signed bearer token.

    No session state is kept: the token carries its own expiry and the
    server only ever checks its signature.
    """

    def __init__(
        self,
        auth_config: Optional[AuthConfig] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.auth = auth_config or tracker_config.config.auth
        self.clock = clock

    @property
    def ttl(self) -> timedelta:
        return timedelta(seconds=self.auth.token_ttl_seconds)

    def verify_password(self, password: str) -> bool:
        """Constant-time comparison of `password` against the stored hash."""
        if not self.auth.admin_password_hash:
            raise InternalError()
        try:
            # bcrypt only reads the first 72 bytes; newer releases refuse longer input
            return bcrypt.checkpw(
                password.encode("utf-8")[:72],
                self.auth.admin_password_hash.encode("utf-8"),
            )
        except ValueError as e:
            # bcrypt rejects a malformed stored hash
            log.error(f"Stored admin password hash is unusable: {type(e).__name__}")
            raise InternalError() from e

    def issue_token(self, now: Optional[datetime] = None) -> str:
        """Sign an admin token valid for the configured TTL."""
        if not self.auth.jwt_secret:
            raise InternalError()
        issued_at = now or self.clock()
        payload = {
            "isAdmin": True,
            "iat": issued_at,
            "exp": issued_at + self.ttl,
        }
        return jwt.encode(payload, self.auth.jwt_secret, algorithm=self.auth.algorithm)

    def login(self, password: Optional[str]) -> str:
        """
        Full login flow.

        Raises:
            InvalidCredentials: password missing or wrong
            InternalError: hash or signing secret unusable
        """
        if not isinstance(password, str) or not password:
            log.warning("Login rejected: no password supplied")
            raise InvalidCredentials()

        if not self.verify_password(password):
            log.warning("Login rejected: invalid password")
            raise InvalidCredentials()

        token = self.issue_token()
        log.info(f"Admin token issued (ttl={self.auth.token_ttl_seconds}s)")
        return token


def get_session_issuer() -> SessionIssuer:
    """FastAPI dependency; reads the config current at request time."""
    return SessionIssuer(tracker_config.config.auth)
