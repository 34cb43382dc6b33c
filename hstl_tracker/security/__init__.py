"""Security module initialization"""
from .access_guard import AccessGuard, require_admin
from .session_issuer import SessionIssuer

__all__ = ["AccessGuard", "SessionIssuer", "require_admin"]
