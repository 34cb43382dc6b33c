"""Core module initialization"""
from .errors import (
    TrackerError,
    ValidationError,
    Unauthorized,
    InvalidCredentials,
    InvalidToken,
    MethodNotAllowed,
    InternalError,
    StoreError,
)

__all__ = [
    "TrackerError",
    "ValidationError",
    "Unauthorized",
    "InvalidCredentials",
    "InvalidToken",
    "MethodNotAllowed",
    "InternalError",
    "StoreError",
]
