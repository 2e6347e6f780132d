# core/__init__.py
from .config import settings
from .security import (
    hash_password,
    verify_password,
    create_access_token,
    create_refresh_token,
    decode_token,
)
from .errors import AppError, ErrorCode

__all__ = [
    "settings",
    "hash_password",
    "verify_password",
    "create_access_token",
    "create_refresh_token",
    "decode_token",
    "AppError",
    "ErrorCode",
]
