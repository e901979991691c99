"""Shared constants for roles and token delivery."""

from __future__ import annotations

from datetime import timedelta
from enum import Enum
from typing import Final


class Role(str, Enum):
    """Authorization role carried by identities and embedded in token claims."""

    ADMIN = "admin"
    MANAGER = "manager"
    CUSTOMER = "customer"


# Cookie names used by the delivery channel
ACCESS_TOKEN_COOKIE: Final[str] = "accessToken"
REFRESH_TOKEN_COOKIE: Final[str] = "refreshToken"

# Default lifetimes (86 400 000 ms and 31 536 000 000 ms)
ACCESS_TOKEN_LIFETIME: Final[timedelta] = timedelta(days=1)
REFRESH_TOKEN_LIFETIME: Final[timedelta] = timedelta(days=365)

DEFAULT_ISSUER: Final[str] = "auth-service"
