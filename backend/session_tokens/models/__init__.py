from session_tokens.models.refresh_token import RefreshToken
from session_tokens.models.tenant import Tenant
from session_tokens.models.user import User

__all__ = [
    "RefreshToken",
    "Tenant",
    "User",
]
