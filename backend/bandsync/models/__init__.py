from bandsync.models.refresh_token import RefreshToken
from bandsync.models.user import User

__all__ = [
    "RefreshToken",
    "User",
]
