from .posts import PostResolvers
from .users import UserResolvers, require_auth

__all__ = [
    "PostResolvers",
    "UserResolvers",
    "require_auth",
]
