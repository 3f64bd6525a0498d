from .base import PostStore, UserStore
from .mongo import MongoPostStore, MongoUserStore

__all__ = [
    "MongoPostStore",
    "MongoUserStore",
    "PostStore",
    "UserStore",
]
