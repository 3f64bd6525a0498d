"""Beanie Document models for Inkwell MongoDB collections."""

from datetime import datetime
from typing import List

import pymongo
from beanie import Document, Indexed, PydanticObjectId
from pydantic import Field

from .types import DEFAULT_STATUS, utcnow


class InkwellDocument(Document):
    """Base document class for Inkwell collections."""

    class Settings:
        use_cache = False


class UserDocument(InkwellDocument):
    """Registered user; ``posts`` holds the ids of the posts they own."""

    email: Indexed(str, unique=True)
    password: str
    name: str
    status: str = DEFAULT_STATUS
    posts: List[PydanticObjectId] = Field(default_factory=list)

    class Settings:
        name = "users"
        use_cache = False


class PostDocument(InkwellDocument):
    """Blog post owned by ``creator``."""

    title: str
    content: str
    image_url: str
    creator: Indexed(PydanticObjectId)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    class Settings:
        name = "posts"
        use_cache = False
        indexes = [
            [("created_at", pymongo.DESCENDING)],
        ]


DOCUMENT_MODELS = [UserDocument, PostDocument]

__all__ = [
    "DOCUMENT_MODELS",
    "InkwellDocument",
    "PostDocument",
    "UserDocument",
]
