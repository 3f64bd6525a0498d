"""Domain models shared by stores, resolvers and the API surface."""

from datetime import UTC, datetime
from typing import List, Optional

from pydantic import BaseModel, Field

# Image reference stored when a client submits a post without an image.
NO_IMAGE = "undefined"

DEFAULT_STATUS = "I am new!"


def utcnow() -> datetime:
    """Current UTC time truncated to the millisecond precision MongoDB stores."""
    now = datetime.now(UTC)
    return now.replace(microsecond=now.microsecond - now.microsecond % 1000)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (as returned by a non tz-aware Mongo client)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def to_iso(value: datetime) -> str:
    """Render a timestamp as ISO-8601 with millisecond precision and a ``Z`` suffix."""
    return as_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class User(BaseModel):
    """A registered user. ``password`` holds the bcrypt hash, never plaintext."""

    id: str
    email: str
    password: str
    name: str
    status: str = DEFAULT_STATUS
    posts: List[str] = Field(default_factory=list)


class Post(BaseModel):
    """A blog post owned by ``creator_id``; ``creator`` is set when populated."""

    id: str
    title: str
    content: str
    image_url: str
    creator_id: str
    creator: Optional[User] = None
    created_at: datetime
    updated_at: datetime

    def touch(self) -> None:
        """Advance ``updated_at`` without ever moving it backwards."""
        self.updated_at = max(utcnow(), as_utc(self.updated_at), as_utc(self.created_at))


class AuthContext(BaseModel):
    """Identity attached to a request by the authentication gate."""

    is_auth: bool = False
    user_id: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def anonymous(cls) -> "AuthContext":
        return cls()


class AuthData(BaseModel):
    token: str
    user_id: str


class PostPage(BaseModel):
    posts: List[Post]
    total_posts: int


class UserInput(BaseModel):
    email: str
    name: str
    password: str


class PostInput(BaseModel):
    title: str
    content: str
    image_url: str = NO_IMAGE
