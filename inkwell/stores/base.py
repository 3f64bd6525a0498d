from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from ..types import Post, User


class UserStore(ABC):
    """Identity store. Lookups return None for unknown or malformed ids."""

    @abstractmethod
    async def get(self, user_id: str) -> Optional[User]:
        ...

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    async def create(self, email: str, password_hash: str, name: str) -> User:
        """Persist a new user.

        Raises:
            ConflictError: If the email is already registered.
        """

    @abstractmethod
    async def save(self, user: User) -> User:
        """Persist the mutable fields of an existing user (last write wins)."""


class PostStore(ABC):
    """Post store. ``populate`` resolves each post's creator inline."""

    @abstractmethod
    async def get(self, post_id: str, populate: bool = False) -> Optional[Post]:
        ...

    @abstractmethod
    async def get_many(self, post_ids: Sequence[str], populate: bool = False) -> List[Post]:
        """Fetch posts in the order of ``post_ids``, skipping unknown ids."""

    @abstractmethod
    async def create(self, title: str, content: str, image_url: str, creator_id: str) -> Post:
        ...

    @abstractmethod
    async def count(self) -> int:
        ...

    @abstractmethod
    async def list_page(self, skip: int, limit: int) -> List[Post]:
        """Posts ordered by creation time, newest first, creators populated."""

    @abstractmethod
    async def save(self, post: Post) -> Post:
        """Persist title, content and image of an existing post, advancing ``updated_at``.

        Raises:
            NotFoundError: If the post no longer exists.
        """

    @abstractmethod
    async def delete(self, post_id: str) -> bool:
        ...
