"""Pytest fixtures for Inkwell unit tests."""

from datetime import timedelta
from typing import Dict, List, Optional, Sequence

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from inkwell.config import InkwellSettings, reset_inkwell_config
from inkwell.errors import ConflictError, NotFoundError
from inkwell.resolvers import PostResolvers, UserResolvers
from inkwell.security import create_access_token, hash_password
from inkwell.service import InkwellService
from inkwell.stores import PostStore, UserStore
from inkwell.types import NO_IMAGE, AuthContext, Post, User, utcnow

TEST_PASSWORD = "secret-pw"


class InMemoryUserStore(UserStore):
    """Dict-backed UserStore. Returns copies so callers cannot mutate stored state."""

    def __init__(self):
        self.users: Dict[str, User] = {}

    def add(self, email: str, name: str = "Tester", password: str = TEST_PASSWORD) -> User:
        """Seed a user synchronously."""
        user = User(id=str(ObjectId()), email=email, password=hash_password(password, rounds=4), name=name)
        self.users[user.id] = user
        return user.model_copy(deep=True)

    async def get(self, user_id: str) -> Optional[User]:
        user = self.users.get(user_id)
        return user.model_copy(deep=True) if user else None

    async def get_by_email(self, email: str) -> Optional[User]:
        for user in self.users.values():
            if user.email == email:
                return user.model_copy(deep=True)
        return None

    async def create(self, email: str, password_hash: str, name: str) -> User:
        if any(user.email == email for user in self.users.values()):
            raise ConflictError("User already exists")
        user = User(id=str(ObjectId()), email=email, password=password_hash, name=name)
        self.users[user.id] = user
        return user.model_copy(deep=True)

    async def save(self, user: User) -> User:
        self.users[user.id] = user.model_copy(deep=True)
        return user.model_copy(deep=True)


class InMemoryPostStore(PostStore):
    """Dict-backed PostStore with strictly increasing creation times."""

    def __init__(self, users: InMemoryUserStore):
        self._users = users
        self.posts: Dict[str, Post] = {}
        self._last_created = None

    def _next_created_at(self):
        now = utcnow()
        if self._last_created is not None and now <= self._last_created:
            now = self._last_created + timedelta(milliseconds=1)
        self._last_created = now
        return now

    def add(self, creator: User, title: str = "A title", content: str = "Some content", image_url: str = NO_IMAGE) -> Post:
        """Seed a post synchronously and record it on its creator."""
        now = self._next_created_at()
        post = Post(
            id=str(ObjectId()),
            title=title,
            content=content,
            image_url=image_url,
            creator_id=creator.id,
            created_at=now,
            updated_at=now,
        )
        self.posts[post.id] = post
        self._users.users[creator.id].posts.append(post.id)
        return post.model_copy(deep=True)

    async def _copy(self, post: Post, populate: bool) -> Post:
        copy = post.model_copy(deep=True)
        copy.creator = await self._users.get(post.creator_id) if populate else None
        return copy

    async def get(self, post_id: str, populate: bool = False) -> Optional[Post]:
        post = self.posts.get(post_id)
        return await self._copy(post, populate) if post else None

    async def get_many(self, post_ids: Sequence[str], populate: bool = False) -> List[Post]:
        return [await self._copy(self.posts[post_id], populate) for post_id in post_ids if post_id in self.posts]

    async def create(self, title: str, content: str, image_url: str, creator_id: str) -> Post:
        now = self._next_created_at()
        post = Post(
            id=str(ObjectId()),
            title=title,
            content=content,
            image_url=image_url,
            creator_id=creator_id,
            created_at=now,
            updated_at=now,
        )
        self.posts[post.id] = post
        return post.model_copy(deep=True)

    async def count(self) -> int:
        return len(self.posts)

    async def list_page(self, skip: int, limit: int) -> List[Post]:
        ordered = sorted(self.posts.values(), key=lambda post: post.created_at, reverse=True)
        return [await self._copy(post, True) for post in ordered[skip : skip + limit]]

    async def save(self, post: Post) -> Post:
        if post.id not in self.posts:
            raise NotFoundError("No post found!")
        post.touch()
        stored = post.model_copy(deep=True)
        stored.creator = None
        self.posts[post.id] = stored
        return post

    async def delete(self, post_id: str) -> bool:
        return self.posts.pop(post_id, None) is not None


@pytest.fixture(autouse=True)
def reset_config():
    """Reset Inkwell config before each test to ensure clean state."""
    reset_inkwell_config()
    yield
    reset_inkwell_config()


@pytest.fixture
def settings(tmp_path):
    """Settings with a cheap bcrypt cost and temporary upload/log dirs."""
    return InkwellSettings(
        _env_file=None,
        JWT_SECRET="test-secret",
        BCRYPT_ROUNDS=4,
        UPLOAD_DIR=str(tmp_path / "images"),
        LOG_DIR=str(tmp_path / "logs"),
        LOG_LEVEL="DEBUG",
        GRAPHIQL=False,
    )


@pytest.fixture
def user_store():
    return InMemoryUserStore()


@pytest.fixture
def post_store(user_store):
    return InMemoryPostStore(user_store)


@pytest.fixture
def user_resolvers(user_store, settings):
    return UserResolvers(user_store, settings)


@pytest.fixture
def post_resolvers(post_store, user_store, settings):
    return PostResolvers(post_store, user_store, settings)


@pytest.fixture
def alice(user_store):
    return user_store.add("alice@mail.com", name="Alice")


@pytest.fixture
def bob(user_store):
    return user_store.add("bob@mail.com", name="Bob")


@pytest.fixture
def auth_for():
    """Build an authenticated AuthContext for a user."""

    def _auth_for(user: User) -> AuthContext:
        return AuthContext(is_auth=True, user_id=user.id, email=user.email)

    return _auth_for


@pytest.fixture
def service(settings, user_store, post_store):
    """InkwellService wired to the in-memory stores."""
    return InkwellService(settings=settings, users=user_store, posts=post_store)


@pytest.fixture
def client(service):
    with TestClient(service.app) as test_client:
        yield test_client


@pytest.fixture
def token_for(settings):
    """Build a bearer header for a user."""

    def _token_for(user: User) -> Dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.email, settings)}"}

    return _token_for
