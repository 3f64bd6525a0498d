import asyncio
from typing import Dict, List, Optional, Sequence

from beanie import PydanticObjectId
from beanie.operators import In
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from ..documents import PostDocument, UserDocument
from ..errors import ConflictError, NotFoundError
from ..types import Post, User, as_utc, utcnow
from .base import PostStore, UserStore


def _object_id(value: str) -> Optional[PydanticObjectId]:
    if not value or not ObjectId.is_valid(value):
        return None
    return PydanticObjectId(value)


class MongoUserStore(UserStore):
    """UserStore backed by the ``users`` collection."""

    @staticmethod
    def _to_model(doc: UserDocument) -> User:
        return User(
            id=str(doc.id),
            email=doc.email,
            password=doc.password,
            name=doc.name,
            status=doc.status,
            posts=[str(post_id) for post_id in doc.posts],
        )

    async def get(self, user_id: str) -> Optional[User]:
        oid = _object_id(user_id)
        if oid is None:
            return None
        doc = await UserDocument.get(oid)
        return self._to_model(doc) if doc else None

    async def get_by_email(self, email: str) -> Optional[User]:
        doc = await UserDocument.find_one(UserDocument.email == email)
        return self._to_model(doc) if doc else None

    async def create(self, email: str, password_hash: str, name: str) -> User:
        doc = UserDocument(email=email, password=password_hash, name=name)
        try:
            await doc.insert()
        except DuplicateKeyError as e:
            raise ConflictError("User already exists") from e
        return self._to_model(doc)

    async def save(self, user: User) -> User:
        doc = UserDocument(
            id=PydanticObjectId(user.id),
            email=user.email,
            password=user.password,
            name=user.name,
            status=user.status,
            posts=[PydanticObjectId(post_id) for post_id in user.posts],
        )
        await doc.save()
        return self._to_model(doc)


class MongoPostStore(PostStore):
    """PostStore backed by the ``posts`` collection.

    Creators are populated through the injected UserStore.
    """

    def __init__(self, users: UserStore):
        self._users = users

    @staticmethod
    def _to_model(doc: PostDocument) -> Post:
        return Post(
            id=str(doc.id),
            title=doc.title,
            content=doc.content,
            image_url=doc.image_url,
            creator_id=str(doc.creator),
            created_at=as_utc(doc.created_at),
            updated_at=as_utc(doc.updated_at),
        )

    async def _populate(self, posts: List[Post]) -> List[Post]:
        creator_ids = sorted({post.creator_id for post in posts})
        creators = await asyncio.gather(*(self._users.get(creator_id) for creator_id in creator_ids))
        by_id: Dict[str, Optional[User]] = dict(zip(creator_ids, creators))
        for post in posts:
            post.creator = by_id.get(post.creator_id)
        return posts

    async def get(self, post_id: str, populate: bool = False) -> Optional[Post]:
        oid = _object_id(post_id)
        if oid is None:
            return None
        doc = await PostDocument.get(oid)
        if doc is None:
            return None
        post = self._to_model(doc)
        if populate:
            await self._populate([post])
        return post

    async def get_many(self, post_ids: Sequence[str], populate: bool = False) -> List[Post]:
        oids = [oid for oid in (_object_id(post_id) for post_id in post_ids) if oid is not None]
        if not oids:
            return []
        docs = await PostDocument.find(In(PostDocument.id, oids)).to_list()
        by_id = {str(doc.id): self._to_model(doc) for doc in docs}
        posts = [by_id[post_id] for post_id in post_ids if post_id in by_id]
        return await self._populate(posts) if populate else posts

    async def create(self, title: str, content: str, image_url: str, creator_id: str) -> Post:
        now = utcnow()
        doc = PostDocument(
            title=title,
            content=content,
            image_url=image_url,
            creator=PydanticObjectId(creator_id),
            created_at=now,
            updated_at=now,
        )
        await doc.insert()
        return self._to_model(doc)

    async def count(self) -> int:
        return await PostDocument.find_all().count()

    async def list_page(self, skip: int, limit: int) -> List[Post]:
        docs = (
            await PostDocument.find_all()
            .sort(-PostDocument.created_at, -PostDocument.id)
            .skip(skip)
            .limit(limit)
            .to_list()
        )
        return await self._populate([self._to_model(doc) for doc in docs])

    async def save(self, post: Post) -> Post:
        oid = _object_id(post.id)
        doc = await PostDocument.get(oid) if oid is not None else None
        if doc is None:
            raise NotFoundError("No post found!")
        post.touch()
        doc.title = post.title
        doc.content = post.content
        doc.image_url = post.image_url
        doc.updated_at = post.updated_at
        await doc.save()
        return post

    async def delete(self, post_id: str) -> bool:
        oid = _object_id(post_id)
        if oid is None:
            return False
        doc = await PostDocument.get(oid)
        if doc is None:
            return False
        await doc.delete()
        return True
