"""GraphQL surface: types, queries, mutations and error formatting."""

from typing import Any, Dict, List, Optional

import strawberry
from graphql import GraphQLError
from starlette.requests import Request
from strawberry.fastapi import BaseContext, GraphQLRouter
from strawberry.http import GraphQLHTTPResponse
from strawberry.types import ExecutionResult, Info

from .errors import InkwellError
from .logger import get_logger
from .resolvers import PostResolvers, UserResolvers
from .stores import PostStore
from .types import NO_IMAGE, AuthContext, Post, PostInput, User, UserInput, to_iso

logger = get_logger("graphql")


class InkwellContext(BaseContext):
    """Per-request context: the caller's identity and the resolver layer."""

    def __init__(self, auth: AuthContext, users: UserResolvers, posts: PostResolvers, post_store: PostStore):
        super().__init__()
        self.auth = auth
        self.users = users
        self.posts = posts
        self.post_store = post_store


@strawberry.type(name="User")
class UserType:
    id: strawberry.ID = strawberry.field(name="_id")
    name: str
    email: str
    status: str
    post_ids: strawberry.Private[List[str]]

    @strawberry.field
    async def posts(self, info: Info[InkwellContext, None]) -> List["PostType"]:
        posts = await info.context.post_store.get_many(self.post_ids, populate=True)
        return [PostType.from_model(post) for post in posts]

    @classmethod
    def from_model(cls, user: User) -> "UserType":
        return cls(
            id=strawberry.ID(user.id),
            name=user.name,
            email=user.email,
            status=user.status,
            post_ids=list(user.posts),
        )


@strawberry.type(name="Post")
class PostType:
    id: strawberry.ID = strawberry.field(name="_id")
    title: str
    content: str
    image_url: str
    creator: Optional[UserType]
    created_at: str
    updated_at: str

    @classmethod
    def from_model(cls, post: Post) -> "PostType":
        return cls(
            id=strawberry.ID(post.id),
            title=post.title,
            content=post.content,
            image_url=post.image_url,
            creator=UserType.from_model(post.creator) if post.creator else None,
            created_at=to_iso(post.created_at),
            updated_at=to_iso(post.updated_at),
        )


@strawberry.type(name="AuthData")
class AuthDataType:
    token: str
    user_id: str


@strawberry.type(name="PostData")
class PostDataType:
    posts: List[PostType]
    total_posts: int


@strawberry.input(name="UserInputData")
class UserInputData:
    email: str
    name: str
    password: str


@strawberry.input(name="PostInputData")
class PostInputData:
    title: str
    content: str
    image_url: str = NO_IMAGE

    def to_model(self) -> PostInput:
        return PostInput(title=self.title, content=self.content, image_url=self.image_url)


@strawberry.type
class Query:
    @strawberry.field
    async def login(self, info: Info[InkwellContext, None], email: str, password: str) -> AuthDataType:
        data = await info.context.users.login(email, password)
        return AuthDataType(token=data.token, user_id=data.user_id)

    @strawberry.field
    async def posts(self, info: Info[InkwellContext, None], page: Optional[int] = None) -> PostDataType:
        result = await info.context.posts.posts_page(page, info.context.auth)
        return PostDataType(
            posts=[PostType.from_model(post) for post in result.posts],
            total_posts=result.total_posts,
        )

    @strawberry.field
    async def post(self, info: Info[InkwellContext, None], id: strawberry.ID) -> PostType:
        post = await info.context.posts.post(str(id), info.context.auth)
        return PostType.from_model(post)

    @strawberry.field
    async def user(self, info: Info[InkwellContext, None]) -> UserType:
        user = await info.context.users.user(info.context.auth)
        return UserType.from_model(user)


@strawberry.type
class Mutation:
    @strawberry.mutation
    async def create_user(self, info: Info[InkwellContext, None], user_input: UserInputData) -> UserType:
        user = await info.context.users.create_user(
            UserInput(email=user_input.email, name=user_input.name, password=user_input.password)
        )
        return UserType.from_model(user)

    @strawberry.mutation
    async def create_post(self, info: Info[InkwellContext, None], post_input: PostInputData) -> PostType:
        post = await info.context.posts.create_post(post_input.to_model(), info.context.auth)
        return PostType.from_model(post)

    @strawberry.mutation
    async def update_post(
        self, info: Info[InkwellContext, None], id: strawberry.ID, post_input: PostInputData
    ) -> PostType:
        post = await info.context.posts.update_post(str(id), post_input.to_model(), info.context.auth)
        return PostType.from_model(post)

    @strawberry.mutation
    async def delete_post(self, info: Info[InkwellContext, None], id: strawberry.ID) -> bool:
        return await info.context.posts.delete_post(str(id), info.context.auth)

    @strawberry.mutation
    async def update_status(self, info: Info[InkwellContext, None], status: str) -> UserType:
        user = await info.context.users.update_status(status, info.context.auth)
        return UserType.from_model(user)


def format_error(error: GraphQLError) -> Dict[str, Any]:
    """Reshape a GraphQL error into ``{message, status, data}``.

    Errors raised by the GraphQL engine itself (syntax, validation) keep their
    standard shape.
    """
    original = error.original_error
    if original is None:
        return error.formatted
    if isinstance(original, InkwellError):
        body = original.to_dict()
    else:
        body = {"message": error.message or "An error occurred.", "status": 500, "data": None}
    if error.path:
        body["path"] = error.path
    return body


class InkwellSchema(strawberry.Schema):
    def process_errors(self, errors: List[GraphQLError], execution_context=None) -> None:
        for error in errors:
            original = error.original_error
            if original is None:
                logger.info("graphql request rejected", error=error.message)
            elif isinstance(original, InkwellError):
                logger.info("request failed", kind=original.kind.value, status=original.status, error=original.message)
            else:
                logger.error("unhandled graphql error", error=error.message, path=error.path, exc_info=original)


class InkwellGraphQLRouter(GraphQLRouter):
    async def process_result(self, request: Request, result: ExecutionResult) -> GraphQLHTTPResponse:
        response: GraphQLHTTPResponse = {"data": result.data}
        if result.errors:
            response["errors"] = [format_error(error) for error in result.errors]
        if result.extensions:
            response["extensions"] = result.extensions
        return response


schema = InkwellSchema(query=Query, mutation=Mutation)
