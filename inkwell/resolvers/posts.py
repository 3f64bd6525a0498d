"""Post resolvers: feed, lookup and owner-scoped create/update/delete."""

from ..config import InkwellSettings
from ..errors import ForbiddenError, NotFoundError, UnauthorizedError
from ..files import clear_image
from ..logger import get_logger
from ..stores import PostStore, UserStore
from ..types import NO_IMAGE, AuthContext, Post, PostInput, PostPage
from .users import require_auth
from .validation import check_post_input, raise_if_invalid


class PostResolvers:
    """Stateless mediator between the API surface and the post/identity stores.

    Authentication and ownership are checked before input validation.
    """

    def __init__(self, posts: PostStore, users: UserStore, settings: InkwellSettings):
        self.posts = posts
        self.users = users
        self.settings = settings
        self.logger = get_logger("resolvers.posts")

    async def create_post(self, post_input: PostInput, auth: AuthContext) -> Post:
        user_id = require_auth(auth)
        raise_if_invalid(check_post_input(post_input.title, post_input.content))

        user = await self.users.get(user_id)
        if not user:
            raise UnauthorizedError("User does not exist")

        post = await self.posts.create(
            title=post_input.title,
            content=post_input.content,
            image_url=post_input.image_url,
            creator_id=user.id,
        )
        user.posts.append(post.id)
        post.creator = await self.users.save(user)
        self.logger.info("post created", post_id=post.id, user_id=user.id)
        return post

    async def posts_page(self, page: int | None, auth: AuthContext) -> PostPage:
        require_auth(auth)
        if not page or page < 1:
            page = 1
        per_page = self.settings.POSTS_PER_PAGE

        total_posts = await self.posts.count()
        posts = await self.posts.list_page(skip=(page - 1) * per_page, limit=per_page)
        return PostPage(posts=posts, total_posts=total_posts)

    async def post(self, post_id: str, auth: AuthContext) -> Post:
        require_auth(auth)
        post = await self.posts.get(post_id, populate=True)
        if not post:
            raise NotFoundError("No post found!")
        return post

    async def update_post(self, post_id: str, post_input: PostInput, auth: AuthContext) -> Post:
        user_id = require_auth(auth)
        post = await self.posts.get(post_id, populate=True)
        if not post:
            raise NotFoundError("No post found!")

        owner_id = post.creator.id if post.creator else post.creator_id
        if owner_id != user_id:
            raise ForbiddenError("Not authorized to edit the post!")

        raise_if_invalid(check_post_input(post_input.title, post_input.content))

        post.title = post_input.title
        post.content = post_input.content
        if post.image_url != NO_IMAGE:
            post.image_url = post_input.image_url

        updated = await self.posts.save(post)
        self.logger.info("post updated", post_id=updated.id, user_id=user_id)
        return updated

    async def delete_post(self, post_id: str, auth: AuthContext) -> bool:
        user_id = require_auth(auth)
        post = await self.posts.get(post_id)
        if not post:
            raise NotFoundError("No post found!")

        if post.creator_id != user_id:
            raise ForbiddenError("Not authorized to delete the post!")

        if post.image_url != NO_IMAGE:
            clear_image(post.image_url, self.settings.UPLOAD_DIR)
        await self.posts.delete(post.id)

        user = await self.users.get(user_id)
        if user is None:
            self.logger.warning("owner missing while deleting post", post_id=post.id, user_id=user_id)
            return True
        user.posts = [owned for owned in user.posts if owned != post.id]
        await self.users.save(user)
        self.logger.info("post deleted", post_id=post.id, user_id=user_id)
        return True
