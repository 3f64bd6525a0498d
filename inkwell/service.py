"""Inkwell Service - blogging backend over GraphQL, MongoDB and local image storage."""

import os
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.concurrency import run_in_threadpool

from .auth_middleware import AuthMiddleware, get_auth
from .config import InkwellSettings, get_inkwell_config
from .db import InkwellDB
from .errors import InkwellError, UnauthorizedError
from .files import IMAGES_PREFIX, clear_image, is_allowed_image, store_image
from .logger import get_logger, setup_logger
from .middleware import PreflightMiddleware, RequestLoggingMiddleware
from .resolvers import PostResolvers, UserResolvers
from .schema import InkwellContext, InkwellGraphQLRouter, schema
from .stores import MongoPostStore, MongoUserStore, PostStore, UserStore

CORS_ALLOW_METHODS = ["OPTIONS", "GET", "POST", "PUT", "PATCH", "DELETE"]
CORS_ALLOW_HEADERS = ["Content-Type", "Authorization"]


class InkwellService:
    """Blogging backend: GraphQL API, image uploads and static image serving.

    Stores are injected; when none are given the service connects to MongoDB on
    startup and uses the Mongo-backed stores.

    Example:
        ```python
        # Default settings (reads INKWELL__* env vars)
        InkwellService.launch()

        # In-process, e.g. for tests
        service = InkwellService(settings=InkwellSettings(UPLOAD_DIR="/tmp/images"))
        client = TestClient(service.app)
        ```
    """

    def __init__(
        self,
        *,
        settings: Optional[InkwellSettings] = None,
        users: Optional[UserStore] = None,
        posts: Optional[PostStore] = None,
    ):
        self.settings = settings or get_inkwell_config()
        cfg = self.settings

        setup_logger(
            "inkwell",
            log_dir=cfg.LOG_DIR,
            logger_level=cfg.LOG_LEVEL.upper(),
            stream_level=cfg.LOG_LEVEL.upper(),
            json_logs=cfg.LOG_JSON,
        )
        self.logger = get_logger("service")

        # Database + stores
        self.db: Optional[InkwellDB] = None
        if users is None or posts is None:
            self.db = InkwellDB(uri=cfg.MONGO_URI, db_name=cfg.MONGO_DB)
            users = users or MongoUserStore()
            posts = posts or MongoPostStore(users)
        self.users = users
        self.posts = posts

        self.user_resolvers = UserResolvers(users, cfg)
        self.post_resolvers = PostResolvers(posts, users, cfg)

        self.app = FastAPI(
            title="Inkwell",
            summary="Inkwell Blogging Backend",
            description="GraphQL API for users and posts, with image uploads.",
            lifespan=self._lifespan,
        )

        # Middleware, innermost first
        self.app.add_middleware(AuthMiddleware, settings=cfg)
        self.app.add_middleware(
            PreflightMiddleware, allow_methods=CORS_ALLOW_METHODS, allow_headers=CORS_ALLOW_HEADERS
        )
        self.app.add_middleware(RequestLoggingMiddleware, logger=self.logger, service_name="inkwell")
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=CORS_ALLOW_METHODS,
            allow_headers=["*"],
        )

        self.app.add_exception_handler(InkwellError, self._handle_inkwell_error)

        # Endpoints
        self.app.add_api_route("/status", self.status, methods=["GET"])
        self.app.add_api_route("/post-image", self.upload_image, methods=["PUT"])
        self.app.include_router(self._graphql_router(), prefix="/graphql")

        os.makedirs(cfg.UPLOAD_DIR, exist_ok=True)
        self.app.mount(f"/{IMAGES_PREFIX}", StaticFiles(directory=cfg.UPLOAD_DIR), name=IMAGES_PREFIX)

    @classmethod
    def launch(cls, **kwargs) -> None:
        """Build the service and serve it with uvicorn (blocking)."""
        service = cls(**kwargs)
        cfg = service.settings
        service.logger.info("starting inkwell", host=cfg.HOST, port=cfg.PORT)
        uvicorn.run(service.app, host=cfg.HOST, port=cfg.PORT, log_level=cfg.LOG_LEVEL.lower())

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        if self.db is not None:
            try:
                await self.db.connect()
            except Exception as e:
                self.logger.critical("database connection failed", db=self.settings.MONGO_DB, error=str(e))
                raise
            self.logger.info("database connected", db=self.settings.MONGO_DB)
        try:
            yield
        finally:
            if self.db is not None:
                await self.db.disconnect()

    def _graphql_router(self) -> InkwellGraphQLRouter:
        async def get_context(request: Request) -> InkwellContext:
            return InkwellContext(
                auth=get_auth(request),
                users=self.user_resolvers,
                posts=self.post_resolvers,
                post_store=self.posts,
            )

        return InkwellGraphQLRouter(
            schema,
            context_getter=get_context,
            graphql_ide="graphiql" if self.settings.GRAPHIQL else None,
        )

    async def _handle_inkwell_error(self, request: Request, exc: InkwellError) -> JSONResponse:
        self.logger.info("request failed", path=request.url.path, status=exc.status, error=exc.message)
        body = exc.to_dict()
        content = {"message": body["message"]}
        if body["data"] is not None:
            content["data"] = body["data"]
        return JSONResponse(status_code=exc.status, content=content)

    # =========================================================================
    # Endpoints
    # =========================================================================

    async def status(self) -> dict:
        return {"status": "Available"}

    async def upload_image(
        self,
        request: Request,
        image: Optional[UploadFile] = File(None),
        old_path: Optional[str] = Form(None, alias="oldPath"),
    ) -> JSONResponse:
        """Store one PNG/JPEG image and return its path.

        Files of any other type are dropped as if none had been sent.
        """
        if not get_auth(request).is_auth:
            raise UnauthorizedError("Not authenticated!")

        if image is None or not image.filename or not is_allowed_image(image.content_type):
            return JSONResponse(status_code=200, content={"message": "No image is uploaded!"})

        file_path = await run_in_threadpool(store_image, image.file, image.content_type, self.settings.UPLOAD_DIR)
        if old_path:
            clear_image(old_path, self.settings.UPLOAD_DIR)

        return JSONResponse(
            status_code=201,
            content={"message": "File stored.", "filePath": file_path},
        )
