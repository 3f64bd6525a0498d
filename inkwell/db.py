"""Async MongoDB connection for the Inkwell service.

Owns the Motor client and registers the Beanie document models on connect.
"""

from typing import Optional

from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from .documents import DOCUMENT_MODELS


class InkwellDB:
    """Async MongoDB wrapper with explicit connection lifecycle.

    Example:
        ```python
        async with InkwellDB(uri="mongodb://localhost:27017", db_name="messages") as db:
            print(db.is_connected)  # True
        ```
    """

    def __init__(
        self,
        uri: str = "mongodb://localhost:27017",
        db_name: str = "messages",
        server_selection_timeout_ms: int = 5000,
    ):
        """Initialize with connection parameters. No connection made until connect()."""
        self._uri = uri
        self._db_name = db_name
        self._timeout_ms = server_selection_timeout_ms
        self._client: Optional[AsyncIOMotorClient] = None
        self._db: Optional[AsyncIOMotorDatabase] = None

    @property
    def client(self) -> Optional[AsyncIOMotorClient]:
        """The MongoDB client (None if not connected)."""
        return self._client

    @property
    def db(self) -> Optional[AsyncIOMotorDatabase]:
        """The database instance (None if not connected)."""
        return self._db

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def connect(self) -> "InkwellDB":
        """Connect, verify the server answers and initialize Beanie. Returns self.

        Raises:
            pymongo.errors.PyMongoError: If the server cannot be reached.
        """
        if self._client is not None:
            return self
        client = AsyncIOMotorClient(self._uri, serverSelectionTimeoutMS=self._timeout_ms)
        try:
            await client.admin.command("ping")
            await init_beanie(database=client[self._db_name], document_models=DOCUMENT_MODELS)
        except Exception:
            client.close()
            raise
        self._client = client
        self._db = client[self._db_name]
        return self

    async def disconnect(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
            self._db = None

    async def close(self) -> None:
        """Alias for disconnect()."""
        await self.disconnect()

    async def __aenter__(self) -> "InkwellDB":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()
