import os
from typing import Generator, List, Optional

import pytest
from fastapi.testclient import TestClient
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from inkwell.config import InkwellSettings, reset_inkwell_config
from inkwell.service import InkwellService

TEST_MONGO_URI = os.environ.get("INKWELL_TEST_MONGO_URI", "mongodb://localhost:27017")
TEST_DB_NAME = "inkwell_test"
TEST_COLLECTIONS: List[str] = ["users", "posts"]


def _get_test_client() -> Optional[MongoClient]:
    """Return a client for the test MongoDB, or None if it is not reachable."""
    client = MongoClient(TEST_MONGO_URI, serverSelectionTimeoutMS=2000)
    try:
        client.admin.command("ping")
    except PyMongoError:
        client.close()
        return None
    return client


def _wipe_test_collections() -> None:
    client = _get_test_client()
    if client is None:
        return
    try:
        db = client[TEST_DB_NAME]
        for name in TEST_COLLECTIONS:
            db[name].delete_many({})
    finally:
        client.close()


@pytest.fixture(scope="session", autouse=True)
def _require_mongo() -> Generator[None, None, None]:
    """Skip the integration suite when no MongoDB is reachable."""
    client = _get_test_client()
    if client is None:
        pytest.skip(f"MongoDB not reachable on {TEST_MONGO_URI}")
    client.close()
    reset_inkwell_config()
    yield


@pytest.fixture(autouse=True)
def _clear_collections(_require_mongo):
    """Ensure a clean database around each test."""
    _wipe_test_collections()
    yield
    _wipe_test_collections()


@pytest.fixture
def settings(tmp_path) -> InkwellSettings:
    return InkwellSettings(
        _env_file=None,
        MONGO_URI=TEST_MONGO_URI,
        MONGO_DB=TEST_DB_NAME,
        JWT_SECRET="integration-secret",
        BCRYPT_ROUNDS=4,
        UPLOAD_DIR=str(tmp_path / "images"),
        LOG_DIR=str(tmp_path / "logs"),
    )


@pytest.fixture
def client(settings) -> Generator[TestClient, None, None]:
    """In-process TestClient; entering it runs the lifespan and connects to MongoDB."""
    service = InkwellService(settings=settings)
    with TestClient(service.app) as test_client:
        yield test_client
