"""Shared fixtures: an in-memory Motor database, seeded users and the app."""
import asyncio
from typing import Dict

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from chatline.config import Settings
from chatline.database.connection import mongo_db_dependency
from chatline.main import create_app
from chatline.realtime.presence import PresenceRegistry
from chatline.repositories.message_repository import MessageRepository
from chatline.repositories.user_repository import UserRepository
from chatline.utils.security import create_access_token
from doubles import StubUploader


@pytest.fixture
def db():
    return AsyncMongoMockClient()["chatline_test"]


@pytest.fixture
def users(db) -> Dict[str, str]:
    """Three users in the identity service's collection, keyed by name."""
    docs = [
        {"_id": ObjectId(), "email": f"{name}@example.com", "full_name": name.title(), "hashed_password": "x"}
        for name in ("alice", "bob", "carol")
    ]
    # a private loop keeps pytest-asyncio's current loop untouched
    loop = asyncio.new_event_loop()
    try:
        loop.run_until_complete(db["users"].insert_many(docs))
    finally:
        loop.close()
    return {doc["full_name"].lower(): str(doc["_id"]) for doc in docs}


@pytest.fixture
def message_repo(db) -> MessageRepository:
    return MessageRepository(db)


@pytest.fixture
def user_repo(db) -> UserRepository:
    return UserRepository(db)


@pytest.fixture
def presence() -> PresenceRegistry:
    return PresenceRegistry()


@pytest.fixture
def settings() -> Settings:
    settings = Settings()
    settings.jwt_secret = "test-secret"
    settings.cloudinary_cloud_name = None
    return settings


@pytest.fixture
def app(db, settings):
    application = create_app(settings)
    application.dependency_overrides[mongo_db_dependency] = lambda: db
    application.state.uploader = StubUploader()
    return application


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def auth_headers(settings):
    def _headers(user_id: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user_id, settings=settings)}"}
    return _headers
