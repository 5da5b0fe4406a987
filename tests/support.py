"""Shared fixtures: fresh in-memory database, users, fake blob store and an API test case."""

import unittest

from fastapi.testclient import TestClient

from app.api.deps import get_blob_store
from app.core import security
from app.core.config import get_settings
from app.core.database import SessionLocal, engine
from app.core.errors import BlobStoreError
from app.core.security import hash_password
from app.main import app
from app.models import Base, User

# Low bcrypt cost keeps the suite fast; verification cost is unaffected in production.
security.BCRYPT_ROUNDS = 4

DEFAULT_PASSWORD = "correct-horse-battery"


def reset_database() -> None:
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)


def make_user(
    name: str = "Uma User",
    email: str = "uma@example.com",
    role: str = "standard",
    state: str | None = "Ohio",
    password: str = DEFAULT_PASSWORD,
    profile_picture: str | None = None,
) -> int:
    """Insert a user directly (bypassing registration, so admins are allowed) and return its id."""
    db = SessionLocal()
    try:
        user = User(
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=role,
            state=state,
            active=True,
            profile_picture=profile_picture,
        )
        db.add(user)
        db.commit()
        return user.id
    finally:
        db.close()


def load_user(user_id: int) -> User | None:
    db = SessionLocal()
    try:
        user = db.get(User, user_id)
        if user is not None:
            db.expunge(user)
        return user
    finally:
        db.close()


class FakeBlobStore:
    """Records uploads and returns predictable reference URLs."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.stored: list[tuple[str, bytes, str | None]] = []

    async def store(self, filename: str, content: bytes, content_type: str | None) -> str:
        if self.fail:
            raise BlobStoreError()
        self.stored.append((filename, content, content_type))
        return f"https://blobs.test/profile_pics/{filename}"


class ApiTestCase(unittest.TestCase):
    """Fresh schema, fake blob store and a TestClient for every test."""

    def setUp(self) -> None:
        reset_database()
        self.blob_store = FakeBlobStore()
        app.dependency_overrides[get_blob_store] = lambda: self.blob_store
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        self.client.close()

    def url(self, path: str) -> str:
        return f"{get_settings().API_V1_PREFIX}{path}"

    def login(self, email: str, password: str = DEFAULT_PASSWORD) -> str:
        resp = self.client.post(self.url("/login"), json={"email": email, "password": password})
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()["token"]

    def auth(self, token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}
