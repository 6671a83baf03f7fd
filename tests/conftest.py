"""Pytest fixtures and configuration."""

import base64
import copy
import re
from collections.abc import AsyncGenerator, Callable
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from worksheet_studio.api.deps import get_image_fetcher, get_image_store
from worksheet_studio.db.postgres import Base, get_db
from worksheet_studio.export.images import ImageFetcher
from worksheet_studio.main import app
from worksheet_studio.models.sql.user import User
from worksheet_studio.services.image_store import ImageNotFoundError, StoredImage

# Test database URL (use SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(TEST_DATABASE_URL, echo=False)

test_session_factory = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

# Smallest valid PNG: 1x1 pixel
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


def _matches(doc: dict, query: dict) -> bool:
    for key, expected in query.items():
        value = doc.get(key)
        if isinstance(expected, dict) and "$regex" in expected:
            flags = re.IGNORECASE if "i" in expected.get("$options", "") else 0
            if not isinstance(value, str) or not re.search(expected["$regex"], value, flags):
                return False
        elif value != expected:
            return False
    return True


class FakeCursor:
    """Chainable stand-in for a motor cursor."""

    def __init__(self, docs: list[dict]):
        self._docs = docs

    def sort(self, key: str, direction: int) -> "FakeCursor":
        self._docs = sorted(self._docs, key=lambda d: d.get(key), reverse=direction < 0)
        return self

    def skip(self, n: int) -> "FakeCursor":
        self._docs = self._docs[n:]
        return self

    def limit(self, n: int) -> "FakeCursor":
        self._docs = self._docs[:n]
        return self

    async def _iterate(self):
        for doc in self._docs:
            yield copy.deepcopy(doc)

    def __aiter__(self):
        return self._iterate()


class FakeCollection:
    """In-memory collection supporting the calls the worksheet routes make."""

    def __init__(self):
        self.docs: dict[str, dict] = {}

    async def insert_one(self, doc: dict):
        self.docs[doc["_id"]] = copy.deepcopy(doc)
        return MagicMock(inserted_id=doc["_id"])

    async def find_one(self, query: dict):
        for doc in self.docs.values():
            if _matches(doc, query):
                return copy.deepcopy(doc)
        return None

    def find(self, query: dict) -> FakeCursor:
        return FakeCursor([d for d in self.docs.values() if _matches(d, query)])

    async def count_documents(self, query: dict) -> int:
        return sum(1 for d in self.docs.values() if _matches(d, query))

    async def update_one(self, query: dict, update: dict):
        for doc in self.docs.values():
            if _matches(doc, query):
                doc.update(copy.deepcopy(update.get("$set", {})))
                return MagicMock(matched_count=1)
        return MagicMock(matched_count=0)

    async def delete_one(self, query: dict):
        for key, doc in list(self.docs.items()):
            if _matches(doc, query):
                del self.docs[key]
                return MagicMock(deleted_count=1)
        return MagicMock(deleted_count=0)


class InMemoryImageStore:
    """Same interface as ImageStore, without GridFS."""

    def __init__(self):
        self.images: dict[str, StoredImage] = {}

    async def save(self, path: str, data: bytes, content_type: str) -> None:
        self.images[path] = StoredImage(path=path, content_type=content_type, data=data)

    async def load(self, path: str) -> StoredImage:
        try:
            return self.images[path]
        except KeyError:
            raise ImageNotFoundError(path)

    async def delete(self, path: str) -> None:
        if path not in self.images:
            raise ImageNotFoundError(path)
        del self.images[path]


class RemoteImages:
    """URL -> (status, body, headers) table served through httpx.MockTransport."""

    def __init__(self):
        self.responses: dict[str, tuple[int, bytes, dict]] = {}
        self.requested: list[str] = []

    def add(
        self,
        url: str,
        body: bytes = PNG_BYTES,
        status_code: int = 200,
        headers: dict | None = None,
    ) -> str:
        self.responses[url] = (status_code, body, headers or {})
        return url

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requested.append(url)
        if url not in self.responses:
            raise httpx.ConnectError("connection refused", request=request)
        status_code, body, headers = self.responses[url]
        return httpx.Response(status_code, content=body, headers=headers)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def remote_images() -> RemoteImages:
    return RemoteImages()


@pytest_asyncio.fixture
async def fetcher(remote_images: RemoteImages) -> AsyncGenerator[ImageFetcher, None]:
    """Image fetcher talking to the ``remote_images`` table."""
    async with remote_images.client() as http_client:
        yield ImageFetcher(http_client)


@pytest.fixture
def worksheets_collection() -> FakeCollection:
    return FakeCollection()


@pytest.fixture
def image_store() -> InMemoryImageStore:
    return InMemoryImageStore()


@pytest.fixture
def token_cache() -> dict[str, str]:
    return {}


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with test_session_factory() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession,
    worksheets_collection: FakeCollection,
    image_store: InMemoryImageStore,
    remote_images: RemoteImages,
    token_cache: dict[str, str],
) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with overridden dependencies."""

    async def override_get_db():
        yield db_session

    async def override_get_image_fetcher():
        async with remote_images.client() as http_client:
            yield ImageFetcher(http_client)

    async def fake_cache_get(key):
        return token_cache.get(key)

    async def fake_cache_set(key, value, expire=300):
        token_cache[key] = value

    async def fake_cache_delete(key):
        token_cache.pop(key, None)

    fake_mongodb = SimpleNamespace(worksheets=worksheets_collection)

    with (
        patch("worksheet_studio.db.redis.redis_client", MagicMock()),
        patch("worksheet_studio.api.v1.auth.cache_get", AsyncMock(side_effect=fake_cache_get)),
        patch("worksheet_studio.api.v1.auth.cache_set", AsyncMock(side_effect=fake_cache_set)),
        patch("worksheet_studio.api.v1.auth.cache_delete", AsyncMock(side_effect=fake_cache_delete)),
        patch("worksheet_studio.db.mongodb.mongodb_database", fake_mongodb),
    ):
        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_image_store] = lambda: image_store
        app.dependency_overrides[get_image_fetcher] = override_get_image_fetcher

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac

        app.dependency_overrides.clear()


async def _create_user(db_session: AsyncSession, email: str, username: str) -> User:
    from worksheet_studio.core.security import hash_password

    user = User(
        id=uuid4(),
        email=email,
        username=username,
        hashed_password=hash_password("testpass123"),
        full_name="Test User",
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


def _headers_for(user: User) -> dict:
    from worksheet_studio.core.security import create_access_token

    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a test user."""
    return await _create_user(db_session, "test@example.com", "testuser")


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    """A second account that must not see the test user's worksheets."""
    return await _create_user(db_session, "other@example.com", "otheruser")


@pytest_asyncio.fixture
async def auth_headers(test_user: User) -> dict:
    """Create authentication headers for test user."""
    return _headers_for(test_user)


@pytest_asyncio.fixture
async def other_auth_headers(other_user: User) -> dict:
    return _headers_for(other_user)


@pytest.fixture
def worksheet_payload() -> Callable[..., dict]:
    """Build a worksheet JSON body; keyword arguments override fields."""

    def build(**overrides) -> dict:
        payload = {
            "title": "Science Pre-Board",
            "description": "Class X practice paper",
            "general_instructions": ["All questions are compulsory.", "Write neatly."],
            "sections": [
                {
                    "title": "Objective",
                    "type": "MCQ based-question",
                    "marks_per_question": 1,
                    "questions": [{"text": "What is H2O?"}, {"text": "Name a noble gas."}],
                },
                {
                    "title": "Short answers",
                    "type": "Short Answer",
                    "marks_per_question": 3,
                    "questions": [{"text": "Explain photosynthesis."}],
                },
            ],
        }
        payload.update(overrides)
        return payload

    return build


@pytest.fixture
def export_options() -> dict:
    return {
        "exam_title": "PRE-BOARD EXAMINATION (2024-25)",
        "school_name": "Springfield High",
        "subject": "Science",
        "class_name": "Class X",
        "time": "3 hours",
        "max_marks": 80,
    }
