# tests/conftest.py
"""Pytest fixtures shared by the API and service tests."""

import os
import re
from collections.abc import AsyncGenerator
from io import BytesIO
from typing import Any

# Settings are read at import time
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-blog-cms")
os.environ.setdefault("ADMIN_EMAIL", "admin@example.com")
os.environ.setdefault("ADMIN_PASSWORD", "s3cret-pass")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from beanie import PydanticObjectId
from httpx import ASGITransport, AsyncClient
from PIL import Image
from pymongo.errors import DuplicateKeyError

from blog_api.auth import AuthService, get_auth_provider
from blog_api.dependencies import ensure_db
from blog_api.errors import MediaUploadError
from blog_api.main import app
from blog_api.models import Blog, Category, Tag
from blog_api.services.storage import UploadedImage, get_storage

UNIQUE_FIELDS = {
    Blog: ["slug"],
    Category: ["name", "slug"],
    Tag: ["name", "slug"],
}


def _field(document: Any, key: str) -> Any:
    return getattr(document, "id" if key == "_id" else key, None)


def _matches_condition(value: Any, condition: Any) -> bool:
    if isinstance(condition, dict) and any(k.startswith("$") for k in condition):
        for operator, operand in condition.items():
            if operator == "$regex":
                flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
                if value is None or not re.search(operand, str(value), flags):
                    return False
            elif operator == "$options":
                continue
            elif operator == "$in":
                if value not in operand:
                    return False
            elif operator == "$ne":
                if value == operand:
                    return False
            elif operator == "$gte":
                if value is None or value < operand:
                    return False
            else:
                raise NotImplementedError(operator)
        return True
    return value == condition


def matches(document: Any, query: dict | None) -> bool:
    """Evaluate the subset of MongoDB filters the services issue"""
    for key, condition in (query or {}).items():
        if key == "$or":
            if not any(matches(document, sub) for sub in condition):
                return False
        elif not _matches_condition(_field(document, key), condition):
            return False
    return True


class FakeQuery:
    """Chainable stand-in for a Beanie FindMany query"""

    def __init__(self, documents: list):
        self._documents = documents
        self._sort: list = []
        self._skip = 0
        self._limit: int | None = None

    def sort(self, keys):
        self._sort = list(keys)
        return self

    def skip(self, n: int):
        self._skip = n
        return self

    def limit(self, n: int):
        self._limit = n
        return self

    async def to_list(self):
        documents = list(self._documents)
        for field, direction in reversed(self._sort):
            documents.sort(key=lambda d: _field(d, field), reverse=direction == -1)
        documents = documents[self._skip :]
        if self._limit:
            documents = documents[: self._limit]
        return [d.model_copy(deep=True) for d in documents]

    async def count(self) -> int:
        return len(self._documents)


class MemoryStore:
    """In-memory collections keyed by document class"""

    def __init__(self):
        self.collections: dict = {Blog: {}, Category: {}, Tag: {}}

    def all(self, model) -> list:
        return list(self.collections[model].values())

    def add(self, document):
        """Seed a document directly, bypassing service validation"""
        if document.id is None:
            document.id = PydanticObjectId()
        self.collections[document.__class__][document.id] = document.model_copy(deep=True)
        return document

    def check_unique(self, document):
        for other in self.all(document.__class__):
            if other.id == document.id:
                continue
            for field in UNIQUE_FIELDS[document.__class__]:
                if getattr(other, field) == getattr(document, field):
                    raise DuplicateKeyError(f"E11000 duplicate key error: {field}")


@pytest.fixture
def store(monkeypatch: pytest.MonkeyPatch) -> MemoryStore:
    """Replace Beanie persistence on every document model with a MemoryStore"""
    memory = MemoryStore()

    for model in (Blog, Category, Tag):

        async def get(cls, document_id, *args, **kwargs):
            found = memory.collections[cls].get(document_id)
            return found.model_copy(deep=True) if found else None

        async def find_one(cls, query=None, *args, **kwargs):
            for document in memory.all(cls):
                if matches(document, query):
                    return document.model_copy(deep=True)
            return None

        def find(cls, query=None, *args, **kwargs):
            return FakeQuery([d for d in memory.all(cls) if matches(d, query)])

        async def insert(self, *args, **kwargs):
            if self.id is None:
                self.id = PydanticObjectId()
            memory.check_unique(self)
            memory.collections[self.__class__][self.id] = self.model_copy(deep=True)
            return self

        async def save(self, *args, **kwargs):
            memory.check_unique(self)
            memory.collections[self.__class__][self.id] = self.model_copy(deep=True)
            return self

        async def delete(self, *args, **kwargs):
            memory.collections[self.__class__].pop(self.id, None)

        monkeypatch.setattr(model, "get_pymongo_collection", classmethod(lambda cls: None))
        monkeypatch.setattr(model, "get", classmethod(get))
        monkeypatch.setattr(model, "find_one", classmethod(find_one))
        monkeypatch.setattr(model, "find", classmethod(find))
        monkeypatch.setattr(model, "insert", insert)
        monkeypatch.setattr(model, "save", save)
        monkeypatch.setattr(model, "delete", delete)

    return memory


class FakeStorage:
    """MediaStorage that records calls instead of talking to Spaces"""

    def __init__(self):
        self.uploaded: list[str] = []
        self.deleted: list[str] = []
        self.fail_uploads = False
        self.fail_deletes: set[str] = set()

    async def upload_image(self, file_content, original_filename, content_type):
        if self.fail_uploads:
            raise MediaUploadError(f"Failed to upload image {original_filename}")
        public_id = f"blog-images/{len(self.uploaded)}-{original_filename}"
        self.uploaded.append(public_id)
        return UploadedImage(url=f"https://cdn.test/{public_id}", public_id=public_id)

    async def delete_image(self, public_id):
        if public_id in self.fail_deletes:
            raise RuntimeError(f"media host refused {public_id}")
        self.deleted.append(public_id)


@pytest.fixture
def fake_storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
async def client(
    store: MemoryStore, fake_storage: FakeStorage
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app with persistence and media host faked"""

    async def no_db():
        return None

    app.dependency_overrides[ensure_db] = no_db
    app.dependency_overrides[get_storage] = lambda: fake_storage
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def admin_token() -> str:
    user = get_auth_provider().lookup("admin_001")
    return AuthService.create_access_token(user)


@pytest.fixture
def auth_headers(admin_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def png_bytes() -> bytes:
    """A small valid PNG image."""
    buffer = BytesIO()
    Image.new("RGB", (10, 10), color="red").save(buffer, format="PNG")
    return buffer.getvalue()
