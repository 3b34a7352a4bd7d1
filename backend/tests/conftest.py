import os
import tempfile

# settings are read at import time
_TMP_DIR = tempfile.mkdtemp(prefix="pznews-test-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["CACHE_BACKEND"] = "memory"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["LOCAL_STORAGE_DIR"] = os.path.join(_TMP_DIR, "media")
os.environ["STORAGE_PUBLIC_URL"] = "https://images.test"
os.environ["DEBUG"] = "true"
os.environ["SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256"

from io import BytesIO

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from PIL import Image

import pznews.models  # noqa: F401
from pznews.core.deps import get_storage
from pznews.db.database import AsyncSessionLocal, Base, engine
from pznews.main import app
from pznews.services.auth import create_access_token, user_to_dict
from pznews.services.users import UserService
from pznews.utils.cache import TaggedCache
from pznews.utils.storage import LocalObjectStorage
from pznews.utils.tasks import drain_background_tasks

ARTICLE_BODY = "<p>" + "Пазарджик посреща новия сезон с много събития и концерти. " * 2 + "</p>"


def make_image(fmt: str = "PNG", size=(64, 48), color=(200, 30, 30)) -> bytes:
    buf = BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


@pytest_asyncio.fixture(autouse=True)
async def database():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await drain_background_tasks()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db():
    async with AsyncSessionLocal() as session:
        yield session


@pytest_asyncio.fixture
async def cache():
    cache = TaggedCache(backend="memory")
    await cache.initialize()
    yield cache
    await cache.close()


@pytest.fixture
def storage(tmp_path):
    return LocalObjectStorage(str(tmp_path / "media"))


@pytest_asyncio.fixture
async def client(cache, storage):
    app.state.cache = cache
    app.dependency_overrides[get_storage] = lambda: storage
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def _make_user(role: str, email: str):
    async with AsyncSessionLocal() as session:
        user = await UserService.create(session, {
            "email": email,
            "password": "password123",
            "full_name": f"Test {role.title()}",
            "role": role,
        })
        return user_to_dict(user)


@pytest_asyncio.fixture
async def admin():
    return await _make_user("admin", "admin@pz-news.test")


@pytest_asyncio.fixture
async def editor():
    return await _make_user("editor", "editor@pz-news.test")


@pytest_asyncio.fixture
async def author():
    return await _make_user("author", "author@pz-news.test")


@pytest_asyncio.fixture
async def other_author():
    return await _make_user("author", "other@pz-news.test")


def auth_headers(user) -> dict:
    token = create_access_token({"sub": str(user["id"]), "role": user["role"], "email": user["email"]})
    return {"Authorization": f"Bearer {token}"}
