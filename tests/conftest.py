from __future__ import annotations

from types import SimpleNamespace
from typing import Any, AsyncIterator, Optional

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from idea_forum.api import app
from idea_forum.config import get_settings
from idea_forum.db import create_engine, get_session, make_sessionmaker
from idea_forum.models import Base, User, UserRole


@pytest_asyncio.fixture
async def engine(tmp_path) -> AsyncIterator[AsyncEngine]:
    eng = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'forum.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return make_sessionmaker(engine)


@pytest_asyncio.fixture
async def session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    async with session_factory() as ses:
        yield ses


@pytest_asyncio.fixture
async def users(session_factory: async_sessionmaker[AsyncSession]) -> SimpleNamespace:
    async with session_factory() as ses:
        alice = User(name="Alice", username="alice", skills=["python", "design"], bio="Builds things")
        bob = User(name="Bob", username="bob", skills=["go"])
        carol = User(name="Carol", username="carol")
        admin = User(name="Admin", username="admin", role=UserRole.ADMIN)
        ses.add_all([alice, bob, carol, admin])
        await ses.commit()
        return SimpleNamespace(alice=alice.id, bob=bob.id, carol=carol.id, admin=admin.id)


class Api:
    """Calls RPC-style endpoints as a given user."""

    def __init__(self, client: AsyncClient) -> None:
        self.client = client
        self.header = get_settings().auth_user_header

    def _headers(self, user: Optional[int]) -> dict[str, str]:
        return {self.header: str(user)} if user is not None else {}

    async def get(self, op: str, user: Optional[int] = None, **params: Any) -> httpx.Response:
        return await self.client.get(f"/api/{op}", params=params, headers=self._headers(user))

    async def post(self, op: str, user: Optional[int] = None, **body: Any) -> httpx.Response:
        return await self.client.post(f"/api/{op}", json=body, headers=self._headers(user))


@pytest_asyncio.fixture
async def client(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncClient]:
    async def _session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as ses:
            yield ses

    app.dependency_overrides[get_session] = _session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def api(client: AsyncClient) -> Api:
    return Api(client)


@pytest.fixture
def make_idea(api: Api):
    async def _make(author: int, **fields: Any) -> dict:
        body = {"title": "An idea", "description": "Something worth building", "category": "SAAS"}
        body.update(fields)
        resp = await api.post("idea.create", user=author, **body)
        assert resp.status_code == 200, resp.text
        return resp.json()

    return _make
