# test/conftest.py
import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import medmentor.db.models  # noqa: F401  (register tables)
from medmentor.core.config import Settings
from medmentor.db.session import drop_db, init_db
from medmentor.main import create_app
from medmentor.services.repo import Repo


@pytest_asyncio.fixture()
async def engine():
    # Shared in-memory DB across connections
    eng = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    try:
        yield eng
    finally:
        await drop_db(eng)
        await eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture()
def repo(session_factory):
    return Repo(session_factory)


@pytest_asyncio.fixture()
async def app():
    application = create_app(Settings(DATABASE_URL="sqlite+aiosqlite:///:memory:", AI_GATEWAY_API_KEY="test-key"))
    await init_db(application.state.engine)
    try:
        yield application
    finally:
        await drop_db(application.state.engine)
        await application.state.engine.dispose()


@pytest_asyncio.fixture()
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c
