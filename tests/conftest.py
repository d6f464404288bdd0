"""
Insight Pulse - Test Configuration and Fixtures
"""
import os
from typing import AsyncGenerator

os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test_insight_pulse.db'
os.environ['LOG_LEVEL'] = 'WARNING'

import pytest
from faker import Faker
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from insight_pulse import models
from insight_pulse.db import Base, enable_sqlite_foreign_keys, get_session
from insight_pulse.main import app
from insight_pulse.security import get_password_hash
from insight_pulse.sessions import MemorySessionStore

fake = Faker()

TEST_PASSWORD = 'testpassword123'
BASE_URL = 'http://testserver'


@pytest.fixture
async def engine(tmp_path):
    """Fresh SQLite database per test"""
    test_engine = create_async_engine(f'sqlite+aiosqlite:///{tmp_path / "test.db"}', poolclass=NullPool)
    enable_sqlite_foreign_keys(test_engine)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def session_store() -> MemorySessionStore:
    store = MemorySessionStore(ttl_seconds=3600)
    app.state.session_store = store
    return store


@pytest.fixture
def override_db(session_factory, session_store):
    """Route the app's storage dependency to the test database"""
    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    yield
    app.dependency_overrides.clear()


@pytest.fixture
async def new_client(override_db):
    """Factory for independent clients, each with its own cookie jar"""
    clients = []

    def factory() -> AsyncClient:
        ac = AsyncClient(transport=ASGITransport(app=app), base_url=BASE_URL)
        clients.append(ac)
        return ac

    yield factory
    for ac in clients:
        await ac.aclose()


@pytest.fixture
async def client(new_client) -> AsyncClient:
    return new_client()


@pytest.fixture
async def departments(db_session: AsyncSession) -> dict:
    """Administration, HR and IT, keyed by name"""
    rows = [models.Department(name=name) for name in ('Administration', 'HR', 'IT')]
    db_session.add_all(rows)
    await db_session.commit()
    return {row.name: row for row in rows}


async def _create_user(db_session: AsyncSession, role: str, department: str, is_active: bool = True) -> models.User:
    user = models.User(
        username=fake.unique.user_name(),
        password_hash=get_password_hash(TEST_PASSWORD),
        name=fake.name(),
        email=fake.unique.email(domain='example.com'),
        department=department,
        role=role,
        is_active=is_active,
    )
    db_session.add(user)
    await db_session.commit()
    return user


@pytest.fixture
async def admin_user(db_session: AsyncSession, departments) -> models.User:
    return await _create_user(db_session, role='Admin', department='Administration')


@pytest.fixture
async def rep_user(db_session: AsyncSession, departments) -> models.User:
    return await _create_user(db_session, role='Rep', department='HR')


@pytest.fixture
def make_user(db_session: AsyncSession, departments):
    async def factory(role: str = 'Rep', department: str = 'HR', is_active: bool = True) -> models.User:
        return await _create_user(db_session, role=role, department=department, is_active=is_active)

    return factory


async def login(ac: AsyncClient, username: str, password: str = TEST_PASSWORD):
    return await ac.post('/login', json={'username': username, 'password': password})


@pytest.fixture
async def admin_client(new_client, admin_user) -> AsyncClient:
    ac = new_client()
    response = await login(ac, admin_user.username)
    assert response.status_code == 200
    return ac


@pytest.fixture
async def rep_client(new_client, rep_user) -> AsyncClient:
    ac = new_client()
    response = await login(ac, rep_user.username)
    assert response.status_code == 200
    return ac


@pytest.fixture
def login_as():
    """Log a client in; returns the login response"""
    return login
