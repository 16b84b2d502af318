"""
Taskflow - Test Configuration and Fixtures
"""
import os
from typing import AsyncGenerator, Callable, Dict

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool
from faker import Faker

# Set testing environment before anything reads settings
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite://'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['LOG_FILE'] = ''
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['BCRYPT_ROUNDS'] = '4'

from taskflow.main import create_app
from taskflow.api.deps import get_task_events
from taskflow.core.database import Base, get_db
from taskflow.core.security import get_password_hash, create_access_token
from taskflow.models.user import User
from taskflow.services.task_events import RecordingEventSink
from taskflow.services.task_service import TaskService

fake = Faker()

TEST_PASSWORD = 'testpassword123'


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test"""
    test_engine = create_async_engine(
        'sqlite+aiosqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def events() -> RecordingEventSink:
    return RecordingEventSink()


@pytest.fixture
def task_service(db_session: AsyncSession, events: RecordingEventSink) -> TaskService:
    return TaskService(db_session, events)


@pytest.fixture
def app():
    return create_app()


@pytest_asyncio.fixture
async def client(app, db_session: AsyncSession, events: RecordingEventSink) -> AsyncGenerator[AsyncClient, None]:
    """Test client with database and event sink overrides"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_task_events] = lambda: events

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable:
    """Factory: await make_user(name=...) -> persisted User"""
    async def _make_user(name: str = None, email: str = None) -> User:
        user = User(
            name=name or fake.first_name(),
            email=(email or fake.unique.email()).lower(),
            hashed_password=get_password_hash(TEST_PASSWORD),
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make_user


@pytest_asyncio.fixture
async def alice(make_user) -> User:
    return await make_user(name='Alice')


@pytest_asyncio.fixture
async def bob(make_user) -> User:
    return await make_user(name='Bob')


@pytest_asyncio.fixture
async def carol(make_user) -> User:
    return await make_user(name='Carol')


@pytest.fixture
def auth_headers() -> Callable[[User], Dict[str, str]]:
    """Generate authentication headers for a user"""
    def _headers(user: User) -> Dict[str, str]:
        token = create_access_token({'sub': str(user.id)})
        return {'Authorization': f'Bearer {token}'}

    return _headers


@pytest.fixture
def test_user_data() -> dict:
    return {
        'name': fake.first_name()[:30],
        'email': f'{fake.unique.user_name()}@taskflow.io',
        'password': TEST_PASSWORD,
    }
