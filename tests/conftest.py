"""Test configuration and fixtures.

Test setup with one throwaway database per test:
1. Each test gets a fresh in-memory SQLite engine (single shared connection)
2. The schema is created from the models before the test and dropped after it
3. FastAPI endpoints use the same session as the test via a dependency override
4. Tests that need real concurrent connections use the file-backed engine fixture
"""

from collections.abc import AsyncGenerator
from pathlib import Path

from dotenv import load_dotenv

# Load test environment variables before the settings module is imported
test_env_path = Path(__file__).parent.parent / ".env.test"
load_dotenv(test_env_path, override=True)

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from src.config.settings import settings  # noqa: E402
from src.database.base import Base  # noqa: E402
from src.database.dependencies import get_db_session  # noqa: E402
from src.features.auth.jwt_utils import TokenCodec, get_token_codec  # noqa: E402
from src.features.auth.notifications import get_email_service  # noqa: E402
from src.features.auth.repository import RefreshTokenRepository  # noqa: E402
from src.features.auth.service import SessionService  # noqa: E402
from src.features.user.models import User, UserRole  # noqa: E402
from src.features.user.repository import UserRepository  # noqa: E402
from src.main import app  # noqa: E402
from src.shared.email.email_service import EmailService  # noqa: E402

DEFAULT_PASSWORD = "secret123"


class RecordingEmailService(EmailService):
    """Email service that records reset emails instead of sending them."""

    def __init__(self):
        super().__init__(frontend_url=settings.frontend_url)
        self.sent: list[tuple[str, str]] = []

    def send_password_reset_email(self, to_email: str, token: str) -> bool:
        self.sent.append((to_email, token))
        return True


class RecordingNotifier:
    """PasswordResetNotifier collecting (user, token) pairs."""

    def __init__(self):
        self.sent: list[tuple[User, str]] = []

    async def send_password_reset_email(self, user: User, token: str) -> None:
        self.sent.append((user, token))


# Database Setup - Function Scope (fresh database per test)


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """Create an in-memory database with the current schema."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Create a database session per test."""
    async_session = AsyncSession(bind=db_engine, expire_on_commit=False)
    try:
        yield async_session
    finally:
        await async_session.close()


@pytest_asyncio.fixture
async def file_engine(tmp_path) -> AsyncGenerator[AsyncEngine]:
    """File-backed database so several connections can race on the same rows."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'concurrency.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def file_session_factory(file_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(file_engine, class_=AsyncSession, expire_on_commit=False)


# FastAPI Client & Dependency Overrides


@pytest.fixture
def email_service() -> RecordingEmailService:
    return RecordingEmailService()


@pytest_asyncio.fixture(autouse=True)
async def override_dependencies(session: AsyncSession, email_service: RecordingEmailService):
    """Point the app at the test session and the recording email service."""

    async def _get_test_session():
        yield session

    app.dependency_overrides[get_db_session] = _get_test_session
    app.dependency_overrides[get_email_service] = lambda: email_service
    yield
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient]:
    """Create an unauthenticated async HTTP test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Service Fixtures


@pytest.fixture
def token_codec() -> TokenCodec:
    """The codec the application uses (key from .env.test)."""
    return get_token_codec()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def service(session: AsyncSession, token_codec: TokenCodec, notifier: RecordingNotifier) -> SessionService:
    return SessionService(
        users=UserRepository(session),
        refresh_tokens=RefreshTokenRepository(session),
        codec=token_codec,
        notifier=notifier,
    )


@pytest.fixture
def token_repo(session: AsyncSession) -> RefreshTokenRepository:
    return RefreshTokenRepository(session)


# Test User Factories


@pytest_asyncio.fixture
async def make_user(session: AsyncSession):
    """Factory fixture to create test users with custom fields.

    Usage:
        user = await make_user()                                  # defaults
        admin = await make_user(role=UserRole.ADMIN)              # admin
        user = await make_user(email="a@x.com", password="pw123456")
    """
    counter = 0  # Counter for unique email generation

    async def _factory(email=None, password=DEFAULT_PASSWORD, role=UserRole.USER, **kwargs) -> User:
        nonlocal counter
        counter += 1

        if email is None:
            email = f"testuser{counter}@example.com"

        user = User(
            email=User.normalize_email(email),
            hashed_password=User.hash_password(password),
            role=role,
            **kwargs,
        )

        session.add(user)
        await session.flush()
        await session.refresh(user)
        return user

    yield _factory


@pytest.fixture
def bearer(token_codec: TokenCodec):
    """Build an Authorization header for a user without going through login."""

    def _headers(user: User) -> dict[str, str]:
        token = token_codec.mint({"sub": str(user.id), "email": user.email, "role": str(user.role)})
        return {"Authorization": f"Bearer {token}"}

    return _headers
