"""
Meetapp Backend: Test Configuration (conftest.py)
==================================================

What:  Shared pytest fixtures for the test suite.
How:   Every test gets its own SQLite database file (aiosqlite) with the full
       schema created from Base.metadata. Route tests talk to the FastAPI app
       through httpx's ASGITransport with get_db_session overridden to use the
       per-test database.

Fixture Hierarchy:
    db_engine        fresh SQLite file + create_all, disposed afterwards
    ├── session_factory
    │   ├── db_session       one AsyncSession for direct service tests
    │   └── client           AsyncClient against the app (mail task recorded)
    make_user / make_meetup  row factories (commit so routes can see them)
    auth_headers             Bearer header for a user
"""

import os
import tempfile

# Settings are read at import time: environment first, meetapp second
os.environ["DATABASE_URL"] = (
    f"sqlite+aiosqlite:///{tempfile.mkdtemp(prefix='meetapp_db_')}/meetapp.db"
)
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="meetapp_test_")
os.environ["SECRET_KEY"] = "test-secret-key-not-real"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["MAIL_ENABLED"] = "false"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"

from datetime import datetime, timedelta, timezone  # noqa: E402
from unittest.mock import patch  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from meetapp.database import Base, dispose_engine, get_db_session  # noqa: E402
from meetapp.main import app  # noqa: E402
from meetapp.models.meetup import Meetup  # noqa: E402
from meetapp.models.user import User  # noqa: E402
from meetapp.security import create_access_token, hash_password  # noqa: E402

DEFAULT_PASSWORD = "secret123"


def hours_from_now(hours: float) -> datetime:
    """Whole-second UTC timestamp `hours` away from now."""
    return (datetime.now(timezone.utc) + timedelta(hours=hours)).replace(microsecond=0)


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


# ══════════════════════════════════════════════════════════════════════════
# Row Factories
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def make_user(db_session):
    """
    Usage:
        user = await make_user("Alice", "alice@example.com")
    """
    async def _make_user(name="Test User", email=None, password=DEFAULT_PASSWORD):
        user = User(
            name=name,
            email=email or f"{name.lower().replace(' ', '.')}@example.com",
            password_hash=hash_password(password),
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make_user


@pytest.fixture
def make_meetup(db_session):
    """
    Inserts directly, so past dates are allowed.

    Usage:
        meetup = await make_meetup(organizer, hours_from_now(24))
    """
    async def _make_meetup(organizer, date, title="Python Meetup", banner_id=None):
        meetup = Meetup(
            title=title,
            description="Talks and pizza",
            location="Main Street 42",
            date=date,
            user_id=organizer.id,
            banner_id=banner_id,
        )
        db_session.add(meetup)
        await db_session.commit()
        return meetup

    return _make_meetup


@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}

    return _auth_headers


# ══════════════════════════════════════════════════════════════════════════
# HTTP
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def sent_mail():
    """
    Payloads handed to the subscription mail background task, in order.

    The task itself is replaced, so nothing is rendered or delivered.
    """
    payloads = []

    class RecordingMail:
        async def run(self, data):
            payloads.append(data)
            return True

    with patch("meetapp.services.subscription_service.subscription_mail", RecordingMail()):
        yield payloads


@pytest_asyncio.fixture
async def client(session_factory, sent_mail):
    """
    HTTPX AsyncClient wired to the app and the per-test database.

    ASGITransport does not run the lifespan. Background tasks run before the
    request call returns.
    """
    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client
    app.dependency_overrides.clear()
    # /health uses the module-level engine; its pooled connections belong to this loop
    await dispose_engine()


@pytest.fixture
def sample_png_bytes():
    """PNG signature plus an IHDR chunk: enough for libmagic to say image/png."""
    return (
        b"\x89PNG\r\n\x1a\n"
        b"\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00"
        b"\x1f\x15\xc4\x89"
        b"\x00\x00\x00\rIDATx\x9cc\xf8\x0f\x00\x00\x01\x01\x00\x05\x18\xd8N"
        b"\x00\x00\x00\x00IEND\xaeB`\x82"
    )


@pytest.fixture
def sample_jpeg_bytes():
    """Minimal JPEG: SOI + JFIF APP0 header + EOI."""
    return (
        b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00"
        b"\xff\xd9"
    )
