"""
Test configuration and fixtures for ChapterDesk backend tests.
"""
import os
import pytest_asyncio
from datetime import datetime, timezone
from decimal import Decimal
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from app.main import app
from app.db.base import Base, get_db, get_session_maker
from app.models.user import User, UserRole
from app.models.zone import Zone
from app.models.chapter import Chapter
from app.models.member import Member
from app.models.package import Package


# Use a file-based SQLite DB to avoid :memory: multiple-connection issues
# with SQLAlchemy + aiosqlite (each new connection would see an empty DB).
TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()
    # Clean up test database file
    try:
        os.remove("./test.db")
    except OSError:
        pass


@pytest_asyncio.fixture(scope="function")
async def session_maker(db_engine) -> async_sessionmaker:
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession, session_maker) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database session override."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_maker] = lambda: session_maker
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def test_zone(db_session: AsyncSession) -> Zone:
    """Create a test zone."""
    zone = Zone(name="West Zone", active=True)
    db_session.add(zone)
    await db_session.flush()
    return zone


@pytest_asyncio.fixture
async def test_chapter(db_session: AsyncSession, test_zone: Zone) -> Chapter:
    """Create a chapter with bank 10000.00 and cash 5000.00 opening balances."""
    chapter = Chapter(
        name="Andheri Chapter",
        zone_id=test_zone.id,
        active=True,
        bank_opening_balance=Decimal("10000.00"),
        bank_closing_balance=Decimal("10000.00"),
        cash_opening_balance=Decimal("5000.00"),
        cash_closing_balance=Decimal("5000.00"),
    )
    db_session.add(chapter)
    await db_session.flush()
    return chapter


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a login account for the test member (inactive until it holds both tracks)."""
    user = User(
        email="asha@example.com",
        name="Asha Rao",
        role=UserRole.MEMBER,
        active=False,
        created=datetime.now(timezone.utc),
        updated=datetime.now(timezone.utc),
    )
    db_session.add(user)
    await db_session.flush()
    return user


@pytest_asyncio.fixture
async def test_member(db_session: AsyncSession, test_chapter: Chapter, test_user: User) -> Member:
    """Create a test member with no memberships yet."""
    member = Member(
        chapter_id=test_chapter.id,
        user_id=test_user.id,
        name="Asha Rao",
        email="asha@example.com",
        mobile="9820000000",
        organization_name="Rao Textiles",
    )
    db_session.add(member)
    await db_session.flush()
    return member


@pytest_asyncio.fixture
async def ho_package(db_session: AsyncSession) -> Package:
    """Create a head-office membership package."""
    package = Package(
        name="Annual HO Membership",
        period_months=12,
        is_venue_fee=False,
        basic_fees=Decimal("25000.00"),
        gst_rate=Decimal("18.00"),
        active=True,
    )
    db_session.add(package)
    await db_session.flush()
    return package


@pytest_asyncio.fixture
async def venue_package(db_session: AsyncSession, test_chapter: Chapter) -> Package:
    """Create a venue fee package for the test chapter."""
    package = Package(
        name="Venue Fee",
        period_months=12,
        is_venue_fee=True,
        chapter_id=test_chapter.id,
        basic_fees=Decimal("12000.00"),
        gst_rate=Decimal("18.00"),
        active=True,
    )
    db_session.add(package)
    await db_session.flush()
    return package
