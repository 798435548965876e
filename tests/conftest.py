"""Shared pytest fixtures for backend tests."""

import os
import sys
from typing import AsyncGenerator, Awaitable, Callable
from uuid import UUID, uuid4

import bcrypt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Add the project root to the path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from kanban.database import Base, get_db
from kanban.main import app
from kanban.models import Project, ProjectMember, ProjectMemberRole, User
from kanban.services import membership_service, project_service
from kanban.services.auth_service import create_access_token


def get_test_password_hash(password: str) -> str:
    """
    Generate a password hash for testing.

    Uses bcrypt directly with a low cost factor to keep fixtures fast.
    """
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=4)).decode("utf-8")


# Use in-memory SQLite for testing
SQLALCHEMY_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a test database engine with SQLite."""
    engine = create_async_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Enable foreign key support for SQLite so ON DELETE CASCADE applies
    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_maker() as session:
        try:
            yield session
        finally:
            await session.rollback()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database dependency override."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Factory creating persisted users."""

    async def _make_user(email: str, password: str = "TestPassword123!", display_name: str = None) -> User:
        user = User(
            id=uuid4(),
            email=email,
            password_hash=get_test_password_hash(password),
            display_name=display_name or email.split("@")[0],
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make_user


@pytest_asyncio.fixture
async def owner(make_user) -> User:
    return await make_user("owner@example.com", display_name="Olivia Owner")


@pytest_asyncio.fixture
async def admin_user(make_user) -> User:
    return await make_user("admin@example.com", display_name="Adam Admin")


@pytest_asyncio.fixture
async def editor_user(make_user) -> User:
    return await make_user("editor@example.com", display_name="Eddie Editor")


@pytest_asyncio.fixture
async def member_user(make_user) -> User:
    return await make_user("member@example.com", display_name="Mia Member")


@pytest_asyncio.fixture
async def outsider(make_user) -> User:
    return await make_user("outsider@example.com", display_name="Otto Outsider")


@pytest_asyncio.fixture
async def project(db_session: AsyncSession, owner: User) -> Project:
    """A freshly created project with its default sections."""
    return await project_service.create_project(
        db_session,
        owner,
        name="Launch Board",
        description="Everything needed for launch",
    )


@pytest_asyncio.fixture
async def team_project(
    db_session: AsyncSession,
    project: Project,
    owner: User,
    admin_user: User,
    editor_user: User,
    member_user: User,
) -> Project:
    """The project with an admin, an editor and a plain member attached."""
    await membership_service.add_member(db_session, project, owner, admin_user.id, "admin")
    await membership_service.add_member(db_session, project, owner, editor_user.id, "editor")
    await membership_service.add_member(db_session, project, owner, member_user.id, "member")
    return await project_service.get_project(db_session, project.id)


@pytest.fixture
def headers_for() -> Callable[[User], dict]:
    """Build bearer authorization headers for a user."""

    def _headers_for(user: User) -> dict:
        token = create_access_token(data={"sub": str(user.id), "email": user.email})
        return {"Authorization": f"Bearer {token}"}

    return _headers_for


@pytest.fixture
def owner_rows(db_session: AsyncSession) -> Callable[[UUID], Awaitable[list]]:
    """Return the user ids holding an owner membership row for a project."""

    async def _owner_rows(project_id: UUID) -> list:
        result = await db_session.execute(
            select(ProjectMember.user_id).where(
                ProjectMember.project_id == project_id,
                ProjectMember.role == ProjectMemberRole.OWNER.value,
            )
        )
        return list(result.scalars().all())

    return _owner_rows


@pytest.fixture
def assert_single_owner(db_session: AsyncSession, owner_rows):
    """Check that exactly one owner row exists and matches Project.owner_user_id."""

    async def _assert_single_owner(project_id: UUID) -> UUID:
        result = await db_session.execute(
            select(Project.owner_user_id)
            .where(Project.id == project_id)
            .execution_options(populate_existing=True)
        )
        owner_user_id = result.scalar_one()
        rows = await owner_rows(project_id)
        assert rows == [owner_user_id]
        return owner_user_id

    return _assert_single_owner
