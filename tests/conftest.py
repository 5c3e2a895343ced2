"""Test configuration and fixtures for the Fitness Admin API."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import Base, build_engine, build_session_factory, get_db, init_db
from src.config.settings import settings
from src.domains.admin.dependencies import get_admin_session
from src.domains.programs.models import Exercise, Program, Workout
from src.main import create_app

# Test database URL - use SQLite in-memory for tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for tests."""
    return "asyncio"


@pytest.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = build_engine(TEST_DATABASE_URL)

    # Create all tables
    await init_db(engine)

    yield engine

    # Drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with build_session_factory(test_engine)() as session:
        yield session


@pytest.fixture(scope="function")
async def anonymous_client(test_engine, db_session) -> AsyncGenerator[AsyncClient, None]:
    """Test client without an admin session."""
    app = create_app()

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def client(test_engine, db_session) -> AsyncGenerator[AsyncClient, None]:
    """Test client with database and admin session overrides."""
    app = create_app()

    async def override_get_db():
        yield db_session

    async def override_admin_session():
        return settings.ADMIN_EMAIL

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_admin_session] = override_admin_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def sample_program(db_session: AsyncSession) -> Program:
    """A program with one workout holding two exercises, plus one pool exercise."""
    program = Program(name="Strength Basics", description="Three-day split", order_index=0)
    db_session.add(program)
    await db_session.flush()

    workout = Workout(program_id=program.id, name="Day 1", day_number=1, order_index=0)
    db_session.add(workout)
    await db_session.flush()

    db_session.add_all([
        Exercise(
            program_id=program.id,
            workout_id=workout.id,
            name="Back Squat",
            sets=5,
            reps=5,
            order_index=0,
        ),
        Exercise(
            program_id=program.id,
            workout_id=workout.id,
            name="Bench Press",
            sets=3,
            reps=8,
            duration="60s rest",
            order_index=1,
        ),
        Exercise(name="Plank", sets=3, reps=1, duration="45s", order_index=0),
    ])
    await db_session.commit()
    return program
