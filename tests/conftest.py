'''
Pytest configuration for the FastAPI application.

This file sets up fixtures for:
1. Forcing the application into TEST_MODE before any code is imported.
2. Providing a fresh in-memory database (schema created) for each test.
3. Providing an async HTTP client bound to the app, with the database,
   identity provider and email dependencies overridden.
4. Providing instances of all service classes, pre-injected with a test db session.
'''
import os

# Must happen before the settings object is created on first import.
os.environ["TEST_MODE"] = "True"

import pytest
from typing import AsyncGenerator, Callable
from unittest.mock import AsyncMock, MagicMock

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine, async_sessionmaker

from tests.constants import (
    TEST_TUTOR_EXTERNAL_ID,
    TEST_ADMIN_EXTERNAL_ID,
    TEST_OTHER_TUTOR_EXTERNAL_ID,
    TEST_STUDENT_ID,
    TEST_STUDENT_EMAIL
)
from tests.database.factories import TutorFactory, persist

# --- Application Imports ---
from src.tutor_scheduler.main import app
from src.tutor_scheduler.common.config import settings
from src.tutor_scheduler.database.engine import get_db_session, build_engine, build_session_factory
from src.tutor_scheduler.database import models as db_models
from src.tutor_scheduler.models.user import IdentityProfile
from src.tutor_scheduler.services.email_service import EmailService
from src.tutor_scheduler.services.identity_service import IdentityService
from src.tutor_scheduler.services.invitation_service import InvitationService
from src.tutor_scheduler.services.schedule_service import ScheduleService
from src.tutor_scheduler.services.occurrence_service import OccurrenceService
from src.tutor_scheduler.services.timeblock_service import TimeblockService
from src.tutor_scheduler.services.report_service import ReportService
from src.tutor_scheduler.services.tutor_service import TutorService
from src.tutor_scheduler.services.security import JWTHandler


@pytest.fixture(scope="session")
def anyio_backend():
    """
    Override the default 'anyio_backend' fixture.
    1. Forces the backend to 'asyncio' (aiosqlite does not run on trio).
    2. Promotes the scope to 'session' (solves 'ScopeMismatch').
    """
    return "asyncio"


# --- 1. Database Fixtures ---

@pytest.fixture(scope="function")
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """A brand new in-memory database with the full schema."""
    assert settings.TEST_MODE is True, \
        "TEST_MODE was not set to True! Check your .env file or environment."

    engine = build_engine(settings.database_url)
    async with engine.begin() as conn:
        await conn.run_sync(db_models.Base.metadata.create_all)
    yield engine
    await engine.dispose()

@pytest.fixture(scope="function")
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(db_engine)

@pytest.fixture(scope="function")
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    """
    Provides a single session for service-level tests.
    """
    session = session_factory()
    try:
        yield session
    finally:
        await session.rollback()
        await session.close()


# --- 2. Collaborator Mocks ---

@pytest.fixture(scope="function")
def mock_email_service() -> EmailService:
    """Provides a mock EmailService whose sends always succeed."""
    mock_service = MagicMock(spec=EmailService)
    mock_service.send_regular_invitation = AsyncMock(return_value={"id": "email_test"})
    mock_service.send = AsyncMock(return_value={"id": "email_test"})
    return mock_service

@pytest.fixture(scope="function")
def mock_identity_service() -> IdentityService:
    """Provides a mock IdentityService that knows every id it is asked about."""
    mock_service = MagicMock(spec=IdentityService)

    async def lookup(user_id: str) -> IdentityProfile:
        if user_id == TEST_STUDENT_ID:
            return IdentityProfile(id=user_id, name="Anna Student", email=TEST_STUDENT_EMAIL)
        return IdentityProfile(id=user_id, name="Tara Tutor", email=f"{user_id}@example.com", image="https://img.example.com/a.png")

    mock_service.lookup = AsyncMock(side_effect=lookup)
    return mock_service


# --- 3. HTTP Client ---

@pytest.fixture(scope="function")
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    mock_email_service: EmailService,
    mock_identity_service: IdentityService
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """
    An async client talking to the app in-process. Each request gets its
    own session on the test database, committed like in production.
    """
    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        session = session_factory()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[EmailService] = lambda: mock_email_service
    app.dependency_overrides[IdentityService] = lambda: mock_identity_service

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client

    app.dependency_overrides.clear()

@pytest.fixture
def auth_headers() -> Callable[[str], dict[str, str]]:
    """Returns a helper creating bearer headers for an identity id."""
    def make(external_id: str) -> dict[str, str]:
        token = JWTHandler.create_access_token(subject=external_id)
        return {"Authorization": f"Bearer {token}"}
    return make


# --- 4. SERVICE FIXTURES ---

@pytest.fixture(scope="function")
def invitation_service(db_session: AsyncSession, mock_email_service: EmailService) -> InvitationService:
    return InvitationService(db=db_session, email_service=mock_email_service)

@pytest.fixture(scope="function")
def schedule_service(db_session: AsyncSession, invitation_service: InvitationService) -> ScheduleService:
    return ScheduleService(db=db_session, invitation_service=invitation_service)

@pytest.fixture(scope="function")
def occurrence_service(
    db_session: AsyncSession,
    invitation_service: InvitationService,
    mock_identity_service: IdentityService
) -> OccurrenceService:
    return OccurrenceService(
        db=db_session,
        invitation_service=invitation_service,
        identity_service=mock_identity_service
    )

@pytest.fixture(scope="function")
def timeblock_service(db_session: AsyncSession) -> TimeblockService:
    return TimeblockService(db=db_session)

@pytest.fixture(scope="function")
def report_service(db_session: AsyncSession) -> ReportService:
    return ReportService(db=db_session)

@pytest.fixture(scope="function")
def tutor_service(db_session: AsyncSession, mock_identity_service: IdentityService) -> TutorService:
    return TutorService(db=db_session, identity_service=mock_identity_service)


# --- 5. DATA FIXTURES ---
# Seed rows are committed so that requests made through `client`
# (which use their own sessions) can see them.

@pytest.fixture(scope="function")
async def test_tutor_orm(db_session: AsyncSession) -> db_models.Tutors:
    tutor = TutorFactory(external_id=TEST_TUTOR_EXTERNAL_ID, name="Maria Tutor", email="maria@example.com")
    await persist(db_session, tutor)
    await db_session.commit()
    return tutor

@pytest.fixture(scope="function")
async def test_admin_orm(db_session: AsyncSession) -> db_models.Tutors:
    admin = TutorFactory(external_id=TEST_ADMIN_EXTERNAL_ID, name="Alex Admin", email="alex@example.com", is_admin=True)
    await persist(db_session, admin)
    await db_session.commit()
    return admin

@pytest.fixture(scope="function")
async def test_other_tutor_orm(db_session: AsyncSession) -> db_models.Tutors:
    tutor = TutorFactory(external_id=TEST_OTHER_TUTOR_EXTERNAL_ID, name="Omar Other", email="omar@example.com")
    await persist(db_session, tutor)
    await db_session.commit()
    return tutor
