"""
Pytest configuration and shared fixtures for testing.
"""
import os
import sys
from pathlib import Path

# Use SQLite for tests. The path is relative to this file so the .db lands
# inside tests/ regardless of the working directory. These must be set
# before app modules are imported: settings and the engine read them at
# import time.
_TEST_DB = Path(__file__).parent / "test.db"
SQLALCHEMY_DATABASE_URL = f"sqlite:///{_TEST_DB}"

os.environ["DATABASE_URL"] = SQLALCHEMY_DATABASE_URL
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-the-exam-room-suite")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-for-the-exam-room-suite")
os.environ.setdefault("ENV", "test")
os.environ.setdefault("SENTRY_DSN", "")

# Add backend/ to path so `app` is importable without installing
backend_root = Path(__file__).parent.parent
if str(backend_root) not in sys.path:
    sys.path.insert(0, str(backend_root))

from contextlib import asynccontextmanager  # noqa: E402
from datetime import timedelta  # noqa: E402
from typing import Dict, Iterable  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.models import (  # noqa: E402
    Base,
    get_db,
    Role,
    RoleName,
    ScheduledTest,
    Section,
    SectionType,
    TestTemplate,
    User,
    UserRole,
)
from app.main import app  # noqa: E402
from app.core.accounts import seed_roles  # noqa: E402
from app.core.auth import Principal  # noqa: E402
from app.core.auth.security import hash_password, create_access_token  # noqa: E402
from app.core.datetime_utils import utc_now  # noqa: E402

TEST_PASSWORD = "Str0ng!Pass"

LISTENING_KEY = {"q1": "A", "q2": ["x", "y"], "q3": "True"}
READING_KEY = {"q1": "Paris", "q2": ["b", "a"]}


@asynccontextmanager
async def _test_lifespan(app):
    """No-op lifespan for tests.

    Skips error tracking initialization.
    """
    yield


# Neutralize the production lifespan on the singleton app.
app.router.lifespan_context = _test_lifespan


engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    """
    # Create all tables
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        # Drop all tables after test
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(db_session):
    """
    Factory for extra independent sessions (concurrency tests).

    Depends on db_session so the tables exist.
    """
    return TestingSessionLocal


@pytest.fixture(scope="function")
def client(db_session):
    """
    Create a test client with database dependency override.
    """

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def roles(db_session) -> Dict[str, Role]:
    """
    Seed the USER and ADMIN roles.
    """
    return {role.name: role for role in seed_roles(db_session)}


def _create_user(
    db_session,
    roles: Dict[str, Role],
    suffix: str,
    role_names: Iterable[RoleName],
) -> User:
    user = User(
        email=f"{suffix}@example.com",
        username=suffix,
        password_hash=hash_password(TEST_PASSWORD),
        first_name="Test",
        last_name=suffix.capitalize(),
        personal_id=f"PID-{suffix}",
        phone_number="+1 555 0100",
    )
    db_session.add(user)
    db_session.flush()
    for role_name in role_names:
        db_session.add(UserRole(user_id=user.id, role_id=roles[role_name.value].id))
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def test_user(db_session, roles):
    """
    Create a test-taker (USER role) in the database.
    """
    return _create_user(db_session, roles, "taker", [RoleName.USER])


@pytest.fixture
def other_user(db_session, roles):
    """
    Create a second test-taker.
    """
    return _create_user(db_session, roles, "other", [RoleName.USER])


@pytest.fixture
def admin_user(db_session, roles):
    """
    Create an administrator (ADMIN role only).
    """
    return _create_user(db_session, roles, "admin", [RoleName.ADMIN])


def _headers_for(user: User) -> Dict[str, str]:
    access_token = create_access_token(user.id, user.role_names)
    return {"Authorization": f"Bearer {access_token}"}


@pytest.fixture
def auth_headers(test_user):
    """
    Create authentication headers for the test-taker.
    """
    return _headers_for(test_user)


@pytest.fixture
def other_auth_headers(other_user):
    """
    Create authentication headers for the second test-taker.
    """
    return _headers_for(other_user)


@pytest.fixture
def admin_headers(admin_user):
    """
    Create authentication headers for the administrator.
    """
    return _headers_for(admin_user)


@pytest.fixture
def principal(test_user) -> Principal:
    """
    Principal of the test-taker, for service-level tests.
    """
    return Principal(user_id=test_user.id, roles=frozenset({"USER"}))


@pytest.fixture
def other_principal(other_user) -> Principal:
    """
    Principal of the second test-taker.
    """
    return Principal(user_id=other_user.id, roles=frozenset({"USER"}))


@pytest.fixture
def test_template(db_session):
    """
    Create a template with content and answer keys in every section.
    """
    template = TestTemplate(title="Mock Exam", description="Practice sitting")
    template.sections = [
        Section(
            type=SectionType.LISTENING,
            content={"audioUrl": "https://cdn.example.com/a.mp3", "blocks": [{"id": "q1"}]},
            answers=dict(LISTENING_KEY),
        ),
        Section(
            type=SectionType.READING,
            content={"passageText": "The capital of France...", "blocks": [{"id": "q1"}]},
            answers=dict(READING_KEY),
        ),
        Section(
            type=SectionType.WRITING,
            content={"blocks": [{"id": "essay"}]},
            answers={"essay": "anything"},
        ),
    ]
    db_session.add(template)
    db_session.commit()
    db_session.refresh(template)
    return template


@pytest.fixture
def scheduled_test(db_session, test_template):
    """
    Schedule the test template for a window around now.
    """
    now = utc_now()
    scheduled = ScheduledTest(
        test_template_id=test_template.id,
        start_time=now - timedelta(hours=1),
        end_time=now + timedelta(hours=1),
        is_active=True,
    )
    db_session.add(scheduled)
    db_session.commit()
    db_session.refresh(scheduled)
    return scheduled
