import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import uuid
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from edutrack.core.config import settings
from edutrack.core.constants import UserRole
from edutrack.core.database import Base, get_db
from edutrack.crud import profile as crud_profile
from edutrack.crud.school import school as crud_school
from edutrack.crud.user import user as crud_user
from edutrack.models.profile import ParentProfile, PrincipalProfile, StudentProfile, TeacherProfile
from edutrack.models.relationship import ParentChildRelationship
from edutrack.models.school import School
from edutrack.models.user import User
from edutrack.utils import deps as deps_utils
from tests.helpers.identity import FakeIdentityProvider
import main

test_db_url = settings.TEST_DATABASE_URL or "sqlite:///./test.db"

PROFILE_CRUD_BY_ROLE = {
    UserRole.STUDENT: crud_profile.student_profile,
    UserRole.TEACHER: crud_profile.teacher_profile,
    UserRole.PARENT: crud_profile.parent_profile,
    UserRole.PRINCIPAL: crud_profile.principal_profile,
}

@pytest.fixture(scope="session")
def database_engine():
    if test_db_url.startswith("sqlite"):
        engine = create_engine(test_db_url, connect_args={"check_same_thread": False})
    else:
        engine = create_engine(test_db_url)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()
    if test_db_url == "sqlite:///./test.db" and os.path.exists("./test.db"):
        os.remove("./test.db")

@pytest.fixture(scope="function")
def db_session(database_engine):
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=database_engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        for table in reversed(Base.metadata.sorted_tables):
            db.execute(table.delete())
        db.commit()
        db.close()

class SessionStub:
    """Stands in for the session resolver; set ``identity_id`` to sign a caller in."""
    def __init__(self):
        self.identity_id = None

@pytest.fixture
def session_stub():
    return SessionStub()

@pytest.fixture
def identity_provider():
    return FakeIdentityProvider()

@pytest.fixture(scope="function")
def client(db_session, session_stub, identity_provider):
    main.app.dependency_overrides[get_db] = lambda: db_session
    main.app.dependency_overrides[deps_utils.get_identity_id] = lambda: session_stub.identity_id
    main.app.dependency_overrides[deps_utils.get_identity_provider] = lambda: identity_provider
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()

@pytest.fixture
def school_factory(db_session):
    def _create(name: str = None, clerk_organization_id: str = None, **fields) -> School:
        school = crud_school.create(
            db_session,
            obj_in={
                "name": name or f"School {uuid.uuid4().hex[:6]}",
                "clerk_organization_id": clerk_organization_id,
                **fields,
            },
        )
        return school
    return _create

@pytest.fixture
def user_factory(db_session):
    def _create(
        school: School,
        role: UserRole = UserRole.TEACHER,
        *,
        first_name: str = "Test",
        last_name: str = "User",
        email: str = None,
        clerk_id: str = None,
        is_active: bool = True,
    ) -> User:
        user = crud_user.create(
            db_session,
            obj_in={
                "clerk_id": clerk_id,
                "email": email or f"user-{uuid.uuid4().hex[:8]}@test.com",
                "first_name": first_name,
                "last_name": last_name,
                "role": role,
                "school_id": school.id,
                "is_active": is_active,
            },
            commit=False,
        )
        PROFILE_CRUD_BY_ROLE[role].create_for_user(db_session, user_id=user.id, obj_in={}, commit=False)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _create

@pytest.fixture
def school(school_factory):
    return school_factory(name="Riverside High")

@pytest.fixture
def principal(user_factory, school):
    return user_factory(
        school, UserRole.PRINCIPAL, first_name="Paula", last_name="Prince",
        email="paula@riverside.test", clerk_id="user_principal",
    )

@pytest.fixture
def count_rows(db_session):
    def _count():
        return {
            "users": db_session.query(User).count(),
            "student_profiles": db_session.query(StudentProfile).count(),
            "teacher_profiles": db_session.query(TeacherProfile).count(),
            "parent_profiles": db_session.query(ParentProfile).count(),
            "principal_profiles": db_session.query(PrincipalProfile).count(),
            "relationships": db_session.query(ParentChildRelationship).count(),
        }
    return _count
