import os
from decimal import Decimal

import pytest
from dotenv import load_dotenv
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import models  # noqa: F401
from app.container import configure_container, reset_container
from app.db import Base, get_db
from app.models.company import Company
from app.models.user import User, UserRole
from app.schemas.inventory import MaterialCreate, ProjectMaterialCreate
from app.schemas.projects import ProjectCreate
from app.services import inventory as inventory_service
from app.services import projects as projects_service
from app.services.auth import create_access_token, hash_password

load_dotenv(os.path.join(os.getcwd(), ".env"))

TEST_PASSWORD = "secret123"


class _JoseDateTimeProxy:
    @staticmethod
    def utcnow():
        from datetime import UTC, datetime

        return datetime.now(UTC)

    @staticmethod
    def now(tz=None):
        from datetime import datetime

        return datetime.now(tz)

    def __getattr__(self, name: str):
        from datetime import datetime

        return getattr(datetime, name)


@pytest.fixture(autouse=True)
def _patch_jose_datetime(monkeypatch):
    import jose.jwt as jose_jwt

    monkeypatch.setattr(jose_jwt, "datetime", _JoseDateTimeProxy, raising=False)


@pytest.fixture(autouse=True)
def auth_env(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", os.getenv("JWT_SECRET", "test-secret"))


@pytest.fixture()
def engine():
    # One in-memory database per test, shared by every session through StaticPool.
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    configure_container(engine)
    yield engine
    reset_container()
    engine.dispose()


@pytest.fixture()
def db_session(engine):
    session = sessionmaker(bind=engine, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(engine):
    from app.main import app

    TestingSession = sessionmaker(bind=engine, autoflush=False)

    def _get_test_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_test_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def _create_company(db_session, name: str) -> Company:
    company = Company(name=name)
    db_session.add(company)
    db_session.commit()
    db_session.refresh(company)
    return company


def _create_user(db_session, company: Company, role: UserRole, **fields) -> User:
    user = User(
        password_hash=hash_password(TEST_PASSWORD),
        role=role,
        company_id=company.id,
        is_active=True,
        **fields,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture()
def company(db_session):
    return _create_company(db_session, "Studio Nine Interiors")


@pytest.fixture()
def other_company(db_session):
    return _create_company(db_session, "Rival Builders")


@pytest.fixture()
def admin_user(db_session, company):
    return _create_user(db_session, company, UserRole.admin, name="Asha Admin", email="asha@studionine.com")


@pytest.fixture()
def engineer_user(db_session, company):
    return _create_user(db_session, company, UserRole.site_engineer, name="Ravi Site", username="ravi.site")


@pytest.fixture()
def other_admin(db_session, other_company):
    return _create_user(db_session, other_company, UserRole.admin, name="Omar Other", email="omar@rivalbuilders.com")


@pytest.fixture()
def project(db_session, company):
    return projects_service.projects.create(
        db_session,
        company.id,
        ProjectCreate(
            project_code="PRJ-101",
            name="Lakeview Apartment Fit-out",
            client_name="Meera Kapoor",
            budget=Decimal("500000"),
        ),
    )


@pytest.fixture()
def other_project(db_session, other_company):
    return projects_service.projects.create(
        db_session,
        other_company.id,
        ProjectCreate(project_code="PRJ-900", name="Harbour Office", client_name="Harbour Ltd"),
    )


@pytest.fixture()
def material(db_session, company):
    return inventory_service.materials.create(
        db_session,
        company.id,
        MaterialCreate(
            name="Plywood 18mm",
            category="Wood",
            unit="sheet",
            default_rate=Decimal("2450.00"),
            vendor="Greenply",
        ),
    )


@pytest.fixture()
def allocation(db_session, company, project, material):
    return inventory_service.project_materials.create(
        db_session,
        company.id,
        ProjectMaterialCreate(project_id=project.id, material_id=material.id, assigned=Decimal("50")),
    )


@pytest.fixture()
def auth_headers():
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user)}"}

    return _headers
