import os

# Settings exige estas variáveis; definir antes de importar o pacote
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_JSON", "false")

import datetime as dt
import uuid

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import alunos.db.base  # noqa: F401  registra todas as models
from alunos.client.gateway import StudentGateway
from alunos.core.security import create_access_token, hash_password
from alunos.db import get_db
from alunos.db.base_class import Base
from alunos.models.student import Student, StudentStatus
from alunos.models.user import Profile, Role, User
from alunos.schemas.auth import AuthSession
from alunos.schemas.students import StudentOut

PASSWORD = "TestPass123!"


# Create an in-memory SQLite database for testing
@pytest.fixture(scope="session")
def engine():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="session")
def TestingSessionLocal(engine):
    """Create a session factory for the test database."""
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture(autouse=True)
def _clean_tables(engine):
    """Cada teste começa com o banco vazio."""
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


# Override the database dependency to use our test database
@pytest.fixture
def override_get_db(TestingSessionLocal):
    """Override the database dependency to use our test database."""
    def _override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()
    return _override_get_db


@pytest.fixture
def db_session(TestingSessionLocal):
    """Create a database session for each test."""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(override_get_db):
    """Create a test client for API tests."""
    from fastapi.testclient import TestClient
    from alunos.main import app

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def asgi_gateway(override_get_db):
    """Gateway real (httpx) falando com o app em processo, sem rede."""
    from alunos.main import app

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    http = httpx.AsyncClient(transport=transport, base_url="http://testserver")
    yield StudentGateway(http)
    app.dependency_overrides.clear()


def _create_user(db_session, *, name, email, role, is_active=True):
    user = User(
        name=name,
        email=email,
        password_hash=hash_password(PASSWORD),
        is_active=is_active,
    )
    db_session.add(user)
    db_session.flush()
    if role is not None:
        db_session.add(Profile(id=user.id, role=role))
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def admin_user(db_session):
    return _create_user(
        db_session, name="Admin User", email="admin@example.com", role=Role.ADMIN.value
    )


@pytest.fixture
def regular_user(db_session):
    return _create_user(
        db_session, name="Regular User", email="user@example.com", role=Role.USER.value
    )


@pytest.fixture
def user_without_profile(db_session):
    return _create_user(
        db_session, name="No Profile", email="noprofile@example.com", role=None
    )


def bearer(user) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}


@pytest.fixture
def admin_headers(admin_user):
    return bearer(admin_user)


@pytest.fixture
def user_headers(regular_user):
    return bearer(regular_user)


@pytest.fixture
def student_payload():
    return {
        "full_name": "Ana Silva",
        "birth_date": "2000-01-01",
        "email": "ana@x.com",
        "phone": "11999999999",
        "course": "Engenharia",
        "registration_number": "2024001",
        "status": "Ativo",
    }


@pytest.fixture
def test_student(db_session):
    student = Student(
        full_name="Bruno Costa",
        birth_date=dt.date(2001, 5, 20),
        email="bruno@x.com",
        phone="11988887777",
        course="Direito",
        registration_number="2023010",
        status=StudentStatus.ACTIVE,
    )
    db_session.add(student)
    db_session.commit()
    db_session.refresh(student)
    return student


def make_student(**overrides) -> StudentOut:
    now = dt.datetime(2025, 3, 1, 12, 0, tzinfo=dt.UTC)
    data = {
        "id": str(uuid.uuid4()),
        "full_name": "Carla Souza",
        "birth_date": "1999-12-31",
        "email": "carla@x.com",
        "phone": "11977776666",
        "course": "Medicina",
        "registration_number": "2022001",
        "status": "Ativo",
        "created_at": now,
        "updated_at": now,
    }
    data.update(overrides)
    return StudentOut.model_validate(data)


@pytest.fixture
def student_factory():
    return make_student


class FakeGateway:
    """Gateway em memória: registra as chamadas e falha sob demanda."""

    def __init__(self):
        self.students: list[StudentOut] = []
        self.calls: list[tuple] = []
        # nome da operação -> exceção a levantar
        self.fail: dict[str, Exception] = {}
        self.session: AuthSession | None = AuthSession(
            user_id=1, email="admin@example.com", name="Admin User"
        )
        self.role = Role.ADMIN.value
        self.signed_in = True

    def _call(self, op, *args):
        self.calls.append((op, *args))
        if op in self.fail:
            raise self.fail[op]

    def count(self, op) -> int:
        return sum(1 for c in self.calls if c[0] == op)

    async def list_students(self):
        self._call("list_students")
        return list(self.students)

    async def insert_student(self, candidate):
        self._call("insert_student", dict(candidate))
        now = dt.datetime.now(dt.UTC)
        created = StudentOut.model_validate(
            {**candidate, "id": str(uuid.uuid4()), "created_at": now, "updated_at": now}
        )
        self.students.insert(0, created)
        return created

    async def update_student(self, student_id, candidate):
        self._call("update_student", student_id, dict(candidate))
        self.students = [
            StudentOut.model_validate({**s.model_dump(), **candidate})
            if s.id == student_id
            else s
            for s in self.students
        ]

    async def delete_student(self, student_id):
        self._call("delete_student", student_id)
        self.students = [s for s in self.students if s.id != student_id]

    async def sign_in(self, email, password):
        self._call("sign_in", email)
        self.signed_in = True

    async def get_session(self):
        self._call("get_session")
        return self.session if self.signed_in else None

    async def sign_out(self):
        self._call("sign_out")
        self.signed_in = False

    async def fetch_role(self, user_id):
        self._call("fetch_role", user_id)
        return self.role


@pytest.fixture
def fake_gateway():
    return FakeGateway()
