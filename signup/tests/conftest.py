import os
import uuid
from datetime import datetime, timedelta, timezone

# Keep the application's own engine off disk; tests bind their own below
os.environ.setdefault("SIGNUP_DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import delete
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session

from signup.database.db import Base, get_db, make_engine
from signup.main import app
from signup.models.events import Event
from signup.models.registrations import Registration
from signup.models.users import User


# File-backed SQLite so that worker threads get real, separate connections
@pytest.fixture(scope="session")
def engine(tmp_path_factory):
    db_path = tmp_path_factory.mktemp("db") / "signup_test.db"
    engine = make_engine(f"sqlite:///{db_path}", lock_timeout_ms=30000)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="session")
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture(autouse=True)
def clean_tables(engine):
    yield
    with engine.begin() as conn:
        conn.execute(delete(Registration))
        conn.execute(delete(Event))
        conn.execute(delete(User))


@pytest.fixture
def db_session(session_factory):
    db: Session = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client(session_factory):
    # Override the database dependency
    def override_get_db():
        db: Session = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


@pytest.fixture
def make_event(db_session: Session, now: datetime):
    """Insert an event; defaults to published, open for a week, capacity 10."""

    def _make_event(**overrides) -> Event:
        values = {
            "title": "Career Fair",
            "capacity": 10,
            "signup_deadline": now + timedelta(days=7),
            "starts_at": now + timedelta(days=8),
            "is_published": True,
        }
        values.update(overrides)
        event = Event(**values)
        db_session.add(event)
        db_session.commit()
        return event

    return _make_event


@pytest.fixture
def make_student(db_session: Session):
    def _make_student(name: str | None = None) -> User:
        suffix = uuid.uuid4().hex[:8]
        student = User(name=name or f"Student {suffix}", email=f"{suffix}@students.example.edu")
        db_session.add(student)
        db_session.commit()
        return student

    return _make_student
