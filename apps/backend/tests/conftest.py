from __future__ import annotations

import os
import tempfile
from typing import Generator, Any

import pytest
from sqlalchemy.orm import sessionmaker

from money_diary.core.database import Base, create_db_engine, get_db
from money_diary.main import app
from money_diary import models
from money_diary.seed import seed_defaults


@pytest.fixture(scope="session")
def test_db_url() -> Generator[str, Any, Any]:
    # temporary SQLite file so the developer database is never touched
    fd, path = tempfile.mkstemp(prefix="money_diary_test_", suffix=".sqlite3")
    os.close(fd)
    url = f"sqlite:///{path}"
    yield url
    try:
        os.remove(path)
    except OSError:
        pass


@pytest.fixture(scope="session")
def engine(test_db_url: str):
    eng = create_db_engine(test_db_url, wal=False)
    Base.metadata.create_all(eng)
    return eng


@pytest.fixture(scope="function")
def db_session(engine) -> Generator[Any, Any, Any]:
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = TestingSessionLocal()
    # every test starts from: demo user + system default templates
    session.add(models.User(email="demo@example.com", name="Demo", is_active=True))
    seed_defaults(session)
    session.commit()

    try:
        yield session
    finally:
        session.close()
        # children first, so foreign keys stay enforced
        with engine.begin() as conn:
            for tbl in reversed(Base.metadata.sorted_tables):
                conn.execute(tbl.delete())


@pytest.fixture()
def user(db_session) -> models.User:
    return db_session.query(models.User).filter_by(email="demo@example.com").one()


@pytest.fixture()
def other_user(db_session) -> models.User:
    u = models.User(email="other@example.com", name="Other", is_active=True)
    db_session.add(u)
    db_session.commit()
    return u


@pytest.fixture()
def initialized_user(db_session, user) -> models.User:
    from money_diary.services import CategoryInitializationService

    CategoryInitializationService(db_session).initialize_for_user(user.id)
    return user


@pytest.fixture(autouse=True)
def override_dependency(db_session):
    # FastAPI DI override
    def _get_db_override():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = _get_db_override
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
def client(db_session):
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c
