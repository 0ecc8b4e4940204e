import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["LOG_FILE"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from regixo.core.security import create_access_token
from regixo.db.base import Base
from regixo.db.session import build_engine, get_db
from regixo.main import app
from tests import factories


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'regixo-test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    for factory_class in factories.ALL_FACTORIES:
        factory_class._meta.sqlalchemy_session = session
    yield session
    session.close()


@pytest.fixture
def client(session_factory, db_session):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def organizer_id():
    return factories.DEFAULT_ORGANIZER_ID


@pytest.fixture
def auth_headers(organizer_id):
    token = create_access_token({"sub": organizer_id, "role": "authenticated"})
    return {"Authorization": f"Bearer {token}"}
