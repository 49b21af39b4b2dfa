import os

os.environ.setdefault("EXAMHALL_DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient

from examhall import config
from examhall.database import Base, engine, SessionLocal
from examhall.main_api import app


@pytest.fixture(autouse=True)
def fresh_tables():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def export_dir(tmp_path, monkeypatch):
    directory = tmp_path / "exports"
    monkeypatch.setattr(config, "EXPORT_DIR", str(directory))
    return directory


@pytest.fixture
def client(export_dir):
    return TestClient(app)
