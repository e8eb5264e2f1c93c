import os

# Must be set before the application modules read their settings
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient

from core.database import Base, SessionLocal, engine
from main import app
from modules.inventory.service import ItemStore


@pytest.fixture(autouse=True)
def tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db):
    return ItemStore(db)


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()
