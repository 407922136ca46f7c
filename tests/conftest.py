import pytest
from fastapi.testclient import TestClient

from src.jangatub.db.session import sync_engine
from src.jangatub.main import app
from src.jangatub.models import Base, Level, Subject
from src.jangatub.schemas.enums import Role
from tests.utils import make_badges, make_catalogue_entry, make_user


@pytest.fixture(autouse=True)
def database():
    """Fresh schema for every test."""
    Base.metadata.drop_all(sync_engine)
    Base.metadata.create_all(sync_engine)
    yield
    Base.metadata.drop_all(sync_engine)


@pytest.fixture
def client():
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def bac():
    return make_catalogue_entry(Level, "bac", "BAC")


@pytest.fixture
def maths():
    return make_catalogue_entry(Subject, "mathematiques", "Mathématiques")


@pytest.fixture
def physics():
    return make_catalogue_entry(Subject, "physique-chimie", "Physique-Chimie")


@pytest.fixture
def student():
    return make_user("student@example.com", name="Moussa")


@pytest.fixture
def admin():
    return make_user("admin@example.com", name="Admin", role=Role.ADMIN)


@pytest.fixture
def badges():
    make_badges()
