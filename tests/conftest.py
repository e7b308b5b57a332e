import pytest
from fastapi.testclient import TestClient

import catalog
import customers
from config import ServerConfig
from main import create_app
from schemas import CustomerCreate, ServiceCreate


@pytest.fixture
def app():
    """API instance backed by a private in-memory SQLite database"""
    return create_app(ServerConfig(database_url="sqlite://"))


@pytest.fixture
def db(app):
    session = app.state.session_factory()
    yield session
    session.close()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def customer(db):
    return customers.create_customer(db, CustomerCreate(
        first_name="Jane",
        last_name="Smith",
        email="jane.smith@example.com",
        phone="555-0100",
        date_of_birth="1990-01-01",
        notes="Prefers mornings",
    ))


@pytest.fixture
def service(db):
    return catalog.create_service(db, ServiceCreate(
        name="Haircut",
        description="Wash, cut and style",
        duration_minutes=45,
        price="35.00",
    ))
