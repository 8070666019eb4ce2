"""
Configuración común de pytest: SQLite temporal y cliente de la API
"""
import os
import tempfile

# Antes de importar la aplicación: get_settings() se cachea al importar
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(tempfile.mkdtemp(), "test.db")
os.environ["REMINDERS_ENABLED"] = "false"
os.environ["DEFAULT_TIMEZONE"] = "Europe/Warsaw"

import pytest
from fastapi.testclient import TestClient

from drugreminder.core.database import SessionLocal, create_tables, drop_tables
from drugreminder.core.dependencies import get_app_clock
from drugreminder.main import app

from tests.fakes import FixedClock


@pytest.fixture
def database():
    create_tables()
    yield
    drop_tables()


@pytest.fixture
def db_session(database):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FixedClock("2024-06-15 08:03")


@pytest.fixture
def client(database, clock):
    app.dependency_overrides[get_app_clock] = lambda: clock
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def register(client, email, role="patient", password="secreto123"):
    response = client.post("/api/auth/register", json={
        "email": email,
        "password": password,
        "confirm_password": password,
        "role": role,
    })
    assert response.status_code == 201, response.text
    return response.json()


def login(client, email, password="secreto123"):
    response = client.post("/api/auth/login", data={"username": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def patient_headers(client):
    register(client, "anna@mail.com")
    return login(client, "anna@mail.com")


@pytest.fixture
def caregiver_headers(client):
    register(client, "marek@mail.com", role="caregiver")
    return login(client, "marek@mail.com")
