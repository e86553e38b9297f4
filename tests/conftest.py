
# BIZMANAGER/backend/tests/conftest.py : configuration pour les tests

import sys
from pathlib import Path

# Ajoute le dossier parent au PYTHONPATH
BASE_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(BASE_DIR))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from app.main import app
from app.database import Base, get_db
from app.models import models  # noqa: F401  (enregistre les tables)


@pytest.fixture
def db_engine():
    """Base SQLite en mémoire, recréée pour chaque test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)()
    yield session
    session.close()


@pytest.fixture
def client(db_session):
    """Client de test branché sur la base de test"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def register_and_login(client, email, password="Test123!"):
    """Inscrit un admin et renvoie les en-têtes d'authentification"""
    response = client.post("/users/register", json={"email": email, "password": password})
    assert response.status_code == 200
    return login_headers(client, email, password)


def login_headers(client, email, password):
    response = client.post("/users/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
