#configuracion de los test
import os
import sys
import tempfile
import uuid
from pathlib import Path
from typing import Callable, Dict, Generator

import pytest
from fastapi.testclient import TestClient

# ======================================================
# Base de datos SQLite desechable (antes de importar app)
# ======================================================
_TEST_DB = Path(tempfile.gettempdir()) / f"peer_reads_test_{uuid.uuid4().hex}.db"
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DB}"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["SEED_DEMO_DATA"] = "false"

# ======================================================
# Ajuste del sys.path para que 'app/' sea importable
# ======================================================
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

# ======================================================
# Imports de la aplicación
# ======================================================
from app.main import app
from app.db.session import Base, SessionLocal, engine
from app.db import models  # noqa: F401


# ======================================================
# ESQUEMA LIMPIO POR TEST
# ======================================================
@pytest.fixture(autouse=True)
def reset_database() -> Generator:
    """
    Cada test arranca con las tablas vacías: así el primer registro
    siempre es el primer usuario de la instancia.
    """
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def pytest_sessionfinish(session, exitstatus):
    engine.dispose()
    if _TEST_DB.exists():
        _TEST_DB.unlink()


# ======================================================
# DB SESSION FIXTURE
# ======================================================
@pytest.fixture
def db_session() -> Generator:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


# ======================================================
# CLIENT FIXTURE
# ======================================================
@pytest.fixture
def client() -> Generator:
    """
    TestClient de FastAPI (con contexto, ejecuta el startup).
    """
    with TestClient(app) as c:
        yield c


# ======================================================
# HELPERS DE USUARIOS
# ======================================================
def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register_user(client: TestClient) -> Callable[..., Dict]:
    """
    Registra un usuario y devuelve el JSON {token, user} más `headers`.
    """

    def _register(full_name: str, email: str, password: str = "secret123") -> Dict:
        resp = client.post(
            "/api/auth/register",
            json={"full_name": full_name, "email": email, "password": password},
        )
        assert resp.status_code == 201, resp.text
        data = resp.json()
        data["headers"] = bearer(data["token"])
        return data

    return _register


@pytest.fixture
def admin(register_user) -> Dict:
    """Primer usuario registrado: queda como ADMIN."""
    return register_user("Alice Owner", "alice@mail.com")


@pytest.fixture
def member(admin, register_user) -> Dict:
    """Segundo usuario registrado: rol USER."""
    return register_user("Bob Reader", "bob@mail.com")


@pytest.fixture
def create_book(client: TestClient) -> Callable[..., Dict]:
    def _create(headers: Dict, title: str = "Dune", author: str = "Frank Herbert", **extra) -> Dict:
        payload = {"title": title, "author": author, **extra}
        resp = client.post("/api/books", json=payload, headers=headers)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _create
