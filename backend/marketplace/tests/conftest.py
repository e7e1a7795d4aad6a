import os
import tempfile
from pathlib import Path
from uuid import uuid4

import pytest

TEST_DB_FILE = Path(tempfile.gettempdir()) / f"test_marketplace_{uuid4().hex}.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_FILE.as_posix()}"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ALGORITHM", "HS256")
os.environ.setdefault("ACCESS_TOKEN_EXPIRE_MINUTES", "60")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DB_BOOTSTRAP_MODE", "off")

from fastapi.testclient import TestClient  # noqa: E402

from marketplace.core.roles import Role  # noqa: E402
from marketplace.database.base import Base  # noqa: E402
from marketplace.database.session import SessionLocal, engine  # noqa: E402
from marketplace.main import app  # noqa: E402
from marketplace.schemas.user import Identity  # noqa: E402
from marketplace.services.identity import register_user  # noqa: E402


@pytest.fixture(autouse=True)
def reset_database():
    engine.dispose()
    if TEST_DB_FILE.exists():
        TEST_DB_FILE.unlink()
    Base.metadata.create_all(bind=engine)
    try:
        yield
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()
        if TEST_DB_FILE.exists():
            TEST_DB_FILE.unlink()


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


def create_identity(db, username: str, role: Role, password: str = "secret") -> Identity:
    user = register_user(db, username, password, role)
    return Identity(id=user.id, username=user.username, role=Role(user.role))


def register_and_login(client: TestClient, username: str, password: str, role: str) -> dict[str, str]:
    response = client.post(
        "/auth/register",
        json={"username": username, "password": password, "role": role},
    )
    assert response.status_code == 201, response.text
    response = client.post("/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    # Keep requests explicit about which identity they carry.
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
