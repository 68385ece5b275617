from __future__ import annotations

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from bandboard.application import create_app
from bandboard.config import Settings
from bandboard.database import Database
from bandboard.models import NewUser
from bandboard.passwords import PasswordHasher

SESSION_SECRET = "tests-secret-key"
EMAIL = "alice@example.com"
PASSWORD = "secret1"

# bcrypt's minimum cost keeps the suite fast; the default cost is covered separately.
TEST_ROUNDS = 4


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        database_path=tmp_path / "bandboard.sqlite3",
        session_secret=SESSION_SECRET,
        bcrypt_rounds=TEST_ROUNDS,
        picture_dir=tmp_path / "pic",
    )


@pytest.fixture()
def database(settings: Settings) -> Database:
    db = Database(settings.database_path)
    db.initialize()
    return db


@pytest.fixture()
def hasher() -> PasswordHasher:
    return PasswordHasher(TEST_ROUNDS)


@pytest.fixture()
def registered_user(database: Database, hasher: PasswordHasher) -> int:
    return database.insert_user(
        NewUser(
            name="alice",
            email=EMAIL,
            password_hash=hasher.hash(PASSWORD),
            first_name="Alice",
            last_name="Liddell",
        )
    )


@pytest.fixture()
def app(settings: Settings, database: Database):
    return create_app(settings, database=database)


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def login(client: TestClient, email: str = EMAIL, password: str = PASSWORD):
    return client.post(
        "/login",
        data={"user_email": email, "user_pass": password},
        follow_redirects=False,
    )
