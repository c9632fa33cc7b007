from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from booktrack.core.settings import AppSettings
from booktrack.db.session import Database
from booktrack.main import create_app
from booktrack.models import Base, Book, User
from booktrack.security.hash import hash_password


@dataclass
class ClientFixture:
    client: TestClient
    database: Database


@pytest.fixture()
def database() -> Database:
    database = Database(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.drop_all(bind=database.engine)
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture()
def db_session(database: Database) -> Session:
    session = database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client_fixture(database: Database) -> ClientFixture:
    settings = AppSettings(api_prefix="/api", database_create_tables=False)
    app = create_app(settings=settings, database=database)
    with TestClient(app) as client:
        yield ClientFixture(client=client, database=database)


@pytest.fixture()
def client(client_fixture: ClientFixture) -> TestClient:
    return client_fixture.client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    def _make(email: str, password: str = "StrongPassword1", full_name: str = "Example Reader") -> User:
        user = User(email=email, password_hash=hash_password(password), full_name=full_name)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture()
def add_books(db_session: Session) -> Callable[..., list[Book]]:
    """Insert books for a user; each entry is a dict of column overrides."""

    def _add(user_id: int, rows: list[dict]) -> list[Book]:
        books = []
        for index, overrides in enumerate(rows):
            values = {
                "title": f"Book {index}",
                "author": f"Author {index}",
                "reading_status": "want_to_read",
                "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc).replace(minute=index % 60, hour=index // 60),
            }
            values.update(overrides)
            books.append(Book(user_id=user_id, **values))
        db_session.add_all(books)
        db_session.commit()
        for book in books:
            db_session.refresh(book)
        return books

    return _add


@pytest.fixture()
def register(client: TestClient) -> Callable[..., tuple[dict[str, str], int]]:
    """Sign up through the API; returns auth headers and the new user id."""

    def _register(email: str, password: str = "StrongPassword1", full_name: str = "Example Reader"):
        response = client.post(
            "/api/auth/register",
            json={"email": email, "password": password, "fullName": full_name},
        )
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        return {"Authorization": f"Bearer {data['token']}"}, data["userId"]

    return _register
