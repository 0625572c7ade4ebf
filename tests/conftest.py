"""Shared pytest fixtures for server tests."""

from __future__ import annotations

import asyncio
import os
from collections.abc import Generator

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# The login limiter is configured at import time.
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import main
from app.db.base import Base
from app.db.session import get_db
from app.services.file_storage import FileStorageError, get_file_storage


TEST_DATABASE_URL = "sqlite+pysqlite:///:memory:"

test_engine = create_engine(
    TEST_DATABASE_URL,
    future=True,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(
    bind=test_engine,
    autocommit=False,
    autoflush=False,
    future=True,
)

Base.metadata.create_all(bind=test_engine)


class SyncASGITestClient:
    """Synchronous wrapper around httpx.AsyncClient for ASGI apps."""

    def __init__(self, app) -> None:
        transport = httpx.ASGITransport(app=app)
        self._client = httpx.AsyncClient(transport=transport, base_url="http://testserver")

    def request(self, method: str, url: str, **kwargs) -> httpx.Response:
        return asyncio.run(self._client.request(method, url, **kwargs))

    def get(self, url: str, **kwargs) -> httpx.Response:
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs) -> httpx.Response:
        return self.request("POST", url, **kwargs)

    def delete(self, url: str, **kwargs) -> httpx.Response:
        return self.request("DELETE", url, **kwargs)

    def put(self, url: str, **kwargs) -> httpx.Response:
        return self.request("PUT", url, **kwargs)

    def patch(self, url: str, **kwargs) -> httpx.Response:
        return self.request("PATCH", url, **kwargs)

    def __enter__(self) -> "SyncASGITestClient":
        return self

    def __exit__(self, exc_type, exc, traceback) -> None:
        asyncio.run(self._client.aclose())


class FakeFileStorage:
    """In-memory stand-in for the Google Drive storage client."""

    def __init__(self) -> None:
        self.uploads: list[dict[str, object]] = []
        self.deleted: list[str] = []
        self.fail_uploads = False
        self.fail_deletes = False

    def upload(self, content: bytes, filename: str, mime_type: str) -> str:
        if self.fail_uploads:
            raise FileStorageError("upload refused")
        file_id = f"drive-file-{len(self.uploads) + 1}"
        self.uploads.append(
            {"id": file_id, "content": content, "filename": filename, "mime_type": mime_type}
        )
        return file_id

    def delete(self, file_id: str) -> None:
        if self.fail_deletes:
            raise FileStorageError("delete refused")
        self.deleted.append(file_id)


def login_with_email_code(
    client: SyncASGITestClient,
    sent: list[dict[str, str]],
    email: str,
) -> dict[str, str]:
    """Run the login and authenticate endpoints, returning the token pair."""

    login_response = client.post("/auth/login", json={"email": email})
    assert login_response.status_code == 200
    code = sent[-1]["code"]

    authenticate_response = client.post(
        "/auth/authenticate",
        json={"email": email, "emailToken": code},
    )
    assert authenticate_response.status_code == 200
    return authenticate_response.json()


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(autouse=True)
def verify_connection_tracker(monkeypatch: pytest.MonkeyPatch) -> Generator[dict[str, int], None, None]:
    """Track how many times the startup connection verifier is called."""

    tracker = {"calls": 0, "migrations": 0}

    def fake_verify_connection() -> None:
        tracker["calls"] += 1

    def fake_run_migrations() -> None:
        tracker["migrations"] += 1

    monkeypatch.setattr(main, "verify_connection", fake_verify_connection)
    monkeypatch.setattr(main, "run_migrations", fake_run_migrations)
    yield tracker


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    """Provide a clean database session for each test."""

    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    session: Session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def override_get_db(db_session: Session) -> Generator[None, None, None]:
    """Override the FastAPI dependency to use the test session."""

    def _get_db() -> Generator[Session, None, None]:
        try:
            yield db_session
        finally:
            pass

    main.app.dependency_overrides[get_db] = _get_db
    yield
    main.app.dependency_overrides.pop(get_db, None)


@pytest.fixture(autouse=True)
def file_storage() -> Generator[FakeFileStorage, None, None]:
    """Replace Google Drive with an in-memory fake."""

    storage = FakeFileStorage()
    main.app.dependency_overrides[get_file_storage] = lambda: storage
    yield storage
    main.app.dependency_overrides.pop(get_file_storage, None)


@pytest.fixture()
def client() -> Generator[SyncASGITestClient, None, None]:
    """Synchronous test client backed by httpx's ASGI transport."""

    with SyncASGITestClient(main.app) as test_client:
        yield test_client


@pytest.fixture(autouse=True)
def capture_outbound_email(monkeypatch: pytest.MonkeyPatch) -> Generator[list[dict[str, str]], None, None]:
    """Record outbound login codes for assertions."""

    sent: list[dict[str, str]] = []

    def _capture(recipient: str, code: str) -> None:
        sent.append({"recipient": recipient, "code": code})

    monkeypatch.setattr("app.services.email.send_login_code_email", _capture)
    monkeypatch.setattr("app.services.tokens.send_login_code_email", _capture)
    monkeypatch.setattr("app.services.send_login_code_email", _capture)
    yield sent


@pytest.fixture()
def session_tokens(
    client: SyncASGITestClient,
    capture_outbound_email: list[dict[str, str]],
) -> dict[str, str]:
    """Log ``user@example.com`` in and return its access and refresh tokens."""

    return login_with_email_code(client, capture_outbound_email, "user@example.com")


@pytest.fixture()
def auth_headers(session_tokens: dict[str, str]) -> dict[str, str]:
    return bearer(session_tokens["accessToken"])
