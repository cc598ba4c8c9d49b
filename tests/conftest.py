from __future__ import annotations

import os
from collections.abc import Generator
from pathlib import Path

# the limiter reads its default limit at import time
os.environ.setdefault("RATE_LIMIT", "10000/minute")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from app import main as app_main  # noqa: E402
from app.core.database import engine as db_engine  # noqa: E402


@pytest.fixture()
def client(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> Generator[TestClient, None, None]:
    db_path = tmp_path / "orgchart_test.db"
    test_engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    monkeypatch.setattr(db_engine, "engine", test_engine)
    monkeypatch.setattr(
        db_engine,
        "AsyncSessionLocal",
        async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False),
    )

    # entering the client runs the startup hook, which creates the tables
    with TestClient(app_main.app) as test_client:
        yield test_client


@pytest.fixture()
def organization_id(client: TestClient) -> str:
    response = client.post("/organizations/ensure", json={"name": "Acme"})
    assert response.status_code == 201
    return response.json()["id"]
