"""Shared test fixtures."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from qubrain import create_app
from qubrain.config import settings
from qubrain.services.clock import get_clock

T0 = datetime(2026, 3, 10, 9, 30, tzinfo=timezone.utc)


class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.current = now

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


def parse_ts(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@pytest.fixture
def clock():
    return FixedClock(T0)


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    path = tmp_path / "data"
    monkeypatch.setattr(settings, "data_dir", path)
    return path


@pytest.fixture
def client(data_dir, clock):
    """TestClient over a fresh SQLite database, with the clock frozen at T0."""
    app = create_app()
    app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(app) as c:
        yield c


def register(client, email="ada@example.com", name="Ada", password="s3cret"):
    res = client.post(
        "/auth/register", json={"name": name, "email": email, "password": password}
    )
    assert res.status_code == 201, res.text
    return res.json()


@pytest.fixture
def auth_headers(client):
    token = register(client)["token"]
    return {"Authorization": f"Bearer {token}"}
