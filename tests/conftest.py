from __future__ import annotations

from collections.abc import Generator

import fakeredis
import pytest
from fastapi.testclient import TestClient

from catmouse.config import Settings
from catmouse.main import app
from catmouse.runtime import build_runtime

_ENV_KEYS = ("CATMOUSE_BROADCAST", "CATMOUSE_SPIN_SECONDS", "CATMOUSE_LOG_LEVEL", "REDIS_URL")


@pytest.fixture(autouse=True)
def _hermetic_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every test with default settings, whatever the shell (or a .env) says."""

    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    # Startup builds a fresh runtime (store, wheel, publisher) for each client.
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def client_and_redis() -> Generator[tuple[TestClient, fakeredis.FakeRedis], None, None]:
    """Client whose events go to a fakeredis stream instead of being dropped."""

    r = fakeredis.FakeRedis(decode_responses=True)
    with TestClient(app) as c:
        app.state.runtime = build_runtime(Settings(broadcast="redis"), r=r)
        yield c, r
