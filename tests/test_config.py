from __future__ import annotations

import os
from pathlib import Path

import pytest

from catmouse.config import Settings, load_env_file, settings_from_env


def test_defaults() -> None:
    assert settings_from_env() == Settings()


def test_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CATMOUSE_BROADCAST", "Redis")
    monkeypatch.setenv("REDIS_URL", "redis://cache:6379/2")
    monkeypatch.setenv("CATMOUSE_SPIN_SECONDS", "2.5")
    monkeypatch.setenv("CATMOUSE_LOG_LEVEL", "debug")

    s = settings_from_env()

    assert s == Settings(broadcast="redis", redis_url="redis://cache:6379/2", spin_seconds=2.5, log_level="DEBUG")


@pytest.mark.parametrize(
    ("key", "value"),
    [
        ("CATMOUSE_BROADCAST", "carrier-pigeon"),
        ("CATMOUSE_SPIN_SECONDS", "soon"),
        ("CATMOUSE_SPIN_SECONDS", "-1"),
    ],
)
def test_rejects_bad_values(monkeypatch: pytest.MonkeyPatch, key: str, value: str) -> None:
    monkeypatch.setenv(key, value)
    with pytest.raises(RuntimeError):
        settings_from_env()


def test_env_file_does_not_override_real_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("CATMOUSE_SPIN_SECONDS=3\nCATMOUSE_LOG_LEVEL=WARNING\n", encoding="utf-8")

    # setenv + delenv so monkeypatch restores both keys to "unset" afterwards.
    monkeypatch.setenv("CATMOUSE_SPIN_SECONDS", "x")
    monkeypatch.delenv("CATMOUSE_SPIN_SECONDS")
    monkeypatch.setenv("CATMOUSE_LOG_LEVEL", "ERROR")

    load_env_file(env_file)

    assert os.environ["CATMOUSE_SPIN_SECONDS"] == "3"
    assert os.environ["CATMOUSE_LOG_LEVEL"] == "ERROR"
