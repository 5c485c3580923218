from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

BROADCAST_MODES = ("noop", "ws", "redis")


@dataclass(frozen=True, slots=True)
class Settings:
    broadcast: str = "noop"
    redis_url: str = "redis://localhost:6379/0"
    spin_seconds: float = 0.0
    log_level: str = "INFO"


def load_env_file(path: Path | None = None) -> None:
    # Real environment variables win over .env entries.
    env_path = path or Path(__file__).resolve().parents[1] / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)


def settings_from_env() -> Settings:
    broadcast = os.environ.get("CATMOUSE_BROADCAST", "noop").strip().lower()
    if broadcast not in BROADCAST_MODES:
        raise RuntimeError(f"CATMOUSE_BROADCAST must be one of {', '.join(BROADCAST_MODES)}, got {broadcast!r}")

    raw_spin = os.environ.get("CATMOUSE_SPIN_SECONDS", "0")
    try:
        spin_seconds = float(raw_spin)
    except ValueError as e:
        raise RuntimeError(f"CATMOUSE_SPIN_SECONDS must be a number, got {raw_spin!r}") from e
    if spin_seconds < 0:
        raise RuntimeError("CATMOUSE_SPIN_SECONDS must be >= 0")

    return Settings(
        broadcast=broadcast,
        redis_url=os.environ.get("REDIS_URL", "redis://localhost:6379/0"),
        spin_seconds=spin_seconds,
        log_level=os.environ.get("CATMOUSE_LOG_LEVEL", "INFO").upper(),
    )
