from __future__ import annotations

import logging
import random
from dataclasses import dataclass

import redis
from fastapi import FastAPI

from catmouse.broadcast import EventPublisher, HubPublisher, NoopPublisher, RedisStreamPublisher
from catmouse.config import Settings
from catmouse.infra.redis_client import create_redis
from catmouse.store import GameStore
from catmouse.websocket_hub import hub
from catmouse.wheel import RoleWheel

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Runtime:
    """Everything a request handler needs, built once per application start."""

    settings: Settings
    store: GameStore
    wheel: RoleWheel
    publisher: EventPublisher
    redis: redis.Redis | None = None


def build_runtime(
    settings: Settings,
    *,
    r: redis.Redis | None = None,
    rng: random.Random | None = None,
) -> Runtime:
    publisher: EventPublisher
    if settings.broadcast == "ws":
        publisher = HubPublisher(hub)
    elif settings.broadcast == "redis":
        r = r if r is not None else create_redis(settings.redis_url)
        publisher = RedisStreamPublisher(r)
    else:
        publisher = NoopPublisher()

    return Runtime(
        settings=settings,
        store=GameStore(),
        wheel=RoleWheel(rng=rng, spin_seconds=settings.spin_seconds),
        publisher=publisher,
        redis=r,
    )


def init_runtime_for_app(app: FastAPI, settings: Settings) -> Runtime:
    runtime = build_runtime(settings)
    app.state.runtime = runtime
    logger.info("runtime ready: broadcast=%s spin_seconds=%s", settings.broadcast, settings.spin_seconds)
    return runtime


def close_runtime(runtime: Runtime) -> None:
    if runtime.redis is None:
        return
    try:
        runtime.redis.close()
    except redis.RedisError:
        logger.warning("error closing redis client", exc_info=True)
