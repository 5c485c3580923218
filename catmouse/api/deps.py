from __future__ import annotations

import redis
from fastapi import Depends, HTTPException, Request, status

from catmouse.broadcast import EventPublisher
from catmouse.runtime import Runtime
from catmouse.store import GameStore
from catmouse.wheel import RoleWheel


def get_runtime(request: Request) -> Runtime:
    return request.app.state.runtime


def get_store(runtime: Runtime = Depends(get_runtime)) -> GameStore:
    return runtime.store


def get_wheel(runtime: Runtime = Depends(get_runtime)) -> RoleWheel:
    return runtime.wheel


def get_publisher(runtime: Runtime = Depends(get_runtime)) -> EventPublisher:
    return runtime.publisher


def get_redis(runtime: Runtime = Depends(get_runtime)) -> redis.Redis:
    if runtime.redis is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event stream is not enabled")
    return runtime.redis
