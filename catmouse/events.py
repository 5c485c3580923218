from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel

EventType = Literal[
    "PLAYER_JOINED",
    "PLAYER_REJOINED",
    "PLAYER_MOVED",
    "PLAYER_ROLE_CHANGED",
    "PLAYER_COLOR_CHANGED",
    "PLAYER_DISCONNECTED",
    "PLAYER_CAUGHT",
    "WHEEL_SPUN",
    "ZONE_CREATED",
    "GAME_STATE_CHANGED",
]


@dataclass(frozen=True, slots=True)
class GameEvent:
    type: EventType
    data: dict[str, Any]
    ts: datetime

    @staticmethod
    def now(*, type: EventType, data: BaseModel | dict[str, Any]) -> "GameEvent":
        if isinstance(data, BaseModel):
            data = data.model_dump(mode="json", by_alias=True)
        return GameEvent(type=type, data=data, ts=datetime.now(timezone.utc))

    def to_message(self) -> dict[str, Any]:
        return {"type": self.type, "data": self.data, "ts": self.ts.isoformat()}
