from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    # Wire format is camelCase (isActive, zoneId); snake_case is accepted too.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RoleName(StrEnum):
    chaser = "Loup"
    evader = "Souris"


def _decimal_string(value: object, *, limit: float, name: str) -> str:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a decimal number")
    if isinstance(value, (int, float)):
        value = str(value)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{name} is required")
    try:
        parsed = float(value)
    except ValueError as e:
        raise ValueError(f"{name} must be a decimal number") from e
    if not -limit <= parsed <= limit:
        raise ValueError(f"{name} must be between {-limit:g} and {limit:g}")
    return value.strip()


class PositionFields(CamelModel):
    latitude: str
    longitude: str

    @field_validator("latitude", mode="before")
    @classmethod
    def _check_latitude(cls, v: object) -> str:
        return _decimal_string(v, limit=90.0, name="latitude")

    @field_validator("longitude", mode="before")
    @classmethod
    def _check_longitude(cls, v: object) -> str:
        return _decimal_string(v, limit=180.0, name="longitude")


class StoredRecord(CamelModel):
    # Store updates go through model_copy(update=...); records are never edited in place.
    model_config = ConfigDict(frozen=True)


class Coordinate(BaseModel):
    latitude: float
    longitude: float


class Player(StoredRecord):
    id: int
    username: str
    role: RoleName = RoleName.evader
    latitude: str
    longitude: str
    is_active: bool = True
    color: str | None = None


class GameZone(StoredRecord):
    id: int
    name: str

    # JSON text of [{"latitude": .., "longitude": ..}, ...], kept verbatim.
    coordinates: str


class GameSession(StoredRecord):
    id: int
    is_running: bool = False
    zone_id: int | None = None


class PlayerJoinRequest(PositionFields):
    username: str = Field(..., min_length=4, max_length=16)
    role: RoleName = RoleName.evader
    is_active: bool = True


class PositionUpdateRequest(PositionFields):
    pass


class RoleUpdateRequest(CamelModel):
    role: RoleName


class ColorUpdateRequest(CamelModel):
    color: str = Field(..., min_length=1)


class CatchRequest(CamelModel):
    target_id: int


class ZoneCreateRequest(CamelModel):
    name: str = Field(..., min_length=1)
    coordinates: str

    @field_validator("coordinates")
    @classmethod
    def _check_coordinates(cls, v: str) -> str:
        from catmouse.geo import parse_coordinates

        parse_coordinates(v)
        return v


class SessionUpdateRequest(CamelModel):
    is_running: bool
    zone_id: int | None = None


class SpinResponse(CamelModel):
    winner: Player
    angle: float
    index: int


class SessionStartResponse(CamelModel):
    session: GameSession
    spin: SpinResponse | None = None


class ZoneStatusResponse(CamelModel):
    player_id: int
    zone_id: int | None
    inside: bool


class EventListResponse(BaseModel):
    stream: str
    messages: list[dict[str, object]]
