from __future__ import annotations

import redis
from fastapi import APIRouter, Depends, HTTPException, Response, WebSocket, WebSocketDisconnect, status

from catmouse.api.deps import get_publisher, get_redis, get_store, get_wheel
from catmouse.api.models import (
    CatchRequest,
    ColorUpdateRequest,
    Coordinate,
    EventListResponse,
    GameSession,
    GameZone,
    Player,
    PlayerJoinRequest,
    PositionUpdateRequest,
    RoleUpdateRequest,
    SessionStartResponse,
    SessionUpdateRequest,
    SpinResponse,
    ZoneCreateRequest,
    ZoneStatusResponse,
)
from catmouse.broadcast import EventPublisher
from catmouse.errors import ConflictError, GameError, NotFoundError
from catmouse.events import GameEvent
from catmouse.geo import parse_coordinates, point_in_polygon
from catmouse.lifecycle import catch_player, start_session, stop_session
from catmouse.store import GameStore
from catmouse.streams import EVENTS_STREAM_KEY, read_stream
from catmouse.websocket_hub import hub
from catmouse.wheel import RoleWheel, SpinResult

router = APIRouter()


def _http_error(e: GameError) -> HTTPException:
    if isinstance(e, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(e, ConflictError):
        code = status.HTTP_409_CONFLICT
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=str(e))


def _spin_response(spin: SpinResult) -> SpinResponse:
    return SpinResponse(winner=spin.winner, angle=spin.angle, index=spin.index)


@router.websocket("/")
async def game_updates_ws(websocket: WebSocket) -> None:
    await hub.connect(websocket)

    try:
        # Keep the socket open; client can optionally send pings.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await hub.disconnect(websocket)
    except Exception:
        await hub.disconnect(websocket)
        raise


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


# Players


@router.get("/players", response_model=list[Player])
async def list_players_route(store: GameStore = Depends(get_store)) -> list[Player]:
    return store.list_players()


@router.get("/players/active", response_model=list[Player])
async def list_active_players_route(store: GameStore = Depends(get_store)) -> list[Player]:
    return store.list_active_players()


@router.post("/players", response_model=Player, status_code=status.HTTP_201_CREATED)
async def join_route(
    payload: PlayerJoinRequest,
    response: Response,
    store: GameStore = Depends(get_store),
    publisher: EventPublisher = Depends(get_publisher),
) -> Player:
    try:
        player, created = store.create_player(
            username=payload.username,
            role=payload.role,
            latitude=payload.latitude,
            longitude=payload.longitude,
            is_active=payload.is_active,
        )
    except GameError as e:
        raise _http_error(e) from e

    if not created:
        response.status_code = status.HTTP_200_OK
    await publisher.publish(GameEvent.now(type="PLAYER_JOINED" if created else "PLAYER_REJOINED", data=player))
    return player


@router.get("/players/{player_id}", response_model=Player)
async def get_player_route(player_id: int, store: GameStore = Depends(get_store)) -> Player:
    try:
        return store.require_player(player_id)
    except GameError as e:
        raise _http_error(e) from e


@router.patch("/players/{player_id}/position", response_model=Player)
async def update_position_route(
    player_id: int,
    payload: PositionUpdateRequest,
    store: GameStore = Depends(get_store),
    publisher: EventPublisher = Depends(get_publisher),
) -> Player:
    try:
        player = store.update_player_position(player_id, latitude=payload.latitude, longitude=payload.longitude)
    except GameError as e:
        raise _http_error(e) from e

    await publisher.publish(GameEvent.now(type="PLAYER_MOVED", data=player))
    return player


@router.patch("/players/{player_id}/role", response_model=Player)
async def update_role_route(
    player_id: int,
    payload: RoleUpdateRequest,
    store: GameStore = Depends(get_store),
    publisher: EventPublisher = Depends(get_publisher),
) -> Player:
    try:
        player = store.update_player_role(player_id, role=payload.role)
    except GameError as e:
        raise _http_error(e) from e

    await publisher.publish(GameEvent.now(type="PLAYER_ROLE_CHANGED", data=player))
    return player


@router.patch("/players/{player_id}/color", response_model=Player)
async def update_color_route(
    player_id: int,
    payload: ColorUpdateRequest,
    store: GameStore = Depends(get_store),
    publisher: EventPublisher = Depends(get_publisher),
) -> Player:
    try:
        player = store.update_player_color(player_id, color=payload.color)
    except GameError as e:
        raise _http_error(e) from e

    await publisher.publish(GameEvent.now(type="PLAYER_COLOR_CHANGED", data=player))
    return player


@router.patch("/players/{player_id}/disconnect", response_model=Player)
async def disconnect_route(
    player_id: int,
    store: GameStore = Depends(get_store),
    publisher: EventPublisher = Depends(get_publisher),
) -> Player:
    try:
        player = store.deactivate_player(player_id)
    except GameError as e:
        raise _http_error(e) from e

    await publisher.publish(GameEvent.now(type="PLAYER_DISCONNECTED", data=player))
    return player


@router.get("/players/{player_id}/zone", response_model=ZoneStatusResponse)
async def player_zone_route(player_id: int, store: GameStore = Depends(get_store)) -> ZoneStatusResponse:
    """Advisory check: is the player inside the current play zone?

    With no zone drawn yet every player counts as outside.
    """

    try:
        player = store.require_player(player_id)
    except GameError as e:
        raise _http_error(e) from e

    zone = store.current_zone()
    if zone is None:
        return ZoneStatusResponse(player_id=player.id, zone_id=None, inside=False)

    point = Coordinate(latitude=float(player.latitude), longitude=float(player.longitude))
    inside = point_in_polygon(point, parse_coordinates(zone.coordinates))
    return ZoneStatusResponse(player_id=player.id, zone_id=zone.id, inside=inside)


@router.post("/players/{player_id}/catch", response_model=Player)
async def catch_route(
    player_id: int,
    payload: CatchRequest,
    store: GameStore = Depends(get_store),
    publisher: EventPublisher = Depends(get_publisher),
) -> Player:
    try:
        caught = catch_player(store=store, chaser_id=player_id, target_id=payload.target_id)
    except GameError as e:
        raise _http_error(e) from e

    await publisher.publish(GameEvent.now(type="PLAYER_CAUGHT", data=caught))
    return caught


# Zones


@router.get("/zones", response_model=list[GameZone])
async def list_zones_route(store: GameStore = Depends(get_store)) -> list[GameZone]:
    return store.list_game_zones()


@router.post("/zones", response_model=GameZone, status_code=status.HTTP_201_CREATED)
async def create_zone_route(
    payload: ZoneCreateRequest,
    store: GameStore = Depends(get_store),
    publisher: EventPublisher = Depends(get_publisher),
) -> GameZone:
    zone = store.create_game_zone(name=payload.name, coordinates=payload.coordinates)
    await publisher.publish(GameEvent.now(type="ZONE_CREATED", data=zone))
    return zone


@router.get("/zones/current", response_model=GameZone)
async def current_zone_route(store: GameStore = Depends(get_store)) -> GameZone:
    zone = store.current_zone()
    if zone is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No game zone defined")
    return zone


@router.get("/zones/{zone_id}", response_model=GameZone)
async def get_zone_route(zone_id: int, store: GameStore = Depends(get_store)) -> GameZone:
    zone = store.get_game_zone(zone_id)
    if zone is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Game zone not found")
    return zone


# Session


@router.get("/session", response_model=GameSession)
async def get_session_route(store: GameStore = Depends(get_store)) -> GameSession:
    return store.get_or_create_game_session()


@router.patch("/session/{session_id}", response_model=GameSession)
async def update_session_route(
    session_id: int,
    payload: SessionUpdateRequest,
    store: GameStore = Depends(get_store),
    publisher: EventPublisher = Depends(get_publisher),
) -> GameSession:
    try:
        if "zone_id" in payload.model_fields_set:
            session = store.update_game_session(session_id, running=payload.is_running, zone_id=payload.zone_id)
        else:
            session = store.update_game_session(session_id, running=payload.is_running)
    except GameError as e:
        raise _http_error(e) from e

    await publisher.publish(GameEvent.now(type="GAME_STATE_CHANGED", data=session))
    return session


@router.post("/session/{session_id}/start", response_model=SessionStartResponse)
async def start_session_route(
    session_id: int,
    store: GameStore = Depends(get_store),
    wheel: RoleWheel = Depends(get_wheel),
    publisher: EventPublisher = Depends(get_publisher),
) -> SessionStartResponse:
    try:
        result = await start_session(store=store, wheel=wheel, session_id=session_id)
    except GameError as e:
        raise _http_error(e) from e

    spin = _spin_response(result.spin) if result.spin is not None else None
    if spin is not None:
        await publisher.publish(GameEvent.now(type="WHEEL_SPUN", data=spin))
        await publisher.publish(GameEvent.now(type="PLAYER_ROLE_CHANGED", data=spin.winner))
    await publisher.publish(GameEvent.now(type="GAME_STATE_CHANGED", data=result.session))
    return SessionStartResponse(session=result.session, spin=spin)


@router.post("/session/{session_id}/stop", response_model=GameSession)
async def stop_session_route(
    session_id: int,
    store: GameStore = Depends(get_store),
    publisher: EventPublisher = Depends(get_publisher),
) -> GameSession:
    try:
        session = stop_session(store=store, session_id=session_id)
    except GameError as e:
        raise _http_error(e) from e

    await publisher.publish(GameEvent.now(type="GAME_STATE_CHANGED", data=session))
    return session


# Wheel


@router.post("/wheel/spin", response_model=SpinResponse)
async def spin_wheel_route(
    store: GameStore = Depends(get_store),
    wheel: RoleWheel = Depends(get_wheel),
    publisher: EventPublisher = Depends(get_publisher),
) -> SpinResponse:
    try:
        spin = _spin_response(await wheel.spin(store))
    except GameError as e:
        raise _http_error(e) from e

    await publisher.publish(GameEvent.now(type="WHEEL_SPUN", data=spin))
    await publisher.publish(GameEvent.now(type="PLAYER_ROLE_CHANGED", data=spin.winner))
    return spin


@router.get("/events", response_model=EventListResponse)
async def list_events_route(
    count: int = 20,
    start: str = "-",
    end: str = "+",
    r: redis.Redis = Depends(get_redis),
) -> EventListResponse:
    """Debug endpoint: read back the redis events stream.

    Only available when events are published to redis.
    """

    if count < 1 or count > 200:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="count must be between 1 and 200")

    try:
        messages = read_stream(r=r, key=EVENTS_STREAM_KEY, start=start, end=end, count=count)
    except redis.ResponseError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    return EventListResponse(stream=EVENTS_STREAM_KEY, messages=messages)
