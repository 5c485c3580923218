from __future__ import annotations

import logging

from catmouse.api.models import GameSession, GameZone, Player, RoleName
from catmouse.errors import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

CURRENT_SESSION_ID = 1

_UNSET = object()


class GameStore:
    """In-process owner of players, zones and sessions.

    Records are immutable pydantic models; each mutation swaps in an updated copy,
    so a model handed to a caller never changes under it.

    None of the methods await, so under the event loop every operation completes
    before another request is served.
    """

    def __init__(self) -> None:
        self._players: dict[int, Player] = {}
        self._zones: dict[int, GameZone] = {}
        self._sessions: dict[int, GameSession] = {}
        self._next_player_id = 1
        self._next_zone_id = 1
        self._next_session_id = 1

    # Players

    def list_players(self) -> list[Player]:
        return list(self._players.values())

    def list_active_players(self) -> list[Player]:
        return [p for p in self._players.values() if p.is_active]

    def active_chasers(self) -> list[Player]:
        return [p for p in self.list_active_players() if p.role == RoleName.chaser]

    def get_player(self, player_id: int) -> Player | None:
        return self._players.get(player_id)

    def require_player(self, player_id: int) -> Player:
        player = self._players.get(player_id)
        if player is None:
            raise NotFoundError("Player not found")
        return player

    def get_player_by_username(self, username: str) -> Player | None:
        return next((p for p in self._players.values() if p.username == username), None)

    def create_player(
        self,
        *,
        username: str,
        latitude: str,
        longitude: str,
        role: RoleName = RoleName.evader,
        is_active: bool = True,
    ) -> tuple[Player, bool]:
        """Create a player, or reactivate the inactive one holding `username`.

        Returns (player, created). `created` is False for a reactivation, which keeps
        the old id, role and color and only refreshes the position.
        """

        existing = self.get_player_by_username(username)
        if existing is not None:
            if existing.is_active:
                raise ConflictError("Player with this username already exists")

            update: dict[str, object] = {"is_active": True}
            if (existing.latitude, existing.longitude) != (latitude, longitude):
                update["latitude"] = latitude
                update["longitude"] = longitude
            player = existing.model_copy(update=update)
            self._players[player.id] = player
            logger.debug("reactivated player id=%s username=%s", player.id, username)
            return player, False

        player = Player(
            id=self._next_player_id,
            username=username,
            role=role,
            latitude=latitude,
            longitude=longitude,
            is_active=is_active,
        )
        self._next_player_id += 1
        self._players[player.id] = player
        logger.debug("created player id=%s username=%s", player.id, username)
        return player, True

    def _update_player(self, player_id: int, **fields: object) -> Player:
        player = self.require_player(player_id).model_copy(update=fields)
        self._players[player_id] = player
        logger.debug("updated player id=%s fields=%s", player_id, sorted(fields))
        return player

    def update_player_position(self, player_id: int, *, latitude: str, longitude: str) -> Player:
        return self._update_player(player_id, latitude=latitude, longitude=longitude)

    def update_player_role(self, player_id: int, *, role: RoleName | str) -> Player:
        try:
            role_name = RoleName(role)
        except ValueError as e:
            raise ValidationError(f'Role must be "{RoleName.chaser}" or "{RoleName.evader}"') from e
        return self._update_player(player_id, role=role_name)

    def update_player_color(self, player_id: int, *, color: str) -> Player:
        return self._update_player(player_id, color=color)

    def deactivate_player(self, player_id: int) -> Player:
        return self._update_player(player_id, is_active=False)

    # Zones

    def create_game_zone(self, *, name: str, coordinates: str) -> GameZone:
        zone = GameZone(id=self._next_zone_id, name=name, coordinates=coordinates)
        self._next_zone_id += 1
        self._zones[zone.id] = zone
        logger.debug("created zone id=%s name=%s", zone.id, name)
        return zone

    def list_game_zones(self) -> list[GameZone]:
        return list(self._zones.values())

    def get_game_zone(self, zone_id: int) -> GameZone | None:
        return self._zones.get(zone_id)

    def current_zone(self) -> GameZone | None:
        """The most recently created zone is the authoritative play area."""

        if not self._zones:
            return None
        return self._zones[max(self._zones)]

    # Sessions

    def get_game_session(self, session_id: int) -> GameSession | None:
        return self._sessions.get(session_id)

    def require_session(self, session_id: int) -> GameSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise NotFoundError("Game session not found")
        return session

    def get_or_create_game_session(self) -> GameSession:
        session = self._sessions.get(CURRENT_SESSION_ID)
        if session is None:
            session = GameSession(id=self._next_session_id, is_running=False, zone_id=None)
            self._next_session_id += 1
            self._sessions[session.id] = session
            logger.debug("created game session id=%s", session.id)
        return session

    def update_game_session(self, session_id: int, *, running: bool, zone_id: object = _UNSET) -> GameSession:
        current = self.require_session(session_id)

        update: dict[str, object] = {"is_running": running}
        if zone_id is not _UNSET:
            if zone_id is not None and zone_id not in self._zones:
                raise NotFoundError("Game zone not found")
            update["zone_id"] = zone_id

        session = current.model_copy(update=update)
        self._sessions[session_id] = session
        logger.debug("updated game session id=%s running=%s zone=%s", session_id, running, session.zone_id)
        return session
