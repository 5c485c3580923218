from __future__ import annotations

import logging
from dataclasses import dataclass

from statemachine.exceptions import TransitionNotAllowed

from catmouse.api.models import GameSession, Player, RoleName
from catmouse.errors import ConflictError
from catmouse.fsm import SessionFSM
from catmouse.store import GameStore
from catmouse.wheel import RoleWheel, SpinResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StartResult:
    session: GameSession
    spin: SpinResult | None


async def start_session(*, store: GameStore, wheel: RoleWheel, session_id: int) -> StartResult:
    """Stopped -> Running.

    With no active chaser the wheel picks one first; the session only starts once the
    spin has completed. A refused spin leaves the session stopped.
    """

    _check_startable(store=store, session_id=session_id)
    if store.active_chasers():
        return StartResult(session=_mark_started(store=store, session_id=session_id), spin=None)

    async with wheel.turning(store) as angle:
        # Other requests ran during the animation: re-check before touching anything.
        _check_startable(store=store, session_id=session_id)
        spin: SpinResult | None = None
        if store.active_chasers():
            logger.info("chaser assigned during wheel spin; skipping the pick")
        else:
            spin = wheel.pick(store, angle)
        session = _mark_started(store=store, session_id=session_id)

    return StartResult(session=session, spin=spin)


def _check_startable(*, store: GameStore, session_id: int) -> None:
    if SessionFSM(store.require_session(session_id)).is_running:
        raise ConflictError("Game session is already running")


def _mark_started(*, store: GameStore, session_id: int) -> GameSession:
    fsm = SessionFSM(store.require_session(session_id))
    try:
        fsm.start()
    except TransitionNotAllowed as e:
        raise ConflictError("Game session is already running") from e

    session = store.update_game_session(session_id, running=True)
    logger.info("game session id=%s started", session_id)
    return session


def stop_session(*, store: GameStore, session_id: int) -> GameSession:
    fsm = SessionFSM(store.require_session(session_id))
    try:
        fsm.stop()
    except TransitionNotAllowed as e:
        raise ConflictError("Game session is not running") from e

    session = store.update_game_session(session_id, running=False)
    logger.info("game session id=%s stopped", session_id)
    return session


def catch_player(*, store: GameStore, chaser_id: int, target_id: int) -> Player:
    """A chaser tags an evader, who joins the chasers."""

    session = store.get_or_create_game_session()
    if not session.is_running:
        raise ConflictError("Game is not running")

    chaser = store.require_player(chaser_id)
    target = store.require_player(target_id)
    if not chaser.is_active or chaser.role != RoleName.chaser:
        raise ConflictError("Only an active chaser can catch")
    if not target.is_active or target.role != RoleName.evader:
        raise ConflictError("Only an active evader can be caught")

    caught = store.update_player_role(target.id, role=RoleName.chaser)
    logger.info("player id=%s caught player id=%s", chaser_id, target_id)
    return caught
