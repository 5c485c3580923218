from __future__ import annotations

import asyncio
import logging
import math
import random
from collections.abc import AsyncIterator, Iterator, Sequence
from contextlib import asynccontextmanager, contextmanager
from dataclasses import dataclass
from typing import TypeVar

from catmouse.api.models import Player, RoleName
from catmouse.errors import NotEnoughPlayersError, SpinInProgressError
from catmouse.store import GameStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

MIN_TURNS = 4
MAX_TURNS = 6
MIN_CANDIDATES = 2


def draw_spin_angle(rng: random.Random) -> float:
    """Uniform angle in [4, 6) full turns, in degrees."""

    return 360.0 * MIN_TURNS + rng.random() * 360.0 * (MAX_TURNS - MIN_TURNS)


def arc_index(*, angle: float, n: int) -> int:
    """Index of the arc the terminal angle lands in, arcs numbered from 0 degrees."""

    terminal = angle % 360.0
    idx = math.floor(terminal / (360.0 / n))
    # Float rounding can push a terminal angle just under 360 onto index n.
    return min(idx, n - 1)


def choose_next(candidates: Sequence[T], random_angle: float) -> T:
    """Map a spin angle to the winning candidate.

    The circle is cut into len(candidates) equal arcs laid out in list order. The wheel
    turns the opposite way from the arc numbering, so arc i points at
    candidates[-1 - i].
    """

    n = len(candidates)
    if n < MIN_CANDIDATES:
        raise NotEnoughPlayersError(f"At least {MIN_CANDIDATES} active players are required to spin the wheel")
    return candidates[n - 1 - arc_index(angle=random_angle, n=n)]


@dataclass(frozen=True, slots=True)
class SpinResult:
    winner: Player
    angle: float
    index: int


class RoleWheel:
    """Picks the chaser among active players, one spin at a time.

    A spin has two halves: `turning()` holds the single in-flight slot and waits out
    `spin_seconds` (standing in for the client's wheel animation), then `pick()`
    chooses and writes the winner without awaiting. Callers that need to re-check
    game state after the animation do it between the two, inside the `async with`.
    """

    def __init__(self, *, rng: random.Random | None = None, spin_seconds: float = 0.0) -> None:
        self._rng = rng or random.SystemRandom()
        self._spin_seconds = spin_seconds
        self._in_flight = False

    @property
    def spinning(self) -> bool:
        return self._in_flight

    @contextmanager
    def _spin_guard(self) -> Iterator[None]:
        if self._in_flight:
            raise SpinInProgressError("A wheel spin is already in progress")
        self._in_flight = True
        try:
            yield
        finally:
            self._in_flight = False

    @asynccontextmanager
    async def turning(self, store: GameStore) -> AsyncIterator[float]:
        """Hold the wheel for one spin and yield the drawn angle once it stops."""

        if len(store.list_active_players()) < MIN_CANDIDATES:
            logger.info("wheel spin refused: fewer than %s active players", MIN_CANDIDATES)
            raise NotEnoughPlayersError(f"At least {MIN_CANDIDATES} active players are required to spin the wheel")

        with self._spin_guard():
            angle = draw_spin_angle(self._rng)
            if self._spin_seconds > 0:
                await asyncio.sleep(self._spin_seconds)
            yield angle

    def pick(self, store: GameStore, angle: float) -> SpinResult:
        # Players may have left during the animation; re-read and decide in one step.
        candidates = store.list_active_players()
        winner = choose_next(candidates, angle)
        index = arc_index(angle=angle, n=len(candidates))
        winner = store.update_player_role(winner.id, role=RoleName.chaser)

        logger.info("wheel picked player id=%s username=%s angle=%.1f", winner.id, winner.username, angle)
        return SpinResult(winner=winner, angle=angle, index=index)

    async def spin(self, store: GameStore) -> SpinResult:
        async with self.turning(store) as angle:
            return self.pick(store, angle)
