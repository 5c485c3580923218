from __future__ import annotations

from statemachine import State, StateMachine

from catmouse.api.models import GameSession


class SessionFSM(StateMachine):
    """FSM wrapper around GameSession.

    Two states only; stopping and restarting reuse the same session record.
    The lifecycle layer decides when `start` is allowed (a chaser must exist).
    """

    stopped = State("stopped", value="stopped", initial=True)
    running = State("running", value="running")

    start = stopped.to(running)
    stop = running.to(stopped)

    def __init__(self, session: GameSession):
        super().__init__(start_value="running" if session.is_running else "stopped")

    @property
    def is_running(self) -> bool:
        return self.current_state.id == "running"
