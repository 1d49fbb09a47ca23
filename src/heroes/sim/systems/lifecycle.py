from __future__ import annotations

from enum import Enum


class SimulationState(str, Enum):
    NOT_INIT = "NotInit"
    START = "Start"
    RUN = "Run"
    PAUSE = "Pause"


class InvalidTransitionError(RuntimeError):
    """Raised when a lifecycle command is issued from a state that does not accept it."""


class Lifecycle:
    """Tracks the run state and rejects commands that are not valid from it.

    ``NotInit -> Start -> Run <-> Pause``; ``Start`` can be entered from anywhere.
    """

    def __init__(self) -> None:
        self._state = SimulationState.NOT_INIT

    @property
    def state(self) -> SimulationState:
        return self._state

    @property
    def running(self) -> bool:
        return self._state is SimulationState.RUN

    def begin_start(self) -> None:
        self._state = SimulationState.START

    def finish_start(self) -> None:
        self._require(SimulationState.START, "finish start")
        self._state = SimulationState.RUN

    def pause(self) -> None:
        self._require(SimulationState.RUN, "pause")
        self._state = SimulationState.PAUSE

    def resume(self) -> None:
        self._require(SimulationState.PAUSE, "resume")
        self._state = SimulationState.RUN

    def _require(self, expected: SimulationState, action: str) -> None:
        if self._state is not expected:
            raise InvalidTransitionError(
                f"cannot {action} while {self._state.value}; expected {expected.value}"
            )
