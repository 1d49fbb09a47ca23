from __future__ import annotations

from typing import Iterable

from ..core.agent import Agent
from ..utils.math2d import _clamp_to_square


def integrate(agents: Iterable[Agent], elapsed: float) -> None:
    for agent in agents:
        agent.position.update(
            agent.position.x + agent.velocity.x * elapsed,
            agent.position.y + agent.velocity.y * elapsed,
        )


def keep_in_arena(agents: Iterable[Agent], arena_size: float) -> None:
    # agents stop at the wall; velocity is left as steering set it
    for agent in agents:
        _clamp_to_square(agent.position, arena_size)
