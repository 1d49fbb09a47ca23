from __future__ import annotations

from typing import List

from pygame.math import Vector2

from ..core.agent import Agent, Behaviour
from ..core.config import SimulationSettings
from ..core.rng import DeterministicRng


def generate_population(settings: SimulationSettings, rng: DeterministicRng) -> List[Agent]:
    """Create ``agent_count`` agents and wire every one to a friend and a foe.

    Draw order is fixed: per agent a behaviour draw then x then y, and only once all agents
    exist, per agent the friend draws then the foe draws. The caller must have validated
    ``agent_count >= 3``; the rejection loops below do not terminate otherwise.
    """
    agents = spawn_agents(settings, rng)
    assign_relationships(agents, rng)
    return agents


def spawn_agents(settings: SimulationSettings, rng: DeterministicRng) -> List[Agent]:
    size = settings.arena_size
    agents: List[Agent] = []
    for index in range(settings.agent_count):
        behaviour = Behaviour.HERO if rng.next_bool(settings.heroe_proportion) else Behaviour.COWARD
        x = rng.next_range(-size, size)
        y = rng.next_range(-size, size)
        agents.append(Agent(id=index, position=Vector2(x, y), behaviour=behaviour))
    return agents


def assign_relationships(agents: List[Agent], rng: DeterministicRng) -> None:
    count = len(agents)
    for agent in agents:
        while True:
            friend = rng.next_int(count)
            if friend != agent.id:
                break
        while True:
            foe = rng.next_int(count)
            if foe != agent.id and foe != friend:
                break
        agent.friend = friend
        agent.foe = foe
