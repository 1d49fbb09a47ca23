from __future__ import annotations

from typing import List

from pygame.math import Vector2

from ..core.agent import Agent, Behaviour
from ..core.config import BlindBehaviour, SimulationSettings
from ..core.rng import DeterministicRng
from ..utils.math2d import _clamp_value, _safe_normalize


def steer_agents(
    agents: List[Agent],
    settings: SimulationSettings,
    simulation_speed: float,
    rng: DeterministicRng,
    elapsed: float,
) -> int:
    """Assign every agent its velocity for this tick and return how many were blind.

    Positions are copied up front so each agent steers from the tick-start layout.
    """
    positions = [agent.position.copy() for agent in agents]
    blind = 0
    for agent in agents:
        desired, is_blind = compute_desired_velocity(
            agent,
            positions[agent.id],
            positions[agent.friend],
            positions[agent.foe],
            settings,
            rng,
            elapsed,
        )
        if is_blind:
            blind += 1
        agent.velocity = _safe_normalize(desired) * simulation_speed
    return blind


def compute_desired_velocity(
    agent: Agent,
    position: Vector2,
    friend_position: Vector2,
    foe_position: Vector2,
    settings: SimulationSettings,
    rng: DeterministicRng,
    elapsed: float,
) -> tuple[Vector2, bool]:
    to_friend, to_foe = attraction_vectors(agent.behaviour, position, friend_position, foe_position)

    if not settings.use_vision_limit:
        return to_friend + to_foe, False

    can_see_friend = to_friend.length() < settings.vision_limit
    can_see_foe = to_foe.length() < settings.vision_limit
    if can_see_friend and can_see_foe:
        return to_friend + to_foe, False
    if can_see_friend:
        return to_friend, False
    if can_see_foe:
        return to_foe, False
    return blind_velocity(agent.velocity, settings.blind_behaviour, rng, elapsed), True


def attraction_vectors(
    behaviour: Behaviour, position: Vector2, friend_position: Vector2, foe_position: Vector2
) -> tuple[Vector2, Vector2]:
    to_friend = friend_position - position
    if behaviour is Behaviour.HERO:
        to_foe = foe_position - position
    else:
        to_foe = position - foe_position
    return to_friend, to_foe


def blind_velocity(
    previous: Vector2, behaviour: BlindBehaviour, rng: DeterministicRng, elapsed: float
) -> Vector2:
    if behaviour is BlindBehaviour.NO_MOVE:
        return Vector2()
    target = rng.next_unit_circle()
    # a zero previous velocity is interpolated from as-is
    return previous.lerp(target, _clamp_value(elapsed, 0.0, 1.0))
