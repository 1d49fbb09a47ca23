from __future__ import annotations

from typing import Iterable, Sequence

from pygame.math import Vector2

from ..core.agent import Agent, Behaviour
from ..types.metrics import SimStats, TickMetrics


def compute_stats(positions: Iterable[Vector2]) -> SimStats:
    points = list(positions)
    if not points:
        return SimStats()
    count = len(points)
    sum_x = 0.0
    sum_y = 0.0
    for point in points:
        sum_x += point.x
        sum_y += point.y
    center = Vector2(sum_x / count, sum_y / count)
    deviation = sum(point.distance_to(center) for point in points) / count
    return SimStats(center_of_mass=center, deviation=deviation)


def create_metrics(
    tick: int,
    agents: Sequence[Agent],
    stats: SimStats,
    blind_agents: int,
    duration_ms: float,
) -> TickMetrics:
    population = len(agents)
    heroes = sum(1 for agent in agents if agent.behaviour is Behaviour.HERO)
    speed_sum = sum(agent.velocity.length() for agent in agents)
    return TickMetrics(
        tick=tick,
        population=population,
        heroes=heroes,
        cowards=population - heroes,
        center_of_mass=(stats.center_of_mass.x, stats.center_of_mass.y),
        deviation=stats.deviation,
        average_speed=0.0 if population == 0 else speed_sum / population,
        blind_agents=blind_agents,
        tick_duration_ms=duration_ms,
    )
