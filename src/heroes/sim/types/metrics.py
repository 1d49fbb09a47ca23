from __future__ import annotations

from dataclasses import dataclass, field

from pygame.math import Vector2


@dataclass(slots=True)
class SimStats:
    center_of_mass: Vector2 = field(default_factory=Vector2)
    deviation: float = 0.0

    def as_dict(self) -> dict[str, float]:
        return {
            "center_of_mass_x": self.center_of_mass.x,
            "center_of_mass_y": self.center_of_mass.y,
            "deviation": self.deviation,
        }


@dataclass(slots=True)
class TickMetrics:
    tick: int
    population: int
    heroes: int
    cowards: int
    center_of_mass: tuple[float, float]
    deviation: float
    average_speed: float
    blind_agents: int
    tick_duration_ms: float = 0.0
