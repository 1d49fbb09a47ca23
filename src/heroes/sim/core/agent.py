from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pygame.math import Vector2


class Behaviour(str, Enum):
    HERO = "Hero"
    COWARD = "Coward"


@dataclass(slots=True)
class Agent:
    id: int
    position: Vector2
    behaviour: Behaviour
    velocity: Vector2 = field(default_factory=Vector2)
    # indices into the world's agent list, assigned once the whole population exists
    friend: int = -1
    foe: int = -1

    @property
    def is_hero(self) -> bool:
        return self.behaviour is Behaviour.HERO
