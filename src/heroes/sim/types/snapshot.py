from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List


@dataclass(slots=True)
class Snapshot:
    tick: int
    state: str
    stats: "SnapshotStats"
    agents: List[Dict[str, Any]]
    world: "SnapshotWorld"
    metadata: "SnapshotMetadata"
    debug: "SnapshotDebug"


@dataclass(slots=True)
class SnapshotStats:
    center_of_mass_x: float
    center_of_mass_y: float
    deviation: float


@dataclass(slots=True)
class SnapshotWorld:
    arena_size: float


@dataclass(slots=True)
class SnapshotMetadata:
    seed: int
    agent_count: int
    heroe_proportion: float
    use_vision_limit: bool
    vision_limit: float
    blind_behaviour: str
    simulation_speed: float


@dataclass(slots=True)
class SnapshotDebug:
    display_friend_links: bool
    display_foe_links: bool
    center_of_mass: bool
    deviation: bool
