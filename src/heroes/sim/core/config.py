from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from operator import index
from pathlib import Path

import yaml

MAX_SEED = 0xFFFFFFFFFFFFFFFF
MIN_AGENT_COUNT = 3


class ConfigurationError(ValueError):
    """Raised when simulation settings cannot produce a valid run."""


class BlindBehaviour(str, Enum):
    NO_MOVE = "NoMove"
    RANDOM_MOVE = "RandomMove"


@dataclass
class SimulationSettings:
    seed: int = 0
    agent_count: int = 30
    heroe_proportion: float = 0.5
    blind_behaviour: BlindBehaviour = BlindBehaviour.NO_MOVE
    arena_size: float = 300.0
    use_vision_limit: bool = False
    vision_limit: float = 30.0

    def validate(self) -> None:
        _require_int("seed", self.seed)
        _require_int("agent_count", self.agent_count)
        if not 0 <= self.seed <= MAX_SEED:
            raise ConfigurationError(f"seed must be an unsigned 64-bit integer, got {self.seed}")
        if self.agent_count < MIN_AGENT_COUNT:
            raise ConfigurationError(
                f"agent_count must be at least {MIN_AGENT_COUNT} to assign a friend and a foe, "
                f"got {self.agent_count}"
            )
        if not 0.0 <= self.heroe_proportion <= 1.0:
            raise ConfigurationError(f"heroe_proportion must be within [0, 1], got {self.heroe_proportion}")
        # negated comparisons so NaN is rejected
        if not (self.arena_size > 0.0 and math.isfinite(self.arena_size)):
            raise ConfigurationError(f"arena_size must be positive and finite, got {self.arena_size}")
        if not self.vision_limit >= 0.0:
            raise ConfigurationError(f"vision_limit must not be negative, got {self.vision_limit}")
        if not isinstance(self.blind_behaviour, BlindBehaviour):
            raise ConfigurationError(f"unknown blind_behaviour: {self.blind_behaviour!r}")


def _require_int(name: str, value: object) -> None:
    # bool is an int subclass; YAML "30.0" arrives as float
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    try:
        index(value)
    except TypeError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from None


@dataclass
class DebugSettings:
    display_friend_links: bool = False
    display_foe_links: bool = False
    center_of_mass: bool = False
    deviation: bool = False


@dataclass
class AppConfig:
    settings: SimulationSettings = field(default_factory=SimulationSettings)
    simulation_speed: float = 32.0
    time_step: float = 1.0 / 60.0
    broadcast_interval: int = 2
    debug: DebugSettings = field(default_factory=DebugSettings)

    @staticmethod
    def from_yaml(path: Path) -> "AppConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_config(data)


def parse_blind_behaviour(value: BlindBehaviour | str) -> BlindBehaviour:
    if isinstance(value, BlindBehaviour):
        return value
    try:
        return BlindBehaviour(value)
    except ValueError:
        # accept the enum member name too ("RANDOM_MOVE")
        try:
            return BlindBehaviour[str(value).upper()]
        except KeyError:
            raise ConfigurationError(f"unknown blind_behaviour: {value!r}") from None


def load_settings(raw: dict) -> SimulationSettings:
    values = dict(raw)
    if "blind_behaviour" in values:
        values["blind_behaviour"] = parse_blind_behaviour(values["blind_behaviour"])
    return SimulationSettings(**values)


def load_config(raw: dict) -> AppConfig:
    settings = load_settings(raw.get("settings", {}))
    debug = DebugSettings(**raw.get("debug", {}))
    app_values = {k: v for k, v in raw.items() if k not in {"settings", "debug"}}
    return AppConfig(settings=settings, debug=debug, **app_values)
