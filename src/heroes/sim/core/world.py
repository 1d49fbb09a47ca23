from __future__ import annotations

import logging
from dataclasses import replace
from time import perf_counter
from typing import Dict, List

from .agent import Agent
from .config import AppConfig, DebugSettings, SimulationSettings
from .rng import DeterministicRng
from ..systems import metrics as metrics_system, motion, population, steering
from ..systems.lifecycle import Lifecycle, SimulationState
from ..types.metrics import SimStats, TickMetrics
from ..types.snapshot import Snapshot, SnapshotDebug, SnapshotMetadata, SnapshotStats, SnapshotWorld
from ..utils.math2d import _heading_from_velocity

logger = logging.getLogger(__name__)


class World:
    """Owns the agent population, the simulation RNG and the run lifecycle.

    A host drives it with ``start``/``pause``/``resume`` and calls ``step`` once per frame;
    ``step`` only advances the simulation while the lifecycle is in ``Run``.
    """

    def __init__(self, config: AppConfig | None = None):
        config = config if config is not None else AppConfig()
        self._settings = replace(config.settings)
        self._rng = DeterministicRng(self._settings.seed)
        self._lifecycle = Lifecycle()
        self._agents: List[Agent] = []
        self._stats = SimStats()
        self._metrics: TickMetrics | None = None
        self._tick = 0
        self.simulation_speed = config.simulation_speed
        self.debug = replace(config.debug)

    @property
    def agents(self) -> List[Agent]:
        return self._agents

    @property
    def settings(self) -> SimulationSettings:
        return self._settings

    @property
    def state(self) -> SimulationState:
        return self._lifecycle.state

    @property
    def stats(self) -> SimStats:
        return self._stats

    @property
    def metrics(self) -> TickMetrics | None:
        return self._metrics

    @property
    def tick(self) -> int:
        return self._tick

    @property
    def rng(self) -> DeterministicRng:
        return self._rng

    def start(self, settings: SimulationSettings) -> None:
        settings = replace(settings)
        settings.validate()
        # build the new run aside; the current one survives any failure up to here
        rng = DeterministicRng(settings.seed)
        agents = population.generate_population(settings, rng)

        self._lifecycle.begin_start()
        self._settings = settings
        self._rng = rng
        self._agents = agents
        self._tick = 0
        self._metrics = None
        self._stats = metrics_system.compute_stats(agent.position for agent in self._agents)
        logger.info(
            "Simulation started: seed=%d agents=%d heroes=%d arena=%.1f vision=%s blind=%s",
            self._settings.seed,
            len(self._agents),
            sum(1 for agent in self._agents if agent.is_hero),
            self._settings.arena_size,
            self._settings.vision_limit if self._settings.use_vision_limit else "unlimited",
            self._settings.blind_behaviour.value,
        )
        self._lifecycle.finish_start()

    def pause(self) -> None:
        self._lifecycle.pause()
        logger.debug("Simulation paused at tick %d", self._tick)

    def resume(self) -> None:
        self._lifecycle.resume()
        logger.debug("Simulation resumed at tick %d", self._tick)

    def step(self, elapsed: float) -> TickMetrics | None:
        if elapsed < 0.0:
            raise ValueError(f"elapsed time must not be negative, got {elapsed}")
        if not self._lifecycle.running:
            return None
        start = perf_counter()
        settings = self._settings
        blind = steering.steer_agents(self._agents, settings, self.simulation_speed, self._rng, elapsed)
        motion.integrate(self._agents, elapsed)
        motion.keep_in_arena(self._agents, settings.arena_size)
        self._stats = metrics_system.compute_stats(agent.position for agent in self._agents)
        self._tick += 1
        elapsed_ms = (perf_counter() - start) * 1000.0
        self._metrics = metrics_system.create_metrics(self._tick, self._agents, self._stats, blind, elapsed_ms)
        return self._metrics

    def set_debug(self, **toggles: bool) -> DebugSettings:
        for name, value in toggles.items():
            if not hasattr(self.debug, name):
                raise AttributeError(f"unknown debug toggle: {name}")
            setattr(self.debug, name, bool(value))
        return self.debug

    def snapshot(self) -> Snapshot:
        settings = self._settings
        return Snapshot(
            tick=self._tick,
            state=self.state.value,
            stats=SnapshotStats(
                center_of_mass_x=self._stats.center_of_mass.x,
                center_of_mass_y=self._stats.center_of_mass.y,
                deviation=self._stats.deviation,
            ),
            agents=[self._agent_snapshot(agent) for agent in self._agents],
            world=SnapshotWorld(arena_size=settings.arena_size),
            metadata=SnapshotMetadata(
                seed=settings.seed,
                agent_count=settings.agent_count,
                heroe_proportion=settings.heroe_proportion,
                use_vision_limit=settings.use_vision_limit,
                vision_limit=settings.vision_limit,
                blind_behaviour=settings.blind_behaviour.value,
                simulation_speed=self.simulation_speed,
            ),
            debug=SnapshotDebug(
                display_friend_links=self.debug.display_friend_links,
                display_foe_links=self.debug.display_foe_links,
                center_of_mass=self.debug.center_of_mass,
                deviation=self.debug.deviation,
            ),
        )

    @staticmethod
    def _agent_snapshot(agent: Agent) -> Dict[str, object]:
        return {
            "id": agent.id,
            "x": agent.position.x,
            "y": agent.position.y,
            "vx": agent.velocity.x,
            "vy": agent.velocity.y,
            "speed": agent.velocity.length(),
            "heading": _heading_from_velocity(agent.velocity),
            "behaviour": agent.behaviour.value,
            "friend": agent.friend,
            "foe": agent.foe,
        }
