"""Multi-population simulation loop.

One iteration runs five stages, each finished before the next begins:

    combine -> agent update -> deposit -> diffuse -> iteration += 1

Combine, agent update and diffusion fan out over a thread pool when
``workers > 1``; deposition is always sequential.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Optional

import numpy as np

from .agents import Agents, deposit_agents, update_agents
from .attraction import check_attraction_table, combine, sample_attraction_table
from .config import SimulationConfig, sample_population_config
from .grid import TrailGrid
from .rng import DeterministicRng

logger = logging.getLogger(__name__)

INIT_STREAM = 0
STEER_STREAM = 1


@dataclass
class Snapshot:
    fields: List[np.ndarray]
    iteration: int

    @property
    def n_populations(self) -> int:
        return len(self.fields)


class Simulation:
    def __init__(self, config: SimulationConfig, populations=None, attraction=None):
        config.validate()
        self.config = config
        self.rng = DeterministicRng(config.seed)
        init_rng = self.rng.derive(INIT_STREAM)
        n = config.n_populations

        if populations is None:
            populations = [sample_population_config(init_rng, config.bounds) for _ in range(n)]
        if len(populations) != n:
            raise ValueError(f"Expected {n} population configs, got {len(populations)}")
        for p, population in enumerate(populations):
            if population.step_distance >= min(config.width, config.height):
                raise ValueError(
                    f"Population {p} step distance {population.step_distance} "
                    f"must be smaller than the grid ({config.width}x{config.height})"
                )

        if attraction is None:
            attraction = sample_attraction_table(n, init_rng, config.attraction)
        self.attraction = check_attraction_table(attraction, n)
        self.attraction.setflags(write=False)

        self.grids = [
            TrailGrid.random(config.width, config.height, population, init_rng, config.blur_passes)
            for population in populations
        ]
        self.agents = Agents.random(config.n_particles, n, config.width, config.height, init_rng)
        self.diffusivity = config.diffusivity
        self.iteration = 0

        self._executor = (
            ThreadPoolExecutor(max_workers=config.workers) if config.workers > 1 else None
        )

        logger.info(
            "Simulation initialized: %dx%d grid, %d particles, %d populations, seed %d.",
            config.width,
            config.height,
            config.n_particles,
            n,
            self.rng.seed,
        )

    @property
    def seed(self) -> int:
        return self.rng.seed

    @property
    def populations(self):
        return [grid.config for grid in self.grids]

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def _map(self, fn, items):
        if self._executor is None:
            return [fn(item) for item in items]
        return list(self._executor.map(fn, items))

    # --- Pipeline stages ---

    def combine(self) -> None:
        combine(self.grids, self.attraction, self._executor)

    def update_agents(self) -> None:
        chunk = self.config.agent_chunk_size
        iteration = self.iteration

        def task(k):
            start = k * chunk
            rng = self.rng.derive(STEER_STREAM, iteration, k)
            update_agents(self.agents, self.grids, rng, start, start + chunk)

        n_chunks = -(-len(self.agents) // chunk)
        self._map(task, range(n_chunks))

    def deposit(self) -> None:
        deposit_agents(self.agents, self.grids)

    def diffuse(self) -> None:
        if self._executor is not None and len(self.grids) > 1:
            self._map(lambda grid: grid.diffuse(self.diffusivity), self.grids)
        else:
            for grid in self.grids:
                grid.diffuse(self.diffusivity, executor=self._executor)

    def step(self) -> None:
        start = time.perf_counter()
        self.combine()
        self.update_agents()
        self.deposit()
        self.diffuse()
        self.iteration += 1
        logger.debug(
            "Iteration %d done in %.1f ms.", self.iteration, (time.perf_counter() - start) * 1000
        )

    def run(
        self,
        n_iterations: int,
        on_snapshot: Optional[Callable[[Snapshot], None]] = None,
        snapshot_every: int = 1,
    ) -> None:
        """Step ``n_iterations`` times; ``on_snapshot`` gets a snapshot every ``snapshot_every`` steps."""
        if on_snapshot is not None and snapshot_every < 1:
            raise ValueError(f"snapshot_every must be at least 1, got {snapshot_every}")
        for _ in range(n_iterations):
            self.step()
            if on_snapshot is not None and self.iteration % snapshot_every == 0:
                on_snapshot(self.snapshot())

    def snapshot(self) -> Snapshot:
        return Snapshot([grid.field.copy() for grid in self.grids], self.iteration)

    def describe(self) -> str:
        lines = [f"{len(self.agents)} particles, seed {self.seed}", "", "Population configs:"]
        for p, population in enumerate(self.populations):
            lines.append(f"  [{p}] {population}")
        lines += ["", "Attraction matrix:"]
        for row in self.attraction:
            lines.append("  " + "  ".join(f"{v:+.3f}" for v in row))
        return "\n".join(lines)
