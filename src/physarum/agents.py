"""Walker state and the sense/rotate/move/deposit update.

All agents live in one struct-of-arrays store. Each update task owns a
contiguous slice of it and reads the grids' mix buffers only.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

TAU = np.float32(2 * math.pi)


@dataclass
class Agent:
    x: float
    y: float
    angle: float
    population_id: int


class Agents:
    def __init__(self, x, y, angle, population_id):
        self.x = np.asarray(x, dtype=np.float32)
        self.y = np.asarray(y, dtype=np.float32)
        self.angle = np.asarray(angle, dtype=np.float32)
        self.population_id = np.asarray(population_id, dtype=np.int32)
        if not (self.x.shape == self.y.shape == self.angle.shape == self.population_id.shape):
            raise ValueError("agent arrays must all have the same length")

    @classmethod
    def random(cls, count, n_populations, width, height, rng):
        """Uniform positions and headings; populations take contiguous, near-equal blocks."""
        x = rng.next_range(0.0, width, count)
        y = rng.next_range(0.0, height, count)
        angle = rng.next_range(0.0, 2 * math.pi, count)
        population_id = (np.arange(count) * n_populations) // max(count, 1)
        agents = cls(x, y, angle, population_id)
        # float32 rounding can land exactly on the upper bound
        agents.x[:] = wrap(agents.x, np.float32(width))
        agents.y[:] = wrap(agents.y, np.float32(height))
        agents.angle[:] = wrap(agents.angle, TAU)
        return agents

    def __len__(self):
        return self.x.size

    def __getitem__(self, index):
        return Agent(
            float(self.x[index]),
            float(self.y[index]),
            float(self.angle[index]),
            int(self.population_id[index]),
        )

    def __iter__(self):
        for index in range(len(self)):
            yield self[index]


def wrap(values, period):
    """Bring values that are at most one ``period`` outside ``[0, period)`` back into it."""
    values = np.where(values < 0, values + period, values)
    return np.where(values >= period, values - period, values)


def steer(center, left, right, coin):
    """Turning direction in {-1, 0, +1} from the three sensor readings.

    ``coin`` supplies the random +-1 used when the centre reading is the
    strict minimum.
    """
    direction = np.where(left < right, 1, np.where(right < left, -1, 0))
    center_loses = (center < left) & (center < right)
    direction = np.where(center_loses, coin, direction)
    center_wins = (center >= left) & (center >= right) & ((center > left) | (center > right))
    return np.where(center_wins, 0, direction).astype(np.int8)


def update_agents(agents, grids, rng, start=0, stop=None):
    """Sense, rotate and move the agents in ``[start, stop)``.

    Each agent senses its home grid's mix buffer. ``rng`` must be the stream
    dedicated to this slice.
    """
    window = slice(start, stop)
    x = agents.x[window]
    y = agents.y[window]
    angle = agents.angle[window]
    population_id = agents.population_id[window]
    coin = rng.next_sign(x.size)

    for p, grid in enumerate(grids):
        mask = population_id == p
        if not mask.any():
            continue
        cfg = grid.config
        sx, sy, sa = x[mask], y[mask], angle[mask]
        sensor_distance = np.float32(cfg.sensor_distance)
        sensor_angle = np.float32(cfg.sensor_angle)

        def sample(offset):
            heading = sa + offset
            return grid.sample_mix(
                sx + np.cos(heading) * sensor_distance,
                sy + np.sin(heading) * sensor_distance,
            )

        center = sample(np.float32(0.0))
        left = sample(-sensor_angle)
        right = sample(sensor_angle)
        direction = steer(center, left, right, coin[mask])

        sa = wrap(sa + np.float32(cfg.rotation_angle) * direction, TAU)
        step = np.float32(cfg.step_distance)
        angle[mask] = sa
        x[mask] = wrap(sx + np.cos(sa) * step, np.float32(grid.width))
        y[mask] = wrap(sy + np.sin(sa) * step, np.float32(grid.height))


def deposit_agents(agents, grids):
    """Add each population's deposition amount at its agents' cells, one population at a time."""
    for p, grid in enumerate(grids):
        mask = agents.population_id == p
        if mask.any():
            grid.deposit(agents.x[mask], agents.y[mask])
