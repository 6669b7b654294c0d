"""Per-population trail grid: toroidal sampling, deposition, diffusion and quantiles."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .blur import DEFAULT_PASSES, BoxBlur

DTYPE = np.float32


class GridShapeError(ValueError):
    """Grid dimensions that are not powers of two."""


def is_power_of_two(value):
    return value > 0 and (value & (value - 1)) == 0


def quantile(values, fraction):
    """Nearest-rank order statistic ``ceil(fraction * N)`` of ``values``, clamped to ``N - 1``.

    Uses a partial sort, so it runs in expected linear time.
    """
    if not 0.0 <= fraction <= 1.0:
        raise ValueError(f"fraction must be within [0, 1], got {fraction}")
    flat = np.ravel(values)
    index = min(math.ceil(fraction * flat.size), flat.size - 1)
    return np.partition(flat, index)[index]


@dataclass(frozen=True)
class PopulationConfig:
    sensor_distance: float
    step_distance: float
    sensor_angle: float
    rotation_angle: float
    decay_factor: float
    deposition_amount: float

    def __str__(self):
        return (
            "{\n"
            f"  Sensor Distance: {self.sensor_distance:.3f},\n"
            f"  Step Distance: {self.step_distance:.3f},\n"
            f"  Sensor Angle: {math.degrees(self.sensor_angle):.1f}°,\n"
            f"  Rotation Angle: {math.degrees(self.rotation_angle):.1f}°,\n"
            f"  Decay Factor: {self.decay_factor:.3f},\n"
            f"  Deposition Amount: {self.deposition_amount:.3f},\n"
            "}"
        )


class TrailGrid:
    """Trail field of one population, with its mixing buffer and diffusion state.

    ``field`` holds the live pheromone concentration. ``mix_buffer`` holds the
    attraction-weighted combination of every population's field and is what
    agents sense; it is rebuilt from scratch each iteration.
    """

    def __init__(self, width, height, config, field=None, passes=DEFAULT_PASSES):
        if not (is_power_of_two(width) and is_power_of_two(height)):
            raise GridShapeError(
                f"Grid dimensions must be powers of two, got {width}x{height}"
            )
        self.width = width
        self.height = height
        self.config = config

        if field is None:
            self.field = np.zeros((height, width), dtype=DTYPE)
        else:
            self.field = np.array(field, dtype=DTYPE).reshape(height, width)
        self.mix_buffer = np.zeros((height, width), dtype=DTYPE)
        self.scratch = np.zeros((height, width), dtype=DTYPE)
        self.blur = BoxBlur(width, height, passes)

    @classmethod
    def random(cls, width, height, config, rng, passes=DEFAULT_PASSES):
        """Grid whose field starts as independent uniform [0, 1) samples."""
        if not (is_power_of_two(width) and is_power_of_two(height)):
            raise GridShapeError(
                f"Grid dimensions must be powers of two, got {width}x{height}"
            )
        field = rng.next_float((height, width))
        return cls(width, height, config, field, passes)

    def index(self, x, y):
        """Truncate ``x``/``y`` to ``(row, column)`` cell coordinates.

        Positions may be up to one grid length negative, hence the shift by
        the dimension before masking.
        """
        i = (np.asarray(x) + self.width).astype(np.int64) & (self.width - 1)
        j = (np.asarray(y) + self.height).astype(np.int64) & (self.height - 1)
        return j, i

    def sample_mix(self, x, y):
        return self.mix_buffer[self.index(x, y)]

    def deposit(self, x, y, amount=None):
        """Add ``amount`` (the population's deposition amount by default) at each position.

        Repeated cells accumulate one addition per position.
        """
        if amount is None:
            amount = self.config.deposition_amount
        np.add.at(self.field, self.index(x, y), DTYPE(amount))

    def diffuse(self, radius, decay=None, executor=None):
        if decay is None:
            decay = self.config.decay_factor
        self.blur.run(self.field, self.scratch, radius, decay, executor)

    def quantile(self, fraction):
        return quantile(self.field, fraction)
