"""Simulation configuration: dataclasses, validation, YAML loading and population sampling."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from .grid import GridShapeError, PopulationConfig, is_power_of_two


@dataclass
class PopulationBounds:
    """Inclusive sampling ranges for a population. Angles are in degrees."""

    sensor_distance: tuple[float, float] = (0.0, 64.0)
    step_distance: tuple[float, float] = (0.2, 2.0)
    sensor_angle: tuple[float, float] = (0.0, 120.0)
    rotation_angle: tuple[float, float] = (0.0, 120.0)
    decay_factor: tuple[float, float] = (0.1, 0.1)
    deposition_amount: tuple[float, float] = (5.0, 5.0)


@dataclass
class AttractionSettings:
    attraction_mean: float = 1.0
    attraction_std: float = 0.1
    repulsion_mean: float = -1.0
    repulsion_std: float = 0.1


@dataclass
class SimulationConfig:
    width: int = 256
    height: int = 256
    n_particles: int = 1 << 16
    n_populations: int = 2
    diffusivity: float = 1.0
    blur_passes: int = 3
    seed: Optional[int] = None
    workers: int = 1
    agent_chunk_size: int = 1 << 16
    bounds: PopulationBounds = field(default_factory=PopulationBounds)
    attraction: AttractionSettings = field(default_factory=AttractionSettings)

    def validate(self) -> None:
        if not (is_power_of_two(self.width) and is_power_of_two(self.height)):
            raise GridShapeError(
                f"Grid dimensions must be powers of two, got {self.width}x{self.height}"
            )
        if self.n_populations < 1:
            raise ValueError(f"n_populations must be at least 1, got {self.n_populations}")
        if self.n_particles < 0:
            raise ValueError(f"n_particles must not be negative, got {self.n_particles}")
        if self.diffusivity <= 0:
            raise ValueError(f"diffusivity must be positive, got {self.diffusivity}")
        if self.blur_passes < 1:
            raise ValueError(f"blur_passes must be at least 1, got {self.blur_passes}")
        if self.agent_chunk_size < 1:
            raise ValueError(f"agent_chunk_size must be at least 1, got {self.agent_chunk_size}")
        for name in PopulationBounds.__dataclass_fields__:
            low, high = getattr(self.bounds, name)
            if low > high:
                raise ValueError(f"bounds.{name} is empty: ({low}, {high})")
        low, high = self.bounds.decay_factor
        if low <= 0 or high > 1:
            raise ValueError(f"bounds.decay_factor must lie within (0, 1], got ({low}, {high})")
        for name in ("step_distance", "deposition_amount"):
            low, _ = getattr(self.bounds, name)
            if low <= 0:
                raise ValueError(f"bounds.{name} must be positive, got lower bound {low}")

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_config(data)


def load_config(raw: dict) -> SimulationConfig:
    unknown = sorted(str(k) for k in set(raw) - set(SimulationConfig.__dataclass_fields__))
    if unknown:
        raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
    for section, cls in (("bounds", PopulationBounds), ("attraction", AttractionSettings)):
        unknown = sorted(str(k) for k in set(raw.get(section) or {}) - set(cls.__dataclass_fields__))
        if unknown:
            raise ValueError(f"Unknown {section} keys: {', '.join(unknown)}")

    def _pair(value, default: tuple[float, float]) -> tuple[float, float]:
        if isinstance(value, (tuple, list)) and len(value) == 2:
            return (float(value[0]), float(value[1]))
        if isinstance(value, (int, float)):
            return (float(value), float(value))
        return default

    default_bounds = PopulationBounds()
    bounds_raw = raw.get("bounds", {}) or {}
    bounds = PopulationBounds(
        **{
            name: _pair(bounds_raw.get(name), getattr(default_bounds, name))
            for name in PopulationBounds.__dataclass_fields__
        }
    )
    attraction = AttractionSettings(**(raw.get("attraction", {}) or {}))
    sim_values = {k: v for k, v in raw.items() if k not in {"bounds", "attraction"}}
    return SimulationConfig(bounds=bounds, attraction=attraction, **sim_values)


def sample_population_config(rng, bounds: Optional[PopulationBounds] = None) -> PopulationConfig:
    if bounds is None:
        bounds = PopulationBounds()
    return PopulationConfig(
        sensor_distance=float(rng.next_range(*bounds.sensor_distance)),
        step_distance=float(rng.next_range(*bounds.step_distance)),
        decay_factor=float(rng.next_range(*bounds.decay_factor)),
        sensor_angle=math.radians(rng.next_range(*bounds.sensor_angle)),
        rotation_angle=math.radians(rng.next_range(*bounds.rotation_angle)),
        deposition_amount=float(rng.next_range(*bounds.deposition_amount)),
    )
