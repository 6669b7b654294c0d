"""Multi-population physarum (slime-mold) trail simulation."""

from .agents import Agent, Agents
from .attraction import combine, sample_attraction_table
from .blur import BoxBlur, boxes_for_gaussian
from .config import AttractionSettings, PopulationBounds, SimulationConfig, load_config
from .grid import GridShapeError, PopulationConfig, TrailGrid
from .rng import DeterministicRng
from .simulation import Simulation, Snapshot

__version__ = "0.1.0"

__all__ = [
    "Agent",
    "Agents",
    "AttractionSettings",
    "BoxBlur",
    "DeterministicRng",
    "GridShapeError",
    "PopulationBounds",
    "PopulationConfig",
    "Simulation",
    "SimulationConfig",
    "Snapshot",
    "TrailGrid",
    "boxes_for_gaussian",
    "combine",
    "load_config",
    "sample_attraction_table",
]
