import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
src_root = ROOT / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")


@pytest.fixture
def rng():
    from physarum.rng import DeterministicRng

    return DeterministicRng(1234)


@pytest.fixture
def population():
    from physarum.grid import PopulationConfig

    return PopulationConfig(
        sensor_distance=3.0,
        step_distance=1.0,
        sensor_angle=0.5,
        rotation_angle=0.4,
        decay_factor=0.5,
        deposition_amount=5.0,
    )
