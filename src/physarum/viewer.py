"""Realtime pygame window over a running simulation.

    python -m physarum.viewer [palette] [num_populations]

Keys: ESC quits, P cycles the palette, R restarts with a new seed.
"""

from __future__ import annotations

import dataclasses
import sys
import time

import numpy as np
import pygame

from .config import SimulationConfig
from .palette import PALETTE_NAMES, PALETTES
from .render import compose_rgb
from .simulation import Simulation

PIXEL_SCALE = 2
FPS = 30


def draw(screen, simulation, palette, pixel_scale):
    rgb_u8 = compose_rgb(simulation.snapshot(), palette)
    scaled = np.repeat(np.repeat(rgb_u8, pixel_scale, axis=0), pixel_scale, axis=1)
    pygame.surfarray.blit_array(screen, scaled.transpose(1, 0, 2))


def run_viewer(config, palette_name="fogleman", pixel_scale=PIXEL_SCALE, fps=FPS, max_ticks=None):
    """Show the simulation until the window closes or ``max_ticks`` frames were drawn."""
    palette_idx = PALETTE_NAMES.index(palette_name)

    pygame.init()
    screen = pygame.display.set_mode((config.width * pixel_scale, config.height * pixel_scale))
    clock = pygame.time.Clock()
    simulation = Simulation(config)

    tick = 0
    running = True
    try:
        while running and (max_ticks is None or tick < max_ticks):
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_p:
                        palette_idx = (palette_idx + 1) % len(PALETTE_NAMES)
                    elif event.key == pygame.K_r:
                        simulation.close()
                        config = dataclasses.replace(config, seed=simulation.seed + 1)
                        simulation = Simulation(config)
            if not running:
                break

            start = time.time()
            simulation.step()
            draw(screen, simulation, PALETTES[PALETTE_NAMES[palette_idx]], pixel_scale)
            pygame.display.flip()

            elapsed = (time.time() - start) * 1000
            pygame.display.set_caption(
                f"Physarum  |  tick={simulation.iteration}  "
                f"palette={PALETTE_NAMES[palette_idx]}  "
                f"populations={config.n_populations}  "
                f"{elapsed:.0f}ms  [P=palette R=regenerate]"
            )

            clock.tick(fps)
            tick += 1
    finally:
        simulation.close()
        pygame.quit()

    return tick


def main():
    palette_name = sys.argv[1] if len(sys.argv) > 1 else "fogleman"
    if palette_name not in PALETTES:
        print(f"Unknown palette '{palette_name}'. Choose from: {', '.join(PALETTES)}")
        sys.exit(1)

    n_populations = int(sys.argv[2]) if len(sys.argv) > 2 else 3
    n_populations = max(1, min(4, n_populations))

    config = SimulationConfig(
        width=512,
        height=256,
        n_particles=25_000 * n_populations,
        n_populations=n_populations,
    )
    run_viewer(config, palette_name)


if __name__ == "__main__":
    main()
