"""Offline renderer: run a simulation headless and save a PNG (and optionally a GIF).

    physarum --steps 500 --populations 3 --output render.png
    physarum --config run.yaml --gif run.gif --gif-every 5
"""

from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path

from .config import SimulationConfig
from .palette import PALETTES, hex_colors, resolve_palette
from .render import compose_rgb, save_animation, save_image
from .rng import DeterministicRng
from .simulation import Simulation

PALETTE_STREAM = 2


def build_parser():
    parser = argparse.ArgumentParser(description="Physarum offline renderer")
    parser.add_argument("--config", type=Path, default=None, help="YAML configuration file")
    parser.add_argument("--steps", type=int, default=400, help="Simulation steps (default: 400)")
    parser.add_argument("--width", type=int, default=None, help="Grid width, a power of two")
    parser.add_argument("--height", type=int, default=None, help="Grid height, a power of two")
    parser.add_argument("--particles", type=int, default=None, help="Total particle count")
    parser.add_argument("--populations", type=int, default=None, help="Number of populations")
    parser.add_argument("--diffusivity", type=float, default=None, help="Blur standard deviation")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducibility")
    parser.add_argument("--workers", type=int, default=None, help="Worker threads")
    parser.add_argument(
        "--palette",
        choices=list(PALETTES.keys()) + ["random"],
        default="random",
        help="Color palette (default: random)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("physarum_render.png"),
        help="Output filename (default: physarum_render.png)",
    )
    parser.add_argument("--gif", type=Path, default=None, help="Also write an animated GIF")
    parser.add_argument("--gif-every", type=int, default=10, help="Steps between GIF frames")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def config_from_args(args) -> SimulationConfig:
    config = SimulationConfig.from_yaml(args.config) if args.config else SimulationConfig()
    overrides = {
        "width": args.width,
        "height": args.height,
        "n_particles": args.particles,
        "n_populations": args.populations,
        "diffusivity": args.diffusivity,
        "seed": args.seed,
        "workers": args.workers,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(config, name, value)
    return config


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = config_from_args(args)
    frames = []

    with Simulation(config) as simulation:
        palette = resolve_palette(args.palette, DeterministicRng(simulation.seed, PALETTE_STREAM))

        print(f"{args.output}")
        print(simulation.describe())
        print()
        print(f"Palette: {args.palette} {hex_colors(palette[: config.n_populations])}")
        print()

        t_start = time.time()
        for step in range(args.steps):
            simulation.step()

            if args.gif and args.gif_every > 0 and (step + 1) % args.gif_every == 0:
                frames.append(compose_rgb(simulation.snapshot(), palette))

            elapsed = time.time() - t_start
            if (step + 1) % 10 == 0 or step == 0 or step + 1 == args.steps:
                rate = (step + 1) / max(elapsed, 1e-9)
                eta = (args.steps - step - 1) / rate
                print(
                    f"  step {step + 1}/{args.steps}  "
                    f"({elapsed:.1f}s elapsed, ~{eta:.0f}s remaining, {rate:.1f} steps/s)"
                )

        total_time = time.time() - t_start
        print()
        print(f"Simulation complete: {total_time:.1f}s")

        print("Rendering image...")
        save_image(simulation.snapshot(), palette, args.output)
        print(f"Saved: {args.output} ({config.width}x{config.height})")

    if args.gif and frames:
        save_animation(frames, args.gif)
        print(f"Saved: {args.gif} ({len(frames)} frames)")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
