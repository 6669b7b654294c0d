"""Turn simulation snapshots into images.

Each population's field is normalized by a high quantile, gamma corrected and
added into the image with its palette color.
"""

from __future__ import annotations

from pathlib import Path

import imageio
import numpy as np
from PIL import Image

from .grid import quantile

GAMMA = 0.45
QUANTILE = 0.99
HEADROOM = 1.5


def normalize(field, fraction=QUANTILE, headroom=HEADROOM):
    max_val = float(quantile(field, fraction)) * headroom
    if max_val < 1e-10:
        max_val = 1.0
    return np.clip(field / np.float32(max_val), 0.0, 1.0)


def compose_rgb(snapshot, palette, gamma=GAMMA):
    """Additively blend all populations into an ``(H, W, 3)`` uint8 array."""
    height, width = snapshot.fields[0].shape
    rgb = np.zeros((height, width, 3), dtype=np.float32)

    for s, field in enumerate(snapshot.fields):
        corrected = normalize(field) ** np.float32(gamma)
        color = palette[s % len(palette)]
        rgb[:, :, 0] += corrected * np.float32(color[0])
        rgb[:, :, 1] += corrected * np.float32(color[1])
        rgb[:, :, 2] += corrected * np.float32(color[2])

    return np.clip(rgb, 0, 255).astype(np.uint8)


def render_image(snapshot, palette, gamma=GAMMA):
    return Image.fromarray(compose_rgb(snapshot, palette, gamma), "RGB")


def save_image(snapshot, palette, path, gamma=GAMMA):
    path = Path(path)
    render_image(snapshot, palette, gamma).save(path)
    return path


def save_animation(frames, path, fps=30):
    """Write RGB frames (arrays or images) as an animated GIF."""
    path = Path(path)
    # duration is per frame, in milliseconds
    imageio.mimsave(path, [np.asarray(frame) for frame in frames], duration=1000 / fps, loop=0)
    return path
