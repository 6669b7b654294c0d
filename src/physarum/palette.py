"""Named color palettes, one RGB color per population."""

from __future__ import annotations

FOGLEMAN_COLORS = [
    (0xC9, 0x3C, 0x00),  # #C93C00 orange-red
    (0xE8, 0x88, 0x01),  # #E88801 amber
    (0x73, 0x00, 0x46),  # #730046 magenta-purple
    (0xBF, 0xBB, 0x11),  # #BFBB11 yellow-green
]

PALETTES = {
    "fogleman": FOGLEMAN_COLORS,
    "warm": [(255, 100, 50), (255, 200, 50), (200, 50, 100), (255, 150, 80)],
    "cool": [(50, 100, 255), (50, 200, 200), (100, 50, 200), (80, 150, 255)],
    "neon": [(255, 0, 128), (0, 255, 128), (128, 0, 255), (255, 255, 0)],
    "fire": [(255, 60, 20), (255, 160, 0), (255, 240, 80), (200, 40, 0)],
    "ocean": [(0, 80, 200), (0, 200, 180), (100, 220, 255), (40, 120, 200)],
    "pastel": [(255, 150, 150), (150, 255, 150), (150, 150, 255), (200, 200, 150)],
    "sunset": [(255, 60, 80), (255, 150, 50), (180, 80, 200), (255, 120, 40)],
    "forest": [(40, 180, 60), (160, 200, 40), (80, 120, 40), (200, 255, 80)],
}

PALETTE_NAMES = list(PALETTES.keys())


def random_palette(rng):
    return PALETTES[PALETTE_NAMES[int(rng.next_float() * len(PALETTE_NAMES))]]


def resolve_palette(name, rng):
    """Palette by name; ``"random"`` picks one with ``rng``."""
    if name == "random":
        return random_palette(rng)
    try:
        return PALETTES[name]
    except KeyError:
        raise ValueError(
            f"Unknown palette '{name}'. Choose from: {', '.join(PALETTES)}, random"
        ) from None


def hex_colors(palette):
    return [f"#{r:02X}{g:02X}{b:02X}" for r, g, b in palette]
