"""Cross-population signal mixing.

Row ``i`` of the attraction table weights every population's trail when
building what population ``i`` senses: positive entries attract, negative
entries repel.
"""

from __future__ import annotations

import numpy as np

from .config import AttractionSettings


def sample_attraction_table(n, rng, settings=None):
    """N x N table: diagonal from the attraction distribution, the rest from repulsion."""
    if settings is None:
        settings = AttractionSettings()
    table = np.zeros((n, n), dtype=np.float32)
    for i in range(n):
        for j in range(n):
            if i == j:
                table[i, j] = rng.next_normal(settings.attraction_mean, settings.attraction_std)
            else:
                table[i, j] = rng.next_normal(settings.repulsion_mean, settings.repulsion_std)
    return table


def check_attraction_table(table, n):
    table = np.array(table, dtype=np.float32)
    if table.shape != (n, n):
        raise ValueError(
            f"Attraction table shape {table.shape} does not match {n} populations"
        )
    return table


def combine(grids, table, executor=None):
    """Rebuild every grid's mix buffer from all grids' fields.

    Fields are only read and mix buffers are separate arrays, so each grid's
    buffer can be rebuilt independently of the others.
    """
    fields = [grid.field for grid in grids]
    table = check_attraction_table(table, len(grids))

    def mix(i):
        buffer = grids[i].mix_buffer
        buffer.fill(0.0)
        for weight, field in zip(table[i], fields):
            buffer += weight * field

    if executor is None:
        for i in range(len(grids)):
            mix(i)
    else:
        list(executor.map(mix, range(len(grids))))
