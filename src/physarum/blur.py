"""Approximate Gaussian diffusion with repeated separable box filters.

Every pass treats the field as periodic in both directions. Wraparound indices
are computed with ``& (size - 1)``, so both dimensions must be powers of two.

    boxes_for_gaussian(1.8, 3)  ->  [1, 1, 2]
"""

from __future__ import annotations

import math

import numpy as np

# Rows per task when a horizontal pass is split across a thread pool.
ROW_BAND = 64

DEFAULT_PASSES = 3


def _round_half_away(value):
    if value < 0:
        return -math.floor(-value + 0.5)
    return math.floor(value + 0.5)


def boxes_for_gaussian(sigma, passes=DEFAULT_PASSES):
    """Box radii whose ``passes`` successive filters approximate a Gaussian of std ``sigma``.

    The ideal box width is ``sqrt(12 sigma^2 / passes + 1)``, rounded down to an
    odd integer ``w``. The first ``m`` passes use radius ``(w - 1) / 2`` and the
    rest use ``(w + 1) / 2``, which matches the target variance more closely
    than ``passes`` identical boxes.
    """
    if sigma <= 0:
        raise ValueError(f"sigma must be positive, got {sigma}")
    if passes < 1:
        raise ValueError(f"passes must be at least 1, got {passes}")

    w_ideal = math.sqrt(12.0 * sigma * sigma / passes + 1.0)
    w = int(w_ideal)
    if w % 2 == 0:
        w -= 1

    m = _round_half_away(passes * (w + 3) / 4.0 - 3.0 * sigma * sigma / (w + 1))
    return [(w - 1) // 2 if i < m else (w + 1) // 2 for i in range(passes)]


def box_blur_h(src, dst, radius, decay=1.0):
    """One horizontal box pass, ``src`` -> ``dst``, each row independent.

    Sliding window built from a running (cumulative) sum over the row extended
    by ``radius + 1`` wrapped columns on the left and ``radius`` on the right.
    """
    height, width = src.shape
    d = 2 * radius + 1
    weight = decay / d

    cols = np.arange(-radius - 1, width + radius) & (width - 1)
    cs = np.cumsum(src[:, cols], axis=1, dtype=np.float64)
    dst[...] = (cs[:, d:] - cs[:, :width]) * weight


class BoxBlur:
    """Box-filter diffusion for one ``width`` x ``height`` field.

    Owns the row of running column sums used by the vertical pass, so one
    instance must not be shared by grids that diffuse concurrently.
    """

    def __init__(self, width, height, passes=DEFAULT_PASSES):
        self.width = width
        self.height = height
        self.passes = passes
        self._column_sums = np.zeros(width, dtype=np.float64)
        self._radii = {}

    def radii(self, sigma):
        radii = self._radii.get(sigma)
        if radii is None:
            radii = boxes_for_gaussian(sigma, self.passes)
            self._radii[sigma] = radii
        return radii

    def box_blur_h(self, src, dst, radius, decay=1.0, executor=None):
        if executor is None:
            box_blur_h(src, dst, radius, decay)
            return

        def band(start):
            stop = start + ROW_BAND
            box_blur_h(src[start:stop], dst[start:stop], radius, decay)

        list(executor.map(band, range(0, self.height, ROW_BAND)))

    def box_blur_v(self, src, dst, radius, decay=1.0):
        """One vertical box pass, ``src`` -> ``dst``.

        Walks the field row by row and keeps one running sum per column, so
        memory is read sequentially instead of column by column.
        """
        height = self.height
        mask = height - 1
        weight = decay / (2 * radius + 1)

        # Window centred on row -1: rows -radius-1 .. radius-1.
        sums = self._column_sums
        sums[:] = src[(height - radius - 1) & mask]
        for j in range(radius):
            sums += src[(height - radius + j) & mask]
            sums += src[j & mask]

        for i in range(height):
            sums += src[(i + radius) & mask]
            sums -= src[(i - radius - 1) & mask]
            dst[i] = sums * weight

    def box_blur(self, field, scratch, radius, decay=1.0, executor=None):
        self.box_blur_h(field, scratch, radius, 1.0, executor)
        self.box_blur_v(scratch, field, radius, decay)

    def run(self, field, scratch, sigma, decay=1.0, executor=None):
        """Blur ``field`` in place, using ``scratch`` as the intermediate buffer.

        ``decay`` is applied only by the final vertical pass.
        """
        radii = self.radii(sigma)
        last = len(radii) - 1
        for i, radius in enumerate(radii):
            self.box_blur(field, scratch, radius, decay if i == last else 1.0, executor)
