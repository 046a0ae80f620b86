"""
Parameter Sweeps

═══════════════════════════════════════════════════════════════════════════════
AXIS CONSTRUCTION
═══════════════════════════════════════════════════════════════════════════════

Every axis in the engine is a uniform sweep:

    x_i = start + i·(stop - start)/steps,   i = 0, 1, ..., steps

Points are generated by index, not by repeated addition, so the last point
is exactly `stop` and the point count is always steps + 1.

A "ranged" sweep is centred on a base value:

    start = c·(1 - spread),  stop = c·(1 + spread)

Axes in use:
    Greeks surface spot axis   c = S, spread 15%, 15 steps  (2% increments)
    Greeks surface vol axis    10 → 40 vol points, 15 steps (2-point increments)
    Structure payoff spot axis c = S, spread 25%, 100 steps (range/50 increments)
    Sensitivity profile        c = S, spread 10%, 40 steps  (0.5% increments)

═══════════════════════════════════════════════════════════════════════════════
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from option_engine.backend.core.errors import (
    InvalidParameterError,
    require_count,
    require_finite,
)


def _round_half_up(values: np.ndarray, decimals: int) -> np.ndarray:
    scale = 10.0 ** decimals
    return np.floor(values * scale + 0.5) / scale


def linear_sweep(start: float, stop: float, steps: int, decimals: Optional[int] = None) -> np.ndarray:
    """
    steps + 1 evenly spaced points from start to stop inclusive.

    Args:
        start: First point
        stop: Last point
        steps: Number of increments
        decimals: Round each point half-up to this many decimals (optional)

    Returns:
        1-D array of length steps + 1
    """
    start = require_finite('start', start)
    stop = require_finite('stop', stop)
    steps = require_count('steps', steps)
    points = start + (stop - start) * np.arange(steps + 1) / steps
    if decimals is not None:
        points = _round_half_up(points, decimals)
    return points


def ranged_sweep(center: float, spread_pct: float, steps: int, decimals: Optional[int] = None) -> np.ndarray:
    """Sweep over [center·(1 - spread_pct), center·(1 + spread_pct)]."""
    center = require_finite('center', center)
    spread_pct = require_finite('spread_pct', spread_pct)
    if spread_pct < 0:
        raise InvalidParameterError(f"spread_pct must be non-negative, got {spread_pct}")
    return linear_sweep(center * (1 - spread_pct), center * (1 + spread_pct), steps, decimals)


@dataclass(frozen=True)
class SweepRange:
    """
    Relative sweep specification, resolved against a base value later.

    spread_pct=0.15, steps=15 around S=100 → 85, 87, ..., 115.
    """

    spread_pct: float
    steps: int
    decimals: Optional[int] = None

    def __post_init__(self):
        if require_finite('spread_pct', self.spread_pct) < 0:
            raise InvalidParameterError(f"spread_pct must be non-negative, got {self.spread_pct}")
        require_count('steps', self.steps)

    def around(self, center: float) -> np.ndarray:
        return ranged_sweep(center, self.spread_pct, self.steps, self.decimals)


@dataclass(frozen=True)
class FixedRange:
    """Absolute sweep specification (start, stop, steps)."""

    start: float
    stop: float
    steps: int
    decimals: Optional[int] = None

    def __post_init__(self):
        require_finite('start', self.start)
        require_finite('stop', self.stop)
        require_count('steps', self.steps)

    def points(self) -> np.ndarray:
        return linear_sweep(self.start, self.stop, self.steps, self.decimals)
