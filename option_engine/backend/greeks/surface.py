"""
Greeks Surfaces and Profiles

═══════════════════════════════════════════════════════════════════════════════
SENSITIVITY GRIDS FROM THE CLOSED-FORM PRICER
═══════════════════════════════════════════════════════════════════════════════

1. SPOT × VOL SURFACE:
   ═══════════════════════════════════════════════════════════════════════════

   spot axis: S·0.85 → S·1.15 in 2% increments, rounded to integers
   vol axis:  10 → 40 vol points in 2-point increments

   grid[j][i] = metric(BS(spot_i, K, T, r, vol_j/100))

   Rows are indexed by volatility, columns by spot. Any input change
   invalidates the whole grid, so nothing is cached between calls.

2. SPOT SENSITIVITY PROFILE:
   ═══════════════════════════════════════════════════════════════════════════

   spot axis: S·0.90 → S·1.10 in 0.5% increments
   per point: delta, gamma×100, theta (per day), vega (per vol point)

3. TIME-DECAY CURVE:
   ═══════════════════════════════════════════════════════════════════════════

   days elapsed d = 0, step, 2·step, ... ≤ round(T·365),
   step = max(1, floor(days/150))
   remaining T_d = (days - d)/365, floored at the near-expiry epsilon

═══════════════════════════════════════════════════════════════════════════════
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Union

import numpy as np

from option_engine.backend.core.errors import InvalidParameterError, require_count
from option_engine.backend.core.parameters import MarketParameters
from option_engine.backend.core.sweeps import FixedRange, SweepRange
from option_engine.backend.solvers.black_scholes import (
    NEAR_EXPIRY_EPSILON,
    BlackScholesPricer,
)


DEFAULT_SPOT_RANGE = SweepRange(spread_pct=0.15, steps=15, decimals=0)
DEFAULT_VOL_RANGE = FixedRange(start=10.0, stop=40.0, steps=15)
PROFILE_SPOT_RANGE = SweepRange(spread_pct=0.10, steps=40)
TIME_DECAY_POINTS = 150


def default_spot_range(spot: float) -> SweepRange:
    # Integer rounding collapses the axis for low-priced underlyings (FX, cents)
    if spot >= 10:
        return DEFAULT_SPOT_RANGE
    return SweepRange(spread_pct=0.15, steps=15, decimals=4)


class GreekMetric(str, Enum):
    PRICE = 'price'
    DELTA = 'delta'
    GAMMA = 'gamma'
    THETA = 'theta'
    VEGA = 'vega'
    RHO = 'rho'

    @classmethod
    def parse(cls, value) -> 'GreekMetric':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            choices = ', '.join(m.value for m in cls)
            raise InvalidParameterError(f"unknown metric {value!r}; expected one of {choices}") from None


@dataclass(frozen=True)
class GreeksSurface:
    metric: GreekMetric
    spot_axis: np.ndarray      # underlying levels
    vol_axis: np.ndarray       # vol points (20.0 = 20%)
    grid: np.ndarray           # shape (len(vol_axis), len(spot_axis))

    def value_at(self, spot_index: int, vol_index: int) -> float:
        return float(self.grid[vol_index, spot_index])


@dataclass(frozen=True)
class TimeDecayPoint:
    day: int
    value: float
    theta: float


class GreeksSurfaceGenerator:
    """
    Evaluates the Black-Scholes pricer over spot/vol/time sweeps.

    The generator holds only the base market parameters; every method
    returns fresh arrays.
    """

    def __init__(self, market: MarketParameters, pricer: Optional[BlackScholesPricer] = None):
        """
        Args:
            market: Base market parameters (strike, rate, maturity, type are held fixed)
            pricer: Black-Scholes pricer (default instance if omitted)
        """
        self.market = market
        self.pricer = pricer or BlackScholesPricer()

    def surface(
        self,
        metric: Union[str, GreekMetric] = GreekMetric.DELTA,
        spot_range: Optional[SweepRange] = None,
        vol_range: FixedRange = DEFAULT_VOL_RANGE,
    ) -> GreeksSurface:
        """
        Cartesian spot × vol evaluation of one metric.

        Args:
            metric: Greek to read off each PricingResult
            spot_range: Relative sweep around the base spot (integer-rounded
                        ±15% axis by default, 4 decimals for spots below 10)
            vol_range: Absolute sweep in vol points

        Returns:
            GreeksSurface
        """
        metric = GreekMetric.parse(metric)
        if spot_range is None:
            spot_range = default_spot_range(self.market.spot)
        spots = spot_range.around(self.market.spot)
        vols = vol_range.points()
        if np.any(spots <= 0):
            raise InvalidParameterError("spot axis must be strictly positive")
        if np.any(vols <= 0):
            raise InvalidParameterError("vol axis must be strictly positive")

        grid = np.empty((len(vols), len(spots)))
        for j, vol in enumerate(vols):
            for i, spot in enumerate(spots):
                shocked = self.market.with_changes(spot=float(spot), volatility=float(vol) / 100)
                grid[j, i] = self.pricer.price(shocked).get(metric.value)

        return GreeksSurface(metric=metric, spot_axis=spots, vol_axis=vols, grid=grid)

    def sensitivity_profile(self, spot_range: SweepRange = PROFILE_SPOT_RANGE) -> Dict[str, np.ndarray]:
        """
        Delta, gamma×100, theta and vega across a spot sweep.

        Returns:
            Dictionary of equal-length arrays: spot, delta, gamma, theta, vega
        """
        spots = spot_range.around(self.market.spot)
        results = [self.pricer.price(self.market.with_changes(spot=float(s))) for s in spots]
        return {
            'spot': spots,
            'delta': np.array([g.delta for g in results]),
            'gamma': np.array([g.gamma * 100 for g in results]),
            'theta': np.array([g.theta for g in results]),
            'vega': np.array([g.vega for g in results]),
        }

    def time_decay(self, max_points: int = TIME_DECAY_POINTS) -> List[TimeDecayPoint]:
        """Option value and theta as calendar days elapse to expiry."""
        max_points = require_count('max_points', max_points)
        total_days = int(round(self.market.maturity * 365))
        step = max(1, total_days // max_points)
        curve = []
        for day in range(0, total_days + 1, step):
            remaining = max((total_days - day) / 365, NEAR_EXPIRY_EPSILON)
            result = self.pricer.price(self.market.with_changes(maturity=remaining))
            curve.append(TimeDecayPoint(day=day, value=result.price, theta=result.theta))
        return curve


def greeks_surface(
    market: MarketParameters,
    metric: Union[str, GreekMetric] = GreekMetric.DELTA,
    spot_range: Optional[SweepRange] = None,
    vol_range: FixedRange = DEFAULT_VOL_RANGE,
) -> GreeksSurface:
    return GreeksSurfaceGenerator(market).surface(metric, spot_range, vol_range)


def sensitivity_profile(market: MarketParameters, spot_range: SweepRange = PROFILE_SPOT_RANGE) -> Dict[str, np.ndarray]:
    return GreeksSurfaceGenerator(market).sensitivity_profile(spot_range)


def time_decay_curve(market: MarketParameters, max_points: int = TIME_DECAY_POINTS) -> List[TimeDecayPoint]:
    return GreeksSurfaceGenerator(market).time_decay(max_points)
