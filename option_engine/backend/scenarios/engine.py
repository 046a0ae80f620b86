"""
Scenario / stress engine.

Each scenario is applied independently to the base market:

    S' = S·(1 + spot_shock_pct)
    σ' = max(σ + vol_shock_pts, 0.01)
    T' = max(T - time_decay_years, 0.001)

and the option is repriced with Black-Scholes. P&L is measured against
the unshocked premium. Scenarios never compose: the order of the list
only affects the order of the results.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from option_engine.backend.core.errors import require_finite
from option_engine.backend.core.parameters import MarketParameters
from option_engine.backend.solvers.black_scholes import BlackScholesPricer


logger = logging.getLogger(__name__)

MIN_SHOCKED_VOL = 0.01
MIN_SHOCKED_MATURITY = 0.001


@dataclass(frozen=True)
class Scenario:
    name: str
    spot_shock_pct: float = 0.0     # 0.05 = +5%
    vol_shock_pts: float = 0.0      # 0.02 = +2 vol points
    time_decay_years: float = 0.0

    def __post_init__(self):
        require_finite('spot_shock_pct', self.spot_shock_pct)
        require_finite('vol_shock_pts', self.vol_shock_pts)
        require_finite('time_decay_years', self.time_decay_years)

    def apply(self, market: MarketParameters) -> MarketParameters:
        return market.with_changes(
            spot=market.spot * (1 + self.spot_shock_pct),
            volatility=max(MIN_SHOCKED_VOL, market.volatility + self.vol_shock_pts),
            maturity=max(MIN_SHOCKED_MATURITY, market.maturity - self.time_decay_years),
        )


@dataclass(frozen=True)
class ScenarioResult:
    scenario: Scenario
    base_price: float
    price: float
    pnl: float
    pnl_pct: Optional[float]     # None when the base premium is zero
    delta: float

    @property
    def name(self) -> str:
        return self.scenario.name


DEFAULT_SCENARIOS: Tuple[Scenario, ...] = (
    Scenario('Base Case'),
    Scenario('Rally +5%', spot_shock_pct=0.05, vol_shock_pts=-0.02),
    Scenario('Rally +10%', spot_shock_pct=0.10, vol_shock_pts=-0.03),
    Scenario('Crash -5%', spot_shock_pct=-0.05, vol_shock_pts=0.05),
    Scenario('Crash -10%', spot_shock_pct=-0.10, vol_shock_pts=0.08),
    Scenario('Vol Spike +10pp', vol_shock_pts=0.10),
    Scenario('Vol Crush -5pp', vol_shock_pts=-0.05),
    Scenario('Time -1M', time_decay_years=1 / 12),
    Scenario('Time -3M', time_decay_years=3 / 12),
    Scenario('Rally +5% + Vol Crush', spot_shock_pct=0.05, vol_shock_pts=-0.05),
    Scenario('Crash -5% + Vol Spike', spot_shock_pct=-0.05, vol_shock_pts=0.08),
)


class ScenarioEngine:

    def __init__(self, pricer: Optional[BlackScholesPricer] = None):
        self.pricer = pricer or BlackScholesPricer()

    def apply(self, market: MarketParameters, scenarios: Iterable[Scenario] = DEFAULT_SCENARIOS) -> List[ScenarioResult]:
        """Reprice under every scenario against the same unshocked premium."""
        base_price = self.pricer.price(market).price
        results = []
        for scenario in scenarios:
            shocked = self.pricer.price(scenario.apply(market))
            pnl = shocked.price - base_price
            results.append(ScenarioResult(
                scenario=scenario,
                base_price=base_price,
                price=shocked.price,
                pnl=pnl,
                pnl_pct=pnl / base_price * 100 if base_price > 0 else None,
                delta=shocked.delta,
            ))
        logger.debug("applied %d scenario(s), base premium %.6f", len(results), base_price)
        return results


def apply_scenarios(market: MarketParameters, scenarios: Iterable[Scenario] = DEFAULT_SCENARIOS) -> List[ScenarioResult]:
    return ScenarioEngine().apply(market, scenarios)
