"""
Multi-Leg Option Structures

═══════════════════════════════════════════════════════════════════════════════
STRUCTURE DEFINITIONS (S = spot, K = strike)
═══════════════════════════════════════════════════════════════════════════════

vanilla         +1 option(type) @ K
bull_spread     +1 call @ K          -1 call @ K + 4%·S
straddle        +1 call @ S          +1 put  @ S
risk_reversal   +1 call @ K          -1 put  @ 0.97·S
ratio_spread    +1 call @ K          -2 call @ K + 3%·S
butterfly       +1 call @ 0.98·S     -2 call @ K      +1 call @ K + (K - 0.98·S)

Derived strikes are rounded to cents; the straddle strike is S itself.

═══════════════════════════════════════════════════════════════════════════════
PAYOFF AT EXPIRY
═══════════════════════════════════════════════════════════════════════════════

net premium  = Σ bought premiums - Σ sold premiums       (priced once, BS)
P&L(s)       = Σ q_leg·side_leg·intrinsic_leg(s) - net premium

Spot sweep: S ± 25% in increments of 25%·S/50 (101 points), rounded to cents.

For equally spaced butterfly strikes the premium c₁ - 2c₂ + c₃ is a second
difference of a convex function of strike and therefore non-negative.

═══════════════════════════════════════════════════════════════════════════════
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple, Union

import numpy as np

from option_engine.backend.core.errors import InvalidParameterError
from option_engine.backend.core.parameters import MarketParameters, OptionType
from option_engine.backend.core.sweeps import SweepRange
from option_engine.backend.solvers.black_scholes import BlackScholesPricer


PAYOFF_SPOT_RANGE = SweepRange(spread_pct=0.25, steps=100, decimals=2)


class StructureKind(str, Enum):
    VANILLA = 'vanilla'
    BULL_SPREAD = 'bull_spread'
    STRADDLE = 'straddle'
    RISK_REVERSAL = 'risk_reversal'
    RATIO_SPREAD = 'ratio_spread'
    BUTTERFLY = 'butterfly'

    @classmethod
    def parse(cls, value) -> 'StructureKind':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            choices = ', '.join(k.value for k in cls)
            raise InvalidParameterError(f"unknown structure {value!r}; expected one of {choices}") from None


class Side(str, Enum):
    BUY = 'buy'
    SELL = 'sell'

    @property
    def sign(self) -> int:
        return 1 if self is Side.BUY else -1


@dataclass(frozen=True)
class Leg:
    strike: float
    side: Side
    option_type: OptionType
    quantity: int = 1
    premium: float = 0.0    # per unit, Black-Scholes at the base market

    @property
    def signed_quantity(self) -> int:
        return self.side.sign * self.quantity

    def intrinsic(self, spots: np.ndarray) -> np.ndarray:
        if self.option_type.is_call:
            return np.maximum(spots - self.strike, 0.0)
        return np.maximum(self.strike - spots, 0.0)


@dataclass(frozen=True)
class Structure:
    kind: StructureKind
    legs: Tuple[Leg, ...]

    @property
    def net_premium(self) -> float:
        """Cost of entering: bought premiums minus sold premiums."""
        return float(sum(leg.signed_quantity * leg.premium for leg in self.legs))

    @property
    def strikes(self) -> Tuple[float, ...]:
        return tuple(leg.strike for leg in self.legs)

    def pnl_at(self, spots) -> np.ndarray:
        spots = np.asarray(spots, dtype=float)
        payoff = np.zeros_like(spots)
        for leg in self.legs:
            payoff = payoff + leg.signed_quantity * leg.intrinsic(spots)
        return payoff - self.net_premium


@dataclass(frozen=True)
class PayoffCurve:
    structure: Structure
    spots: np.ndarray
    pnl: np.ndarray

    @property
    def max_gain(self) -> float:
        return float(np.max(self.pnl))

    @property
    def max_loss(self) -> float:
        """Largest loss on the sweep, as a positive number (0 if none)."""
        return float(max(-np.min(self.pnl), 0.0))

    def points(self) -> List[Tuple[float, float]]:
        return [(float(s), float(p)) for s, p in zip(self.spots, self.pnl)]

    def breakevens(self) -> List[float]:
        """Spots where P&L crosses zero, linearly interpolated between sweep points."""
        crossings = []
        for i in range(len(self.spots) - 1):
            p0, p1 = self.pnl[i], self.pnl[i + 1]
            if p0 == 0:
                crossings.append(float(self.spots[i]))
            elif p0 * p1 < 0:
                s0, s1 = self.spots[i], self.spots[i + 1]
                crossings.append(float(s0 + (s1 - s0) * (-p0) / (p1 - p0)))
        if len(self.pnl) and self.pnl[-1] == 0:
            crossings.append(float(self.spots[-1]))
        return crossings


def _cents(x: float) -> float:
    return float(np.floor(x * 100 + 0.5) / 100)


class StructureComposer:
    """
    Builds the six supported structures from the base market and prices
    their legs with the Black-Scholes pricer.
    """

    def __init__(self, pricer: Optional[BlackScholesPricer] = None):
        self.pricer = pricer or BlackScholesPricer()

    def _leg(self, market: MarketParameters, strike: float, side: Side,
             option_type: OptionType, quantity: int = 1) -> Leg:
        premium = self.pricer.price(market.with_changes(strike=strike, option_type=option_type)).price
        return Leg(strike=strike, side=side, option_type=option_type, quantity=quantity, premium=premium)

    def build(self, kind: Union[str, StructureKind], market: MarketParameters) -> Structure:
        """
        Legs of a structure with premiums at the current market.

        Args:
            kind: One of StructureKind
            market: Base market parameters

        Returns:
            Structure
        """
        kind = StructureKind.parse(kind)
        S, K = market.spot, market.strike
        call, put = OptionType.CALL, OptionType.PUT
        buy, sell = Side.BUY, Side.SELL

        if kind is StructureKind.VANILLA:
            legs = [self._leg(market, K, buy, market.option_type)]
        elif kind is StructureKind.BULL_SPREAD:
            legs = [
                self._leg(market, K, buy, call),
                self._leg(market, _cents(K + S * 0.04), sell, call),
            ]
        elif kind is StructureKind.STRADDLE:
            legs = [
                self._leg(market, S, buy, call),
                self._leg(market, S, buy, put),
            ]
        elif kind is StructureKind.RISK_REVERSAL:
            legs = [
                self._leg(market, K, buy, call),
                self._leg(market, _cents(S * 0.97), sell, put),
            ]
        elif kind is StructureKind.RATIO_SPREAD:
            legs = [
                self._leg(market, K, buy, call),
                self._leg(market, _cents(K + S * 0.03), sell, call, quantity=2),
            ]
        else:
            low = _cents(S * 0.98)
            legs = [
                self._leg(market, low, buy, call),
                self._leg(market, K, sell, call, quantity=2),
                self._leg(market, _cents(K + (K - low)), buy, call),
            ]

        return Structure(kind=kind, legs=tuple(legs))

    def payoff_curve(
        self,
        kind: Union[str, StructureKind],
        market: MarketParameters,
        spot_range: SweepRange = PAYOFF_SPOT_RANGE,
    ) -> PayoffCurve:
        """Expiry P&L of the structure over a spot sweep, net of its premium."""
        structure = self.build(kind, market)
        spots = spot_range.around(market.spot)
        return PayoffCurve(structure=structure, spots=spots, pnl=structure.pnl_at(spots))


def structure_payoff(
    kind: Union[str, StructureKind],
    market: MarketParameters,
    spot_range: SweepRange = PAYOFF_SPOT_RANGE,
) -> PayoffCurve:
    return StructureComposer().payoff_curve(kind, market, spot_range)
