"""
Market, Heston and Simulation Parameters with Validation

═══════════════════════════════════════════════════════════════════════════════
MODEL INPUTS
═══════════════════════════════════════════════════════════════════════════════

1. MARKET PARAMETERS (Black-Scholes inputs):
   S   > 0  spot price of the underlying
   K   > 0  strike price
   σ   > 0  annualized volatility (decimal, 0.20 = 20%)
   r        continuously compounded risk-free rate (decimal)
   T   > 0  time to maturity in years
   type     'call' or 'put'

2. HESTON PARAMETERS (variance dynamics):
   dS_t = r·S_t dt + √V_t S_t dW_1
   dV_t = κ(θ - V_t)dt + ξ√V_t dW_2
   E[dW_1·dW_2] = ρ dt

   κ  > 0       mean reversion speed
   θ  > 0       long-run variance
   ξ  ≥ 0       volatility of variance (ξ = 0 gives deterministic variance)
   ρ  ∈ [-1,1]  spot/variance correlation
   v0 > 0       initial variance

3. FELLER CONDITION:
   2κθ > ξ²  keeps the continuous variance process away from zero.
   The Euler scheme used here floors the variance anyway, so a violation
   is reported as a warning, not an error.

═══════════════════════════════════════════════════════════════════════════════
"""

import math
import warnings
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Optional, Tuple

from option_engine.backend.core.errors import (
    FellerConditionWarning,
    InvalidParameterError,
    NumericalOverflowError,
    require_count,
    require_finite,
    require_positive,
)


DEFAULT_CONFIDENCE_LEVELS: Tuple[float, ...] = (0.95, 0.99)


class OptionType(str, Enum):
    CALL = 'call'
    PUT = 'put'

    @classmethod
    def parse(cls, value) -> 'OptionType':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidParameterError(f"option type must be 'call' or 'put', got {value!r}") from None

    @property
    def is_call(self) -> bool:
        return self is OptionType.CALL


@dataclass(frozen=True)
class MarketParameters:
    """
    Immutable Black-Scholes inputs for one pricing call.

    Invalid values raise InvalidParameterError at construction, so every
    MarketParameters instance that exists is priceable.
    """

    spot: float
    strike: float
    volatility: float        # decimal, annualized
    rate: float              # decimal, continuous compounding
    maturity: float          # years
    option_type: OptionType = OptionType.CALL

    def __post_init__(self):
        object.__setattr__(self, 'spot', require_positive('spot', self.spot))
        object.__setattr__(self, 'strike', require_positive('strike', self.strike))
        object.__setattr__(self, 'volatility', require_positive('volatility', self.volatility))
        object.__setattr__(self, 'rate', require_finite('rate', self.rate))
        object.__setattr__(self, 'maturity', require_positive('maturity', self.maturity))
        object.__setattr__(self, 'option_type', OptionType.parse(self.option_type))

    @property
    def is_call(self) -> bool:
        return self.option_type.is_call

    @property
    def discount_factor(self) -> float:
        """e^{-rT}"""
        try:
            return math.exp(-self.rate * self.maturity)
        except OverflowError as exc:
            raise NumericalOverflowError(
                f"discount factor overflowed for r={self.rate}, T={self.maturity}"
            ) from exc

    def with_changes(self, **changes) -> 'MarketParameters':
        """Copy with some fields replaced (re-validated)."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, object]:
        return {
            'spot': self.spot,
            'strike': self.strike,
            'volatility': self.volatility,
            'rate': self.rate,
            'maturity': self.maturity,
            'option_type': self.option_type.value,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, object]) -> 'MarketParameters':
        return cls(
            spot=d['spot'],
            strike=d['strike'],
            volatility=d['volatility'],
            rate=d['rate'],
            maturity=d['maturity'],
            option_type=d.get('option_type', 'call'),
        )


@dataclass(frozen=True)
class HestonParameters:
    """
    Heston variance-process parameters with validation.

    Construction emits a FellerConditionWarning when 2κθ ≤ ξ².
    """

    kappa: float   # κ: mean reversion speed
    theta: float   # θ: long-run variance
    xi: float      # ξ: vol of vol
    rho: float     # ρ: correlation between spot and variance shocks
    v0: float      # initial variance

    def __post_init__(self):
        object.__setattr__(self, 'kappa', require_positive('kappa', self.kappa))
        object.__setattr__(self, 'theta', require_positive('theta', self.theta))
        object.__setattr__(self, 'v0', require_positive('v0', self.v0))

        xi = require_finite('xi', self.xi)
        if xi < 0:
            raise InvalidParameterError(f"xi must be non-negative, got {xi}")
        object.__setattr__(self, 'xi', xi)

        rho = require_finite('rho', self.rho)
        if not -1.0 <= rho <= 1.0:
            raise InvalidParameterError(f"rho must be in [-1, 1], got {rho}")
        object.__setattr__(self, 'rho', rho)

        if not self.feller_satisfied:
            warnings.warn(
                f"Feller condition violated: 2κθ = {2 * self.kappa * self.theta:.6f}, "
                f"ξ² = {self.xi ** 2:.6f}, ratio = {self.feller_ratio:.4f} ≤ 1. "
                f"Variance will be held at its numerical floor on some steps.",
                FellerConditionWarning,
                stacklevel=3,
            )

    @property
    def feller_ratio(self) -> float:
        """2κθ/ξ² (infinite when ξ = 0)."""
        if self.xi == 0:
            return math.inf
        return 2 * self.kappa * self.theta / self.xi ** 2

    @property
    def feller_satisfied(self) -> bool:
        return self.feller_ratio > 1.0

    @property
    def long_term_vol(self) -> float:
        return math.sqrt(self.theta)

    @property
    def initial_vol(self) -> float:
        return math.sqrt(self.v0)

    def to_dict(self) -> Dict[str, float]:
        return {
            'kappa': self.kappa,
            'theta': self.theta,
            'xi': self.xi,
            'rho': self.rho,
            'v0': self.v0,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, float]) -> 'HestonParameters':
        return cls(**{k: d[k] for k in ('kappa', 'theta', 'xi', 'rho', 'v0')})

    @classmethod
    def from_volatility(cls, volatility: float, **overrides) -> 'HestonParameters':
        """Seed v0 = σ² and θ = 1.1·σ² from a Black-Scholes volatility."""
        variance = require_positive('volatility', volatility) ** 2
        values = dict(get_default_heston_params().to_dict(), v0=variance, theta=variance * 1.1)
        values.update(overrides)
        return cls(**values)


@dataclass(frozen=True)
class SimulationConfig:
    """
    Monte Carlo run sizes.

    path_count is capped at max_paths for interactive use; chunk_size fixes
    how paths are split across child random streams, so output depends on
    the seed but never on the worker count.
    """

    path_count: int = 10000
    step_count: int = 100
    max_paths: Optional[int] = 12000
    chunk_size: int = 2000
    workers: int = 1
    seed: Optional[int] = None

    def __post_init__(self):
        require_count('path_count', self.path_count)
        require_count('step_count', self.step_count)
        require_count('chunk_size', self.chunk_size)
        require_count('workers', self.workers)
        if self.max_paths is not None:
            require_count('max_paths', self.max_paths)

    @property
    def effective_path_count(self) -> int:
        if self.max_paths is None:
            return self.path_count
        return min(self.path_count, self.max_paths)


# ═══════════════════════════════════════════════════════════════════════════════
# DEFAULT PARAMETER SETS
# ═══════════════════════════════════════════════════════════════════════════════

def get_default_market_params() -> MarketParameters:
    """ATM one-year call, 20% vol, 5% rate (reference price ≈ 10.4506)."""
    return MarketParameters(
        spot=100.0,
        strike=100.0,
        volatility=0.20,
        rate=0.05,
        maturity=1.0,
        option_type=OptionType.CALL,
    )


def get_default_heston_params() -> HestonParameters:
    """
    Equity-like dynamics: strong negative correlation and a vol of vol
    high enough to produce a visible smile. Violates Feller (ratio 0.72),
    which the variance floor absorbs.
    """
    with warnings.catch_warnings():
        warnings.simplefilter('ignore', FellerConditionWarning)
        return HestonParameters(
            kappa=2.0,
            theta=0.045,
            xi=0.5,
            rho=-0.7,
            v0=0.0456,
        )


def get_default_simulation_config() -> SimulationConfig:
    return SimulationConfig()
