"""
Black-Scholes Closed-Form Pricer

═══════════════════════════════════════════════════════════════════════════════
BLACK-SCHOLES FORMULA
═══════════════════════════════════════════════════════════════════════════════

d₁ = [ln(S/K) + (r + σ²/2)T] / (σ√T)
d₂ = d₁ - σ√T

Call: C = S·N(d₁) - K·e^{-rT}·N(d₂)
Put:  P = K·e^{-rT}·N(-d₂) - S·N(-d₁)

Put-Call Parity:
C - P = S - K·e^{-rT}

═══════════════════════════════════════════════════════════════════════════════
GREEKS (reporting units)
═══════════════════════════════════════════════════════════════════════════════

Delta:  call N(d₁),  put N(d₁) - 1
Gamma:  n(d₁) / (S·σ·√T)                                   (call = put)
Theta:  call [-S·n(d₁)·σ/(2√T) - r·K·e^{-rT}·N(d₂)] / 365   per calendar day
        put  [-S·n(d₁)·σ/(2√T) + r·K·e^{-rT}·N(-d₂)] / 365
Vega:   S·n(d₁)·√T / 100                                   per 1 vol point
Rho:    call  K·T·e^{-rT}·N(d₂) / 100                      per 1% rate move
        put  -K·T·e^{-rT}·N(-d₂) / 100

N is the embedded rational approximation of the normal CDF
(backend.core.distributions), n the normal PDF.

═══════════════════════════════════════════════════════════════════════════════
NEAR EXPIRY
═══════════════════════════════════════════════════════════════════════════════

For T ≤ 1e-4 years the √T terms vanish. The pricer returns intrinsic value,
a binary delta (call: 1 if S > K else 0; put: -1 if S < K else 0) and zero
gamma/theta/vega/rho. d₁/d₂ are omitted in that regime.

═══════════════════════════════════════════════════════════════════════════════
"""

import math
from dataclasses import dataclass
from typing import Dict, Optional

from option_engine.backend.core.distributions import NormalDistribution
from option_engine.backend.core.errors import NumericalOverflowError, ensure_finite
from option_engine.backend.core.parameters import MarketParameters, OptionType


NEAR_EXPIRY_EPSILON = 1e-4
ATM_BAND_PCT = 0.5


def intrinsic_value(spot: float, strike: float, option_type: OptionType) -> float:
    """max(S - K, 0) for calls, max(K - S, 0) for puts."""
    if OptionType.parse(option_type).is_call:
        return max(spot - strike, 0.0)
    return max(strike - spot, 0.0)


@dataclass(frozen=True)
class PricingResult:
    price: float
    delta: float
    gamma: float
    theta: float   # per calendar day
    vega: float    # per vol point
    rho: float     # per 1% rate move
    d1: Optional[float] = None
    d2: Optional[float] = None

    def get(self, metric: str) -> float:
        return getattr(self, metric)

    def to_dict(self) -> Dict[str, Optional[float]]:
        return {
            'price': self.price,
            'delta': self.delta,
            'gamma': self.gamma,
            'theta': self.theta,
            'vega': self.vega,
            'rho': self.rho,
            'd1': self.d1,
            'd2': self.d2,
        }


@dataclass(frozen=True)
class OptionSummary:
    """Decision-support figures derived from one priced option."""

    premium: float
    intrinsic: float
    time_value: float
    breakeven: float
    breakeven_move_pct: float   # spot move needed to reach breakeven at expiry
    moneyness_pct: float        # > 0 OTM, < 0 ITM
    moneyness_label: str        # 'ITM' | 'ATM' | 'OTM'


class BlackScholesPricer:
    """
    Closed-form European option pricer.

    Stateless: price() is a pure function of its MarketParameters, so two
    calls with equal inputs return equal results.
    """

    near_expiry_epsilon = NEAR_EXPIRY_EPSILON

    def price(self, params: MarketParameters) -> PricingResult:
        """
        Price and Greeks for a European call or put.

        Args:
            params: Validated market parameters

        Returns:
            PricingResult

        Raises:
            NumericalOverflowError: if any output is not finite
        """
        if params.maturity <= self.near_expiry_epsilon:
            return self._expiry_result(params)
        try:
            return self._closed_form(params)
        except OverflowError as exc:
            raise NumericalOverflowError(f"Black-Scholes pricing overflowed: {exc}") from exc

    @staticmethod
    def _closed_form(params: MarketParameters) -> PricingResult:
        S, K, T, r, sigma = params.spot, params.strike, params.maturity, params.rate, params.volatility

        sqrt_T = math.sqrt(T)
        sigma_sqrt_T = sigma * sqrt_T
        d1 = (math.log(S / K) + (r + 0.5 * sigma ** 2) * T) / sigma_sqrt_T
        d2 = d1 - sigma_sqrt_T

        discounted_K = K * math.exp(-r * T)
        n_d1 = float(NormalDistribution.pdf(d1))
        decay = -(S * n_d1 * sigma) / (2 * sqrt_T)

        gamma = n_d1 / (S * sigma_sqrt_T)
        vega = S * n_d1 * sqrt_T / 100

        if params.is_call:
            N_d1 = float(NormalDistribution.cdf(d1))
            N_d2 = float(NormalDistribution.cdf(d2))
            price = S * N_d1 - discounted_K * N_d2
            delta = N_d1
            theta = (decay - r * discounted_K * N_d2) / 365
            rho = T * discounted_K * N_d2 / 100
        else:
            N_md1 = float(NormalDistribution.cdf(-d1))
            N_md2 = float(NormalDistribution.cdf(-d2))
            price = discounted_K * N_md2 - S * N_md1
            delta = float(NormalDistribution.cdf(d1)) - 1.0
            theta = (decay + r * discounted_K * N_md2) / 365
            rho = -T * discounted_K * N_md2 / 100

        # The rational approximation can leave -1e-8 noise on worthless options
        price = max(price, 0.0)

        ensure_finite('Black-Scholes pricing', (price, delta, gamma, theta, vega, rho, d1, d2))

        return PricingResult(
            price=price,
            delta=delta,
            gamma=gamma,
            theta=theta,
            vega=vega,
            rho=rho,
            d1=d1,
            d2=d2,
        )

    @staticmethod
    def _expiry_result(params: MarketParameters) -> PricingResult:
        S, K = params.spot, params.strike
        if params.is_call:
            delta = 1.0 if S > K else 0.0
        else:
            delta = -1.0 if S < K else 0.0
        return PricingResult(
            price=intrinsic_value(S, K, params.option_type),
            delta=delta,
            gamma=0.0,
            theta=0.0,
            vega=0.0,
            rho=0.0,
        )

    def summarize(self, params: MarketParameters) -> OptionSummary:
        """
        Premium, breakeven and moneyness for the option described by params.

        Breakeven is K + premium for a call, K - premium for a put; the
        moneyness label is ATM when |moneyness| ≤ 0.5%.
        """
        premium = self.price(params).price
        S, K = params.spot, params.strike
        intrinsic = intrinsic_value(S, K, params.option_type)

        if params.is_call:
            breakeven = K + premium
            move_pct = (breakeven / S - 1) * 100
            moneyness = (K / S - 1) * 100
        else:
            breakeven = K - premium
            move_pct = (S - breakeven) / S * 100
            moneyness = (S / K - 1) * 100

        if moneyness > ATM_BAND_PCT:
            label = 'OTM'
        elif moneyness < -ATM_BAND_PCT:
            label = 'ITM'
        else:
            label = 'ATM'

        return OptionSummary(
            premium=premium,
            intrinsic=intrinsic,
            time_value=premium - intrinsic,
            breakeven=breakeven,
            breakeven_move_pct=move_pct,
            moneyness_pct=moneyness,
            moneyness_label=label,
        )


_DEFAULT_PRICER = BlackScholesPricer()


def price(params: MarketParameters) -> PricingResult:
    """Module-level entry point: BlackScholesPricer().price(params)."""
    return _DEFAULT_PRICER.price(params)


def summarize(params: MarketParameters) -> OptionSummary:
    return _DEFAULT_PRICER.summarize(params)
