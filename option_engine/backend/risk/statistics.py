"""
Risk Statistics over a Profit-and-Loss Sample

═══════════════════════════════════════════════════════════════════════════════
HISTORICAL-SIMULATION VaR / CVaR
═══════════════════════════════════════════════════════════════════════════════

Sort the sample ascending: x₍₀₎ ≤ x₍₁₎ ≤ ... ≤ x₍ₙ₋₁₎

    idx  = floor((1 - c)·n)
    VaR  = -x₍idx₎                           (loss reported as positive)
    CVaR = -mean(x₍₀₎ ... x₍idx-1₎)          (tail strictly below the VaR index)

If the tail is empty (idx = 0, e.g. c = 0.99 with n < 100) the sample is
too small to populate it: CVaR falls back to VaR and a
DegenerateSampleWarning is emitted.

A tiny tolerance is added before the floor so that decimal confidences
such as 0.9 on n = 10 land on index 1 rather than 0.

═══════════════════════════════════════════════════════════════════════════════
MOMENTS (population form, denominator n)
═══════════════════════════════════════════════════════════════════════════════

    μ    = Σx/n
    σ    = √(Σ(x-μ)²/n)
    skew = Σ((x-μ)/σ)³/n
    kurt = Σ((x-μ)/σ)⁴/n - 3        (excess)

skew and kurt are defined as 0 when σ = 0.

═══════════════════════════════════════════════════════════════════════════════
"""

import logging
import math
import warnings
from dataclasses import dataclass
from typing import Dict, Iterable, Sequence

import numpy as np
from scipy import stats

from option_engine.backend.core.errors import (
    DegenerateSampleWarning,
    InvalidParameterError,
    NumericalOverflowError,
    require_count,
)
from option_engine.backend.core.parameters import DEFAULT_CONFIDENCE_LEVELS


logger = logging.getLogger(__name__)

_INDEX_TOLERANCE = 1e-9


@dataclass(frozen=True)
class RiskMetrics:
    confidence: float
    var: float
    cvar: float
    max_loss: float
    max_gain: float
    mean: float
    std: float
    skew: float
    excess_kurtosis: float
    sample_size: int
    tail_size: int

    @property
    def tail_degenerate(self) -> bool:
        return self.tail_size == 0

    def to_dict(self) -> Dict[str, float]:
        return {
            'confidence': self.confidence,
            'VaR': self.var,
            'CVaR': self.cvar,
            'max_loss': self.max_loss,
            'max_gain': self.max_gain,
            'mean': self.mean,
            'std': self.std,
            'skew': self.skew,
            'excess_kurtosis': self.excess_kurtosis,
            'sample_size': self.sample_size,
            'tail_size': self.tail_size,
        }


def _as_sample(pnl_sample: Iterable[float]) -> np.ndarray:
    if not isinstance(pnl_sample, np.ndarray):
        pnl_sample = list(pnl_sample)
    sample = np.asarray(pnl_sample, dtype=float).ravel()
    if sample.size == 0:
        raise InvalidParameterError("P&L sample must contain at least one value")
    if not np.all(np.isfinite(sample)):
        raise NumericalOverflowError(
            f"P&L sample contains {int(np.sum(~np.isfinite(sample)))} non-finite value(s)"
        )
    return sample


def _check_confidence(confidence: float) -> float:
    confidence = float(confidence)
    if not 0.0 < confidence < 1.0:
        raise InvalidParameterError(f"confidence must be in (0, 1), got {confidence}")
    return confidence


def compute_risk_metrics(pnl_sample: Sequence[float], confidence: float = 0.95) -> RiskMetrics:
    """
    VaR, CVaR and moments of a P&L sample.

    Args:
        pnl_sample: Profit-and-loss values (any iterable of numbers)
        confidence: Confidence level in (0, 1)

    Returns:
        RiskMetrics

    Raises:
        InvalidParameterError: empty sample or confidence outside (0, 1)
        NumericalOverflowError: sample contains NaN/Infinity
    """
    confidence = _check_confidence(confidence)
    sample = _as_sample(pnl_sample)
    ordered = np.sort(sample)
    n = ordered.size

    idx = min(int(math.floor((1 - confidence) * n + _INDEX_TOLERANCE)), n - 1)
    var = -float(ordered[idx])

    if idx > 0:
        cvar = -float(np.mean(ordered[:idx]))
    else:
        warnings.warn(
            f"{n} observations cannot populate the {(1 - confidence):.2%} tail; CVaR reported as VaR",
            DegenerateSampleWarning,
            stacklevel=2,
        )
        cvar = var

    mean = float(np.mean(sample))
    std = float(np.std(sample))
    if std > 0:
        skew = float(stats.skew(sample, bias=True))
        kurt = float(stats.kurtosis(sample, fisher=True, bias=True))
    else:
        skew = 0.0
        kurt = 0.0

    logger.debug("risk metrics: n=%d c=%.4f VaR=%.6f CVaR=%.6f", n, confidence, var, cvar)

    return RiskMetrics(
        confidence=confidence,
        var=var,
        cvar=cvar,
        max_loss=-float(ordered[0]),
        max_gain=float(ordered[-1]),
        mean=mean,
        std=std,
        skew=skew,
        excess_kurtosis=kurt,
        sample_size=n,
        tail_size=idx,
    )


def compute_risk_profile(
    pnl_sample: Sequence[float],
    levels: Iterable[float] = DEFAULT_CONFIDENCE_LEVELS,
) -> Dict[float, RiskMetrics]:
    """RiskMetrics for each confidence level, keyed by level."""
    sample = _as_sample(pnl_sample)
    return {float(c): compute_risk_metrics(sample, c) for c in levels}


def pnl_from_simulation(simulation, premium: float) -> np.ndarray:
    """
    P&L of holding the simulated option: discounted payoff minus premium paid.

    Args:
        simulation: SimulationResult (its payoffs are already discounted)
        premium: Price paid today, usually the Black-Scholes premium
    """
    premium = float(premium)
    if not math.isfinite(premium):
        raise InvalidParameterError(f"premium must be finite, got {premium}")
    return np.asarray(simulation.payoffs, dtype=float) - premium


@dataclass(frozen=True)
class PnLHistogram:
    counts: np.ndarray
    edges: np.ndarray
    bin_width: float
    max_count: int


def pnl_histogram(pnl_sample: Sequence[float], bins: int = 70) -> PnLHistogram:
    """Equal-width histogram of a P&L sample over [min, max]."""
    bins = require_count('bins', bins)
    sample = _as_sample(pnl_sample)
    counts, edges = np.histogram(sample, bins=bins)
    return PnLHistogram(
        counts=counts,
        edges=edges,
        bin_width=float(edges[1] - edges[0]),
        max_count=int(counts.max()),
    )
