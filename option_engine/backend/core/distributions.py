"""
Standard Normal Distribution

═══════════════════════════════════════════════════════════════════════════════
RATIONAL APPROXIMATION OF Φ
═══════════════════════════════════════════════════════════════════════════════

Abramowitz & Stegun 26.2.17, for x ≥ 0:

    t    = 1 / (1 + p·x),   p = 0.2316419
    Φ(x) = 1 - φ(x)·(b₁t + b₂t² + b₃t³ + b₄t⁴ + b₅t⁵)

    |error| < 7.5·10⁻⁸

For x < 0 the same polynomial gives Φ(x) = φ(x)·poly(t(|x|)), so
Φ(x) + Φ(-x) = 1 holds to rounding. Put-call parity of the pricer relies
on this symmetry.

The coefficients are fixed so that prices are reproducible bit-for-bit
across platforms and library versions.

═══════════════════════════════════════════════════════════════════════════════
"""

import numpy as np


_P = 0.2316419
_B = (0.319381530, -0.356563782, 1.781477937, -1.821255978, 1.330274429)
_INV_SQRT_2PI = 1.0 / np.sqrt(2.0 * np.pi)


class NormalDistribution:
    """Standard normal CDF/PDF. Accepts scalars or numpy arrays."""

    @staticmethod
    def pdf(x):
        """φ(x) = e^{-x²/2} / √(2π)"""
        x = np.asarray(x, dtype=float)
        return _INV_SQRT_2PI * np.exp(-0.5 * x * x)

    @staticmethod
    def cdf(x):
        x = np.asarray(x, dtype=float)
        ax = np.abs(x)
        t = 1.0 / (1.0 + _P * ax)
        poly = t * (_B[0] + t * (_B[1] + t * (_B[2] + t * (_B[3] + t * _B[4]))))
        tail = _INV_SQRT_2PI * np.exp(-0.5 * ax * ax) * poly
        return np.where(x >= 0, 1.0 - tail, tail)
