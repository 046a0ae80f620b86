"""
Error and warning taxonomy for the option engine.

Every failure is local and synchronous: it is raised at the call that
received the offending input and nothing is retried.

    InvalidParameterError   - contract violation at the boundary
                              (non-positive spot/strike/vol, T <= 0,
                              confidence outside (0, 1), empty sample, ...)
    NumericalOverflowError  - a computation produced NaN/Infinity
    SimulationCancelled     - caller aborted a running Monte Carlo job

Warnings (emitted with warnings.warn, never raised):

    FellerConditionWarning  - 2κθ <= ξ², variance may touch its floor
    DegenerateSampleWarning - risk tail too small, CVaR falls back to VaR
"""

import math
from typing import Iterable


class OptionEngineError(Exception):
    """Base class for all errors raised by the engine."""


class InvalidParameterError(OptionEngineError, ValueError):
    """Input outside the domain of the model."""


class NumericalOverflowError(OptionEngineError, ArithmeticError):
    """A result is not finite."""


class SimulationCancelled(OptionEngineError):
    """Monte Carlo run aborted between path chunks."""


class FellerConditionWarning(UserWarning):
    pass


class DegenerateSampleWarning(UserWarning):
    pass


def require_positive(name: str, value: float) -> float:
    """Return value as float, raising InvalidParameterError unless finite and > 0."""
    value = float(value)
    if not math.isfinite(value) or value <= 0:
        raise InvalidParameterError(f"{name} must be positive, got {value}")
    return value


def require_finite(name: str, value: float) -> float:
    value = float(value)
    if not math.isfinite(value):
        raise InvalidParameterError(f"{name} must be finite, got {value}")
    return value


def require_count(name: str, value: int) -> int:
    if isinstance(value, bool) or int(value) != value or value < 1:
        raise InvalidParameterError(f"{name} must be an integer >= 1, got {value}")
    return int(value)


def ensure_finite(what: str, values: Iterable[float]) -> None:
    """Raise NumericalOverflowError if any of the named outputs is not finite."""
    for value in values:
        if value is not None and not math.isfinite(value):
            raise NumericalOverflowError(f"{what} produced a non-finite value ({value})")
