"""Parameters, errors, distributions, random sources and sweeps."""

from .errors import (
    OptionEngineError,
    InvalidParameterError,
    NumericalOverflowError,
    SimulationCancelled,
    FellerConditionWarning,
    DegenerateSampleWarning,
)
from .parameters import (
    OptionType,
    MarketParameters,
    HestonParameters,
    SimulationConfig,
    DEFAULT_CONFIDENCE_LEVELS,
    get_default_market_params,
    get_default_heston_params,
    get_default_simulation_config,
)
from .random_source import RandomNormalSource

__all__ = [
    'OptionEngineError',
    'InvalidParameterError',
    'NumericalOverflowError',
    'SimulationCancelled',
    'FellerConditionWarning',
    'DegenerateSampleWarning',
    'OptionType',
    'MarketParameters',
    'HestonParameters',
    'SimulationConfig',
    'DEFAULT_CONFIDENCE_LEVELS',
    'get_default_market_params',
    'get_default_heston_params',
    'get_default_simulation_config',
    'RandomNormalSource',
]
