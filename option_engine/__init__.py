"""
═══════════════════════════════════════════════════════════════════════════════
OPTION ENGINE - European Option Pricing, Simulation and Risk
═══════════════════════════════════════════════════════════════════════════════

Computation core for interactive option exploration:

    price            Black-Scholes price + Greeks
    simulate_heston  Heston stochastic-volatility Monte Carlo (paths, vols, payoffs)
    compute_risk_metrics  VaR / CVaR / moments of a P&L sample
    greeks_surface   spot × vol grid of one Greek
    structure_payoff expiry P&L of six standard multi-leg structures
    apply_scenarios  spot / vol / time stress tests

Models:
    Black-Scholes:  dS = rS dt + σS dW
    Heston:         dS = rS dt + √V S dW₁
                    dV = κ(θ-V)dt + ξ√V dW₂
                    Corr(dW₁, dW₂) = ρ

Modules:
    backend.core        - Parameters, errors, normal distribution, RNG, sweeps
    backend.solvers     - Black-Scholes pricer, Heston Monte Carlo
    backend.risk        - Risk statistics over P&L samples
    backend.greeks      - Greeks surfaces and profiles
    backend.structures  - Multi-leg structure composer
    backend.scenarios   - Scenario / stress engine
    tests               - Validation tests

Usage:
    from option_engine import MarketParameters, price, simulate_heston
    from option_engine import get_default_heston_params, RandomNormalSource

    market = MarketParameters(spot=100, strike=100, volatility=0.2,
                              rate=0.05, maturity=1.0, option_type='call')
    price(market).price                      # ≈ 10.4506
    sim = simulate_heston(market, get_default_heston_params(),
                          path_count=10000, step_count=100,
                          source=RandomNormalSource(42))

═══════════════════════════════════════════════════════════════════════════════
"""

__version__ = '1.0.0'

from option_engine.backend.core.errors import (
    OptionEngineError,
    InvalidParameterError,
    NumericalOverflowError,
    SimulationCancelled,
    FellerConditionWarning,
    DegenerateSampleWarning,
)
from option_engine.backend.core.parameters import (
    OptionType,
    MarketParameters,
    HestonParameters,
    SimulationConfig,
    DEFAULT_CONFIDENCE_LEVELS,
    get_default_market_params,
    get_default_heston_params,
    get_default_simulation_config,
)
from option_engine.backend.core.distributions import NormalDistribution
from option_engine.backend.core.random_source import RandomNormalSource
from option_engine.backend.core.sweeps import linear_sweep, ranged_sweep, SweepRange, FixedRange
from option_engine.backend.solvers.black_scholes import (
    BlackScholesPricer,
    PricingResult,
    OptionSummary,
    price,
    summarize,
)
from option_engine.backend.solvers.monte_carlo import (
    HestonPathSimulator,
    SimulationResult,
    simulate_heston,
    simulate_with_config,
)
from option_engine.backend.risk.statistics import (
    RiskMetrics,
    compute_risk_metrics,
    compute_risk_profile,
    pnl_from_simulation,
    pnl_histogram,
)
from option_engine.backend.greeks.surface import (
    GreekMetric,
    GreeksSurface,
    GreeksSurfaceGenerator,
    greeks_surface,
    sensitivity_profile,
    time_decay_curve,
)
from option_engine.backend.structures.composer import (
    StructureKind,
    Side,
    Leg,
    Structure,
    PayoffCurve,
    StructureComposer,
    structure_payoff,
)
from option_engine.backend.scenarios.engine import (
    Scenario,
    ScenarioResult,
    ScenarioEngine,
    DEFAULT_SCENARIOS,
    apply_scenarios,
)

__all__ = [
    'OptionEngineError', 'InvalidParameterError', 'NumericalOverflowError',
    'SimulationCancelled', 'FellerConditionWarning', 'DegenerateSampleWarning',
    'OptionType', 'MarketParameters', 'HestonParameters', 'SimulationConfig',
    'DEFAULT_CONFIDENCE_LEVELS', 'get_default_market_params',
    'get_default_heston_params', 'get_default_simulation_config',
    'NormalDistribution', 'RandomNormalSource',
    'linear_sweep', 'ranged_sweep', 'SweepRange', 'FixedRange',
    'BlackScholesPricer', 'PricingResult', 'OptionSummary', 'price', 'summarize',
    'HestonPathSimulator', 'SimulationResult', 'simulate_heston', 'simulate_with_config',
    'RiskMetrics', 'compute_risk_metrics', 'compute_risk_profile',
    'pnl_from_simulation', 'pnl_histogram',
    'GreekMetric', 'GreeksSurface', 'GreeksSurfaceGenerator', 'greeks_surface',
    'sensitivity_profile', 'time_decay_curve',
    'StructureKind', 'Side', 'Leg', 'Structure', 'PayoffCurve',
    'StructureComposer', 'structure_payoff',
    'Scenario', 'ScenarioResult', 'ScenarioEngine', 'DEFAULT_SCENARIOS', 'apply_scenarios',
]
