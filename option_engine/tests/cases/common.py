import warnings
from typing import List

from option_engine.backend.core.errors import FellerConditionWarning
from option_engine.backend.core.parameters import (
    HestonParameters,
    MarketParameters,
    OptionType,
    get_default_heston_params,
    get_default_market_params,
)
from option_engine.backend.core.random_source import RandomNormalSource
from option_engine.backend.solvers.black_scholes import BlackScholesPricer, intrinsic_value, price
from option_engine.backend.solvers.monte_carlo import HestonPathSimulator, simulate_heston

try:
    import QuantLib  # noqa: F401
    QUANTLIB_AVAILABLE = True
except ImportError:
    QUANTLIB_AVAILABLE = False


# S=100, K=100, σ=20%, r=5%, T=1 (Hull / Haug reference values)
REFERENCE_CALL = 10.450583572185565
REFERENCE_PUT = 5.573526022256971
REFERENCE_CALL_DELTA = 0.6368306511756191
REFERENCE_GAMMA = 0.018762017345846895


def market(spot=100.0, strike=100.0, vol=0.20, rate=0.05, T=1.0, option_type='call') -> MarketParameters:
    return MarketParameters(spot=spot, strike=strike, volatility=vol, rate=rate, maturity=T, option_type=option_type)


def market_grid() -> List[MarketParameters]:
    """A spread of moneyness, vol, rate and maturity combinations."""
    cases = []
    for spot in (60.0, 95.0, 100.0, 130.0):
        for vol in (0.08, 0.25, 0.6):
            for rate in (0.0, 0.03, 0.08):
                for T in (0.05, 1.0, 4.0):
                    cases.append(market(spot=spot, vol=vol, rate=rate, T=T))
    return cases


def constant_vol_heston(vol: float = 0.20) -> HestonParameters:
    """ξ = 0 and v0 = θ: variance never moves, spot follows GBM."""
    return HestonParameters(kappa=2.0, theta=vol ** 2, xi=0.0, rho=0.0, v0=vol ** 2)


def feller_violating_heston() -> HestonParameters:
    with warnings.catch_warnings():
        warnings.simplefilter('ignore', FellerConditionWarning)
        return HestonParameters(kappa=1.0, theta=0.04, xi=0.9, rho=-0.7, v0=0.04)


def quantlib_bs_price(params: MarketParameters) -> float:
    if not QUANTLIB_AVAILABLE:
        raise RuntimeError("QuantLib is not installed")

    import QuantLib as ql

    evaluation_date = ql.Date(1, 1, 2026)
    ql.Settings.instance().evaluationDate = evaluation_date
    day_count = ql.Actual365Fixed()

    spot_handle = ql.QuoteHandle(ql.SimpleQuote(params.spot))
    risk_free_ts = ql.YieldTermStructureHandle(ql.FlatForward(evaluation_date, params.rate, day_count))
    dividend_ts = ql.YieldTermStructureHandle(ql.FlatForward(evaluation_date, 0.0, day_count))
    vol_ts = ql.BlackVolTermStructureHandle(
        ql.BlackConstantVol(evaluation_date, ql.NullCalendar(), params.volatility, day_count)
    )
    process = ql.BlackScholesMertonProcess(spot_handle, dividend_ts, risk_free_ts, vol_ts)

    maturity_date = evaluation_date + int(round(params.maturity * 365))
    ql_type = ql.Option.Call if params.is_call else ql.Option.Put
    option = ql.VanillaOption(ql.PlainVanillaPayoff(ql_type, params.strike), ql.EuropeanExercise(maturity_date))
    option.setPricingEngine(ql.AnalyticEuropeanEngine(process))

    return float(option.NPV())
