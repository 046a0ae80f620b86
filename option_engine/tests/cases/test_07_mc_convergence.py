import numpy as np
import pytest

from option_engine.backend.core.errors import InvalidParameterError, NumericalOverflowError
from option_engine.tests.cases.common import (
    RandomNormalSource,
    constant_vol_heston,
    get_default_heston_params,
    market,
    price,
    simulate_heston,
)


def test_zero_vol_of_vol_converges_to_black_scholes():
    for option_type in ('call', 'put'):
        params = market(option_type=option_type)
        bs = price(params).price
        mc = simulate_heston(params, constant_vol_heston(0.20), path_count=20000, step_count=50,
                             source=RandomNormalSource(42))

        assert np.allclose(mc.vol_paths, 20.0)
        assert abs(mc.price - bs) < 4 * mc.std_error, (option_type, mc.price, bs, mc.std_error)


def test_standard_error_shrinks_with_paths():
    params = market()
    small = simulate_heston(params, constant_vol_heston(), path_count=2000, step_count=20,
                            source=RandomNormalSource(1))
    large = simulate_heston(params, constant_vol_heston(), path_count=8000, step_count=20,
                            source=RandomNormalSource(2))

    ratio = small.std_error / large.std_error
    assert 1.7 < ratio < 2.3, ratio


def test_confidence_interval_brackets_price():
    result = simulate_heston(market(), get_default_heston_params(), path_count=2000, step_count=20,
                             source=RandomNormalSource(4))
    low, high = result.confidence_interval(0.95)

    assert low < result.price < high
    assert abs((high - low) / 2 - 1.959963984540054 * result.std_error) < 1e-9
    with pytest.raises(InvalidParameterError):
        result.confidence_interval(1.0)


def test_terminal_quantiles():
    result = simulate_heston(market(), get_default_heston_params(), path_count=1001, step_count=20,
                             source=RandomNormalSource(9))
    terminal = np.sort(result.terminal_spots)

    assert result.quantile(0.0) == terminal[0]
    assert result.quantile(1.0) == terminal[-1]
    assert result.quantile(0.5) == terminal[500]
    assert result.quantile(0.05) == terminal[50]
    with pytest.raises(InvalidParameterError):
        result.quantile(1.5)


def test_payoffs_price_and_probability():
    call = market()
    put = market(option_type='put')
    discount = np.exp(-0.05)

    for params in (call, put):
        result = simulate_heston(params, get_default_heston_params(), path_count=3000, step_count=30,
                                 source=RandomNormalSource(21))
        terminal = result.terminal_spots
        if params.is_call:
            raw = np.maximum(terminal - 100.0, 0.0)
        else:
            raw = np.maximum(100.0 - terminal, 0.0)

        assert np.allclose(result.payoffs, raw * discount)
        assert result.price == pytest.approx(np.mean(result.payoffs))
        assert result.probability_itm == pytest.approx(np.mean(raw > 0))
        assert 0.0 <= result.probability_itm <= 1.0
        assert result.price >= 0.0


def test_simulation_overflow_is_reported():
    with pytest.raises(NumericalOverflowError):
        simulate_heston(market(rate=1000.0, T=10.0), constant_vol_heston(), path_count=200, step_count=20,
                        source=RandomNormalSource(1))
    with pytest.raises(NumericalOverflowError):
        simulate_heston(market(rate=-1000.0, T=10.0), constant_vol_heston(), path_count=200, step_count=20,
                        source=RandomNormalSource(1))
