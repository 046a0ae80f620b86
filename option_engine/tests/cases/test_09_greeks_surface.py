import numpy as np
import pytest

from option_engine.backend.core.errors import InvalidParameterError
from option_engine.backend.core.sweeps import FixedRange, SweepRange, linear_sweep, ranged_sweep
from option_engine.backend.greeks.surface import (
    GreekMetric,
    GreeksSurfaceGenerator,
    greeks_surface,
    sensitivity_profile,
    time_decay_curve,
)
from option_engine.tests.cases.common import BlackScholesPricer, get_default_market_params, market, price


def test_default_axes():
    surface = greeks_surface(get_default_market_params(), 'delta')

    assert np.array_equal(surface.spot_axis, np.arange(85.0, 116.0, 2.0))
    assert np.allclose(surface.vol_axis, np.arange(10.0, 41.0, 2.0))
    assert surface.grid.shape == (16, 16)
    assert surface.metric is GreekMetric.DELTA


def test_grid_matches_pricer():
    base = market(strike=105.0, option_type='put')
    pricer = BlackScholesPricer()
    for metric in GreekMetric:
        surface = GreeksSurfaceGenerator(base, pricer).surface(metric)
        for i, j in ((0, 0), (3, 5), (15, 15), (8, 2)):
            spot = surface.spot_axis[i]
            vol = surface.vol_axis[j]
            expected = price(base.with_changes(spot=spot, volatility=vol / 100)).get(metric.value)
            assert surface.value_at(i, j) == expected


def test_vega_surface_positive():
    surface = greeks_surface(get_default_market_params(), GreekMetric.VEGA)
    assert np.all(surface.grid > 0)


def test_unknown_metric_rejected():
    with pytest.raises(InvalidParameterError):
        greeks_surface(get_default_market_params(), 'charm')


def test_low_priced_underlying_keeps_distinct_spots():
    surface = greeks_surface(market(spot=1.2, strike=1.2), 'gamma')
    assert len(np.unique(surface.spot_axis)) == 16
    assert surface.spot_axis[0] == pytest.approx(1.02)
    assert surface.spot_axis[-1] == pytest.approx(1.38)


def test_custom_ranges():
    surface = greeks_surface(
        get_default_market_params(),
        'price',
        spot_range=SweepRange(spread_pct=0.10, steps=4, decimals=0),
        vol_range=FixedRange(start=20.0, stop=30.0, steps=2),
    )
    assert list(surface.spot_axis) == [90.0, 95.0, 100.0, 105.0, 110.0]
    assert list(surface.vol_axis) == [20.0, 25.0, 30.0]

    with pytest.raises(InvalidParameterError):
        greeks_surface(get_default_market_params(), 'price', vol_range=FixedRange(-10.0, 30.0, 4))


def test_sensitivity_profile():
    profile = sensitivity_profile(get_default_market_params())

    assert set(profile) == {'spot', 'delta', 'gamma', 'theta', 'vega'}
    assert all(len(values) == 41 for values in profile.values())
    assert profile['spot'][0] == pytest.approx(90.0)
    assert profile['spot'][-1] == pytest.approx(110.0)
    assert np.all(np.diff(profile['delta']) > 0)
    assert profile['gamma'][20] == pytest.approx(price(get_default_market_params()).gamma * 100)


def test_time_decay_curve():
    params = get_default_market_params()
    curve = time_decay_curve(params)

    assert curve[0].day == 0
    assert curve[0].value == price(params).price
    assert all(b.day - a.day == 2 for a, b in zip(curve, curve[1:]))
    assert curve[-1].day <= 365
    assert curve[0].value > curve[-1].value
    assert all(point.theta <= 0 for point in curve)

    short = time_decay_curve(params.with_changes(maturity=30 / 365))
    assert [p.day for p in short] == list(range(31))
    assert short[-1].value == 0.0


def test_linear_sweep():
    assert list(linear_sweep(0.0, 1.0, 4)) == [0.0, 0.25, 0.5, 0.75, 1.0]
    assert linear_sweep(75.0, 125.0, 100)[-1] == 125.0
    assert len(linear_sweep(75.0, 125.0, 100)) == 101
    assert list(linear_sweep(0.5, 2.5, 2, decimals=0)) == [1.0, 2.0, 3.0]

    with pytest.raises(InvalidParameterError):
        linear_sweep(0.0, 1.0, 0)


def test_ranged_sweep():
    assert list(ranged_sweep(100.0, 0.15, 15, decimals=0)) == list(np.arange(85.0, 116.0, 2.0))
    assert list(SweepRange(0.25, 2).around(100.0)) == [75.0, 100.0, 125.0]

    with pytest.raises(InvalidParameterError):
        ranged_sweep(100.0, -0.1, 10)
    with pytest.raises(InvalidParameterError):
        SweepRange(0.1, 0)
