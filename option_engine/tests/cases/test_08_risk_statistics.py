import math
import warnings

import numpy as np
import pytest
from scipy import stats

from option_engine.backend.core.errors import (
    DegenerateSampleWarning,
    InvalidParameterError,
    NumericalOverflowError,
)
from option_engine.backend.risk.statistics import (
    compute_risk_metrics,
    compute_risk_profile,
    pnl_from_simulation,
    pnl_histogram,
)
from option_engine.tests.cases.common import (
    RandomNormalSource,
    get_default_heston_params,
    market,
    price,
    simulate_heston,
)

EXAMPLE_PNL = [-10, -10, -10, -5, -5, 0, 5, 5, 10, 10]


def test_concrete_example():
    metrics = compute_risk_metrics(EXAMPLE_PNL, 0.9)

    assert metrics.var == 10.0
    assert metrics.cvar == 10.0
    assert metrics.tail_size == 1
    assert metrics.max_loss == 10.0
    assert metrics.max_gain == 10.0
    assert metrics.mean == pytest.approx(-1.0)
    assert metrics.sample_size == 10


def test_cvar_dominates_var():
    rng = np.random.default_rng(17)
    samples = [
        rng.standard_normal(1000),
        rng.standard_t(3, size=500) * 4 - 1,
        rng.exponential(2.0, size=2000) - 2,
        -rng.lognormal(0.0, 1.0, size=300),
    ]
    for sample in samples:
        for confidence in (0.9, 0.95, 0.99):
            metrics = compute_risk_metrics(sample, confidence)
            assert metrics.tail_size > 0
            assert metrics.cvar >= metrics.var
            assert metrics.std >= 0


def test_moments_are_population_form():
    sample = np.random.default_rng(3).gamma(2.0, 1.5, size=400)
    metrics = compute_risk_metrics(sample, 0.95)

    assert metrics.mean == pytest.approx(sample.mean())
    assert metrics.std == pytest.approx(sample.std(ddof=0))
    assert metrics.skew == pytest.approx(stats.skew(sample, bias=True))
    assert metrics.excess_kurtosis == pytest.approx(stats.kurtosis(sample, fisher=True, bias=True))

    z = (sample - sample.mean()) / sample.std()
    assert metrics.skew == pytest.approx(np.mean(z ** 3))
    assert metrics.excess_kurtosis == pytest.approx(np.mean(z ** 4) - 3)


def test_constant_sample_has_zero_moments():
    with warnings.catch_warnings():
        warnings.simplefilter('ignore', DegenerateSampleWarning)
        metrics = compute_risk_metrics([2.5], 0.95)

    assert metrics.std == 0.0
    assert metrics.skew == 0.0
    assert metrics.excess_kurtosis == 0.0
    assert metrics.var == metrics.cvar == -2.5

    flat = compute_risk_metrics([4.0] * 50, 0.9)
    assert flat.std == 0.0 and flat.skew == 0.0 and flat.excess_kurtosis == 0.0


def test_degenerate_tail_falls_back_to_var():
    sample = np.linspace(-5, 5, 50)
    with pytest.warns(DegenerateSampleWarning):
        metrics = compute_risk_metrics(sample, 0.99)

    assert metrics.tail_degenerate
    assert metrics.cvar == metrics.var == 5.0


def test_invalid_inputs_rejected():
    with pytest.raises(InvalidParameterError):
        compute_risk_metrics([], 0.95)
    for confidence in (0.0, 1.0, -0.5, 1.5):
        with pytest.raises(InvalidParameterError):
            compute_risk_metrics(EXAMPLE_PNL, confidence)
    with pytest.raises(NumericalOverflowError):
        compute_risk_metrics([1.0, math.nan, 2.0], 0.95)
    with pytest.raises(NumericalOverflowError):
        compute_risk_metrics([1.0, math.inf], 0.95)


def test_accepts_any_iterable():
    from_generator = compute_risk_metrics((x for x in EXAMPLE_PNL), 0.9)
    assert from_generator == compute_risk_metrics(np.array(EXAMPLE_PNL, dtype=float), 0.9)


def test_risk_profile_per_level():
    sample = np.random.default_rng(8).standard_normal(2000)
    profile = compute_risk_profile(sample)

    assert list(profile) == [0.95, 0.99]
    assert profile[0.99].var >= profile[0.95].var
    assert profile[0.95] == compute_risk_metrics(sample, 0.95)

    custom = compute_risk_profile(sample, levels=(0.9,))
    assert list(custom) == [0.9]


def test_pnl_from_simulation():
    params = market()
    premium = price(params).price
    sim = simulate_heston(params, get_default_heston_params(), path_count=2000, step_count=20,
                          source=RandomNormalSource(12))
    pnl = pnl_from_simulation(sim, premium)

    assert pnl.shape == (2000,)
    assert np.allclose(pnl, sim.payoffs - premium)
    assert np.min(pnl) >= -premium - 1e-12

    metrics = compute_risk_metrics(pnl, 0.95)
    assert metrics.max_loss <= premium + 1e-12
    assert metrics.cvar >= metrics.var


def test_pnl_histogram():
    sample = np.random.default_rng(2).standard_normal(5000)
    hist = pnl_histogram(sample)

    assert len(hist.counts) == 70
    assert len(hist.edges) == 71
    assert hist.counts.sum() == 5000
    assert hist.edges[0] == sample.min() and hist.edges[-1] == sample.max()
    assert hist.max_count == hist.counts.max()
    assert hist.bin_width == pytest.approx((sample.max() - sample.min()) / 70)
    with pytest.raises(InvalidParameterError):
        pnl_histogram(sample, bins=0)
