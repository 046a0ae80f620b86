"""
Heston Monte Carlo Path Simulator

═══════════════════════════════════════════════════════════════════════════════
EULER DISCRETIZATION WITH FULL TRUNCATION
═══════════════════════════════════════════════════════════════════════════════

Δt = T / N_steps. Each path starts at S₀ = S, V₀ = v0 and at every step:

1. Correlated shocks:
   z₁ ~ N(0,1)                       (drives spot)
   z₂ = ρ·z₁ + √(1-ρ²)·z₁'           (drives variance), z₁' ~ N(0,1)

2. Variance (floored):
   V ← max(V + κ(θ - V)Δt + ξ·√max(V,0)·√Δt·z₂, ε),   ε = 1e-4

3. Spot (log-Euler, uses the updated variance):
   S ← S·exp((r - V/2)Δt + √max(V,0)·√Δt·z₁)

Euler on a square-root diffusion can step below zero; the floor ε keeps
√V real and the recorded volatility strictly positive.

Recorded per step: spot level and instantaneous vol √V·100 (vol points).

═══════════════════════════════════════════════════════════════════════════════
PRICING
═══════════════════════════════════════════════════════════════════════════════

payoff_i   = max(S_T - K, 0) (call) or max(K - S_T, 0) (put)
price      = e^{-rT}·(1/N)·Σ payoff_i
SE         = e^{-rT}·std(payoff)/√N
P(ITM)     = #{payoff_i > 0} / N

With ξ = 0 and v0 = θ the variance is constant, spot follows exact GBM
steps and the price converges to Black-Scholes at rate 1/√N.

═══════════════════════════════════════════════════════════════════════════════
PARALLELISM
═══════════════════════════════════════════════════════════════════════════════

Paths are split into fixed-size chunks. Chunk i draws from child stream i
of the RandomNormalSource (SeedSequence.spawn), chunks may run on a thread
pool, and a single reducer concatenates them in chunk order. A seed thus
gives the same result for any worker count. A cancel event is checked
before each chunk starts; a cancelled run raises SimulationCancelled and
no partial result is returned.

═══════════════════════════════════════════════════════════════════════════════
"""

import logging
import math
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np
from scipy.stats import norm

from option_engine.backend.core.errors import (
    InvalidParameterError,
    NumericalOverflowError,
    SimulationCancelled,
    ensure_finite,
    require_count,
)
from option_engine.backend.core.parameters import (
    HestonParameters,
    MarketParameters,
    SimulationConfig,
)
from option_engine.backend.core.random_source import RandomNormalSource


logger = logging.getLogger(__name__)

VARIANCE_FLOOR = 1e-4
DISPLAY_PATHS = 60


@dataclass(frozen=True)
class SimulationResult:
    """
    Output of one Heston run. Arrays are owned by the caller; a parameter
    change means a new run, never an in-place update.

    spot_paths / vol_paths have shape (path_count, step_count + 1);
    column 0 is the starting state.
    """

    price: float
    std_error: float
    probability_itm: float
    spot_paths: np.ndarray
    vol_paths: np.ndarray
    terminal_spots: np.ndarray
    payoffs: np.ndarray            # discounted to valuation date
    sorted_terminal_spots: np.ndarray = field(repr=False)

    @property
    def path_count(self) -> int:
        return self.spot_paths.shape[0]

    @property
    def step_count(self) -> int:
        return self.spot_paths.shape[1] - 1

    def quantile(self, p: float) -> float:
        """
        Terminal spot at percentile p, read directly from the sorted sample
        (index floor(p·N), no interpolation).
        """
        p = float(p)
        if not 0.0 <= p <= 1.0:
            raise InvalidParameterError(f"quantile level must be in [0, 1], got {p}")
        n = len(self.sorted_terminal_spots)
        idx = min(int(math.floor(p * n)), n - 1)
        return float(self.sorted_terminal_spots[idx])

    def confidence_interval(self, level: float = 0.95) -> Tuple[float, float]:
        """Normal-approximation interval price ± z·SE."""
        if not 0.0 < level < 1.0:
            raise InvalidParameterError(f"confidence level must be in (0, 1), got {level}")
        z = norm.ppf(0.5 + level / 2)
        return self.price - z * self.std_error, self.price + z * self.std_error

    def sample_paths(self, n: int = DISPLAY_PATHS) -> Tuple[np.ndarray, np.ndarray]:
        """First n spot and vol paths (views, not copies)."""
        n = require_count('n', n)
        return self.spot_paths[:n], self.vol_paths[:n]


class HestonPathSimulator:
    """
    Monte Carlo simulator for the Heston model (Euler, full truncation).

    Each simulate() call is independent: all state lives in the arguments
    and in the RandomNormalSource supplied for that call.
    """

    def __init__(self, params: HestonParameters, variance_floor: float = VARIANCE_FLOOR):
        """
        Initialize simulator.

        Args:
            params: Heston variance-process parameters
            variance_floor: Lower bound applied to V after every step
        """
        if not variance_floor > 0:
            raise InvalidParameterError(f"variance_floor must be positive, got {variance_floor}")
        self.p = params
        self.variance_floor = float(variance_floor)

    def simulate_paths(
        self,
        market: MarketParameters,
        n_steps: int,
        n_paths: int,
        source: RandomNormalSource,
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Simulate one block of paths from a single random stream.

        Args:
            market: Spot, rate and maturity for the run
            n_steps: Number of time steps
            n_paths: Number of paths in this block
            source: Normal draws for this block

        Returns:
            S_paths: Spot paths, shape (n_paths, n_steps + 1)
            vol_paths: √V·100 paths, shape (n_paths, n_steps + 1)
        """
        kappa, theta, xi, rho = self.p.kappa, self.p.theta, self.p.xi, self.p.rho
        r = market.rate
        dt = market.maturity / n_steps
        sqrt_dt = math.sqrt(dt)
        rho_bar = math.sqrt(max(1.0 - rho * rho, 0.0))

        S_paths = np.empty((n_paths, n_steps + 1))
        vol_paths = np.empty((n_paths, n_steps + 1))

        S = np.full(n_paths, market.spot)
        V = np.full(n_paths, self.p.v0)
        S_paths[:, 0] = S
        vol_paths[:, 0] = np.sqrt(V) * 100

        for i in range(n_steps):
            z1 = source.standard_normal(n_paths)
            z2 = rho * z1 + rho_bar * source.standard_normal(n_paths)

            # V ← max(V + κ(θ - V)Δt + ξ√V⁺√Δt·z₂, ε)
            V = np.maximum(
                V + kappa * (theta - V) * dt + xi * np.sqrt(np.maximum(V, 0.0)) * sqrt_dt * z2,
                self.variance_floor,
            )

            # ln(S_{n+1}/S_n) = (r - V/2)Δt + √V·√Δt·z₁
            sqrt_V = np.sqrt(np.maximum(V, 0.0))
            with np.errstate(over='ignore'):
                S = S * np.exp((r - 0.5 * V) * dt + sqrt_V * sqrt_dt * z1)

            S_paths[:, i + 1] = S
            vol_paths[:, i + 1] = sqrt_V * 100

        return S_paths, vol_paths

    def simulate(
        self,
        market: MarketParameters,
        path_count: int = 10000,
        step_count: int = 100,
        source: Optional[RandomNormalSource] = None,
        chunk_size: int = 2000,
        workers: int = 1,
        cancel_event: Optional[threading.Event] = None,
    ) -> SimulationResult:
        """
        Simulate paths and price the European option described by market.

        Args:
            market: Market parameters (option type and strike define the payoff)
            path_count: Number of paths (fixed for the run)
            step_count: Time steps per path
            source: Random normal source; a fresh unseeded one if omitted
            chunk_size: Paths per child stream
            workers: Thread pool size (1 = run chunks inline)
            cancel_event: Set it from another thread to abort between chunks

        Returns:
            SimulationResult

        Raises:
            InvalidParameterError: path/step/chunk/worker counts < 1
            SimulationCancelled: cancel_event was set
            NumericalOverflowError: a simulated spot is not finite
        """
        path_count = require_count('path_count', path_count)
        step_count = require_count('step_count', step_count)
        chunk_size = require_count('chunk_size', chunk_size)
        workers = require_count('workers', workers)
        if source is None:
            source = RandomNormalSource()

        sizes = [chunk_size] * (path_count // chunk_size)
        if path_count % chunk_size:
            sizes.append(path_count % chunk_size)
        streams = source.spawn(len(sizes))

        logger.debug(
            "Heston MC: %d paths x %d steps in %d chunk(s), %d worker(s)",
            path_count, step_count, len(sizes), workers,
        )
        started = time.perf_counter()

        def run_chunk(chunk: int) -> Tuple[np.ndarray, np.ndarray]:
            if cancel_event is not None and cancel_event.is_set():
                raise SimulationCancelled(f"simulation cancelled before chunk {chunk + 1}/{len(sizes)}")
            return self.simulate_paths(market, step_count, sizes[chunk], streams[chunk])

        if workers == 1 or len(sizes) == 1:
            blocks = [run_chunk(chunk) for chunk in range(len(sizes))]
        else:
            blocks = self._run_parallel(run_chunk, len(sizes), workers)

        result = self._reduce(market, blocks)

        logger.info(
            "Heston MC finished: %d paths, price=%.6f ± %.6f (%.3fs)",
            path_count, result.price, result.std_error, time.perf_counter() - started,
        )
        return result

    @staticmethod
    def _run_parallel(run_chunk, n_chunks: int, workers: int) -> List[Tuple[np.ndarray, np.ndarray]]:
        executor = ThreadPoolExecutor(max_workers=workers)
        try:
            futures = [executor.submit(run_chunk, chunk) for chunk in range(n_chunks)]
            # Collected in submission order so the merge does not depend on scheduling
            return [future.result() for future in futures]
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

    @staticmethod
    def _reduce(market: MarketParameters, blocks) -> SimulationResult:
        spot_paths = np.concatenate([b[0] for b in blocks], axis=0)
        vol_paths = np.concatenate([b[1] for b in blocks], axis=0)
        terminal = spot_paths[:, -1].copy()

        if not np.all(np.isfinite(terminal)):
            raise NumericalOverflowError(
                f"Heston simulation produced {int(np.sum(~np.isfinite(terminal)))} non-finite terminal spot(s)"
            )

        if market.is_call:
            raw_payoffs = np.maximum(terminal - market.strike, 0.0)
        else:
            raw_payoffs = np.maximum(market.strike - terminal, 0.0)

        discount = market.discount_factor
        payoffs = raw_payoffs * discount
        n = len(payoffs)
        price = float(np.mean(payoffs))
        std_error = float(np.std(payoffs) / math.sqrt(n))
        ensure_finite('Heston Monte Carlo pricing', (price, std_error))

        return SimulationResult(
            price=price,
            std_error=std_error,
            probability_itm=float(np.count_nonzero(raw_payoffs > 0) / n),
            spot_paths=spot_paths,
            vol_paths=vol_paths,
            terminal_spots=terminal,
            payoffs=payoffs,
            sorted_terminal_spots=np.sort(terminal),
        )


def simulate_heston(
    market: MarketParameters,
    heston: HestonParameters,
    path_count: int = 10000,
    step_count: int = 100,
    source: Optional[RandomNormalSource] = None,
    workers: int = 1,
    cancel_event: Optional[threading.Event] = None,
) -> SimulationResult:
    """Module-level entry point around HestonPathSimulator.simulate."""
    return HestonPathSimulator(heston).simulate(
        market,
        path_count=path_count,
        step_count=step_count,
        source=source,
        workers=workers,
        cancel_event=cancel_event,
    )


def simulate_with_config(
    market: MarketParameters,
    heston: HestonParameters,
    config: SimulationConfig,
    source: Optional[RandomNormalSource] = None,
    cancel_event: Optional[threading.Event] = None,
) -> SimulationResult:
    """Run with SimulationConfig sizes; the interactive path cap applies."""
    if source is None:
        source = RandomNormalSource(config.seed)
    return HestonPathSimulator(heston).simulate(
        market,
        path_count=config.effective_path_count,
        step_count=config.step_count,
        source=source,
        chunk_size=config.chunk_size,
        workers=config.workers,
        cancel_event=cancel_event,
    )
