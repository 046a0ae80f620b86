#!/usr/bin/env python3
"""
═══════════════════════════════════════════════════════════════════════════════
OPTION ENGINE - Command Line Entry Point
═══════════════════════════════════════════════════════════════════════════════

Usage:
    python -m option_engine.run --demo           # Pricing / simulation walkthrough
    python -m option_engine.run --test           # Run validation tests only
    python -m option_engine.run --demo --seed 7 --paths 5000

Demo inputs:
    S = 100, K = 100, σ = 20%, r = 5%, T = 1y, call
    Heston: κ = 2.0, θ = 0.045, ξ = 0.5, ρ = -0.7, v0 = 0.0456

═══════════════════════════════════════════════════════════════════════════════
"""

import sys
import argparse
import logging


def run_demo(seed=None, paths=10000, steps=100):
    """Run demonstration calculations."""

    print("=" * 70)
    print("OPTION ENGINE - DEMO")
    print("=" * 70)
    print()

    from dataclasses import replace

    from option_engine.backend.core.parameters import (
        get_default_heston_params,
        get_default_market_params,
        get_default_simulation_config,
    )
    from option_engine.backend.core.random_source import RandomNormalSource
    from option_engine.backend.solvers.black_scholes import BlackScholesPricer
    from option_engine.backend.solvers.monte_carlo import simulate_with_config
    from option_engine.backend.risk.statistics import compute_risk_profile, pnl_from_simulation
    from option_engine.backend.structures.composer import StructureComposer, StructureKind
    from option_engine.backend.scenarios.engine import ScenarioEngine

    market = get_default_market_params()
    heston = get_default_heston_params()
    print("Market Parameters:")
    print(f"  S = {market.spot}, K = {market.strike}, σ = {market.volatility:.2%}")
    print(f"  r = {market.rate:.2%}, T = {market.maturity}y, type = {market.option_type.value}")
    print()

    # Black-Scholes
    print("1. BLACK-SCHOLES")
    pricer = BlackScholesPricer()
    bs = pricer.price(market)
    summary = pricer.summarize(market)
    print(f"   Price:     {bs.price:.4f}")
    print(f"   Delta (Δ): {bs.delta:.4f}")
    print(f"   Gamma (Γ): {bs.gamma:.6f}")
    print(f"   Theta (Θ): {bs.theta:.4f} per day")
    print(f"   Vega  (ν): {bs.vega:.4f} per vol point")
    print(f"   Rho   (ρ): {bs.rho:.4f} per 1% rate")
    print(f"   Breakeven: {summary.breakeven:.2f} ({summary.breakeven_move_pct:+.2f}%), {summary.moneyness_label}")

    # Heston Monte Carlo
    config = replace(get_default_simulation_config(), path_count=paths, step_count=steps, seed=seed)
    source = RandomNormalSource(config.seed)
    print(f"\n2. HESTON MONTE CARLO ({config.effective_path_count:,} paths, {steps} steps)")
    print(f"   κ={heston.kappa}, θ={heston.theta}, ξ={heston.xi}, ρ={heston.rho}, v0={heston.v0}")
    print(f"   initial vol {heston.initial_vol:.2%}, long-run vol {heston.long_term_vol:.2%}, "
          f"Feller ratio {heston.feller_ratio:.2f}")
    print(f"   seed entropy: {source.entropy}")
    sim = simulate_with_config(market, heston, config, source=source)
    low, high = sim.confidence_interval(0.95)
    print(f"   Price:  {sim.price:.4f} ± {sim.std_error:.4f}  (95% CI [{low:.4f}, {high:.4f}])")
    print(f"   P(ITM): {sim.probability_itm:.2%}")
    print(f"   Terminal spot 5% / 50% / 95%: "
          f"{sim.quantile(0.05):.2f} / {sim.quantile(0.50):.2f} / {sim.quantile(0.95):.2f}")

    # Risk
    print("\n3. RISK (P&L = discounted payoff - BS premium)")
    pnl = pnl_from_simulation(sim, bs.price)
    profile = compute_risk_profile(pnl)
    for level, metrics in profile.items():
        print(f"   {level:.0%}: VaR = {metrics.var:.4f}, CVaR = {metrics.cvar:.4f}")
    metrics = profile[0.95]
    print(f"   mean = {metrics.mean:.4f}, std = {metrics.std:.4f}, "
          f"skew = {metrics.skew:.3f}, excess kurtosis = {metrics.excess_kurtosis:.3f}")

    # Structures
    print("\n4. STRUCTURES")
    composer = StructureComposer(pricer)
    print("   Structure        Net premium   Max gain   Max loss")
    for kind in StructureKind:
        curve = composer.payoff_curve(kind, market)
        print(f"   {kind.value:15s}  {curve.structure.net_premium:11.4f}  {curve.max_gain:9.4f}  {curve.max_loss:9.4f}")

    # Scenarios
    print("\n5. SCENARIOS")
    for result in ScenarioEngine(pricer).apply(market):
        pct = f"{result.pnl_pct:+8.2f}%" if result.pnl_pct is not None else "     n/a"
        print(f"   {result.name:24s} {result.price:9.4f}  {result.pnl:+9.4f}  {pct}  Δ={result.delta:.3f}")

    print()
    print("=" * 70)
    print("Demo complete!")
    print("=" * 70)


def run_tests():
    """Run validation tests."""
    from option_engine.tests.validation import run_all_tests
    success = run_all_tests()
    return 0 if success else 1


def main():
    parser = argparse.ArgumentParser(
        description='European option pricing, Heston simulation and risk engine',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m option_engine.run --demo           Run demo calculations
    python -m option_engine.run --demo --seed 1  Reproducible demo
    python -m option_engine.run --test           Run validation tests
        """
    )

    parser.add_argument('--test', action='store_true', help='Run validation tests')
    parser.add_argument('--demo', action='store_true', help='Run demo calculations')
    parser.add_argument('--seed', type=int, default=None, help='Monte Carlo seed (default: unseeded)')
    parser.add_argument('--paths', type=int, default=10000, help='Monte Carlo paths (default: 10000, capped at 12000)')
    parser.add_argument('--steps', type=int, default=100, help='Monte Carlo time steps (default: 100)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log debug output')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if args.test:
        sys.exit(run_tests())
    elif args.demo:
        run_demo(args.seed, args.paths, args.steps)
    else:
        parser.print_help()


if __name__ == '__main__':
    main()
