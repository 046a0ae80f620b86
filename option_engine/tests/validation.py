"""
═══════════════════════════════════════════════════════════════════════════════
OPTION ENGINE VALIDATION SUITE
═══════════════════════════════════════════════════════════════════════════════

Runs every case in tests/cases without a pytest session:

 1. Put-Call Parity:       C - P = S - K·e^{-rT}
 2. Reference Values:      S=K=100, σ=20%, r=5%, T=1 → C ≈ 10.4506, Δ ≈ 0.6368
 3. Monotonicity:          price ↑ in σ, call ↑ / put ↓ in S
 4. Greeks:                signs and finite-difference agreement
 5. Parameter Validation:  invalid inputs, Feller warning, overflow
 6. MC Variance Positivity and reproducibility
 7. MC Convergence:        ξ = 0 → Black-Scholes within 4·SE
 8. Risk Statistics:       VaR / CVaR / moments
 9. Greeks Surface and sweeps
10. Structures
11. Scenarios
12. QuantLib Benchmark     (skipped when QuantLib is not installed)

═══════════════════════════════════════════════════════════════════════════════
"""

import importlib
import inspect
import sys
from typing import Callable, List, Optional

import pytest


CASE_MODULES = [
    ("Put-Call Parity", "test_01_put_call_parity"),
    ("Reference Values", "test_02_reference_values"),
    ("Monotonicity", "test_03_monotonicity"),
    ("Greeks Signs", "test_04_greeks_signs"),
    ("Parameter Validation", "test_05_parameter_validation"),
    ("MC Variance Positivity", "test_06_mc_variance_positivity"),
    ("MC Convergence", "test_07_mc_convergence"),
    ("Risk Statistics", "test_08_risk_statistics"),
    ("Greeks Surface", "test_09_greeks_surface"),
    ("Structures", "test_10_structures"),
    ("Scenarios", "test_11_scenarios"),
    ("QuantLib Benchmark", "test_12_quantlib_benchmark"),
]


# ═══════════════════════════════════════════════════════════════════════════════
# TEST UTILITIES
# ═══════════════════════════════════════════════════════════════════════════════

class TestResult:
    """Container for test results."""

    __test__ = False

    def __init__(self, name: str, passed: bool, message: str, skipped: bool = False):
        self.name = name
        self.passed = passed
        self.message = message
        self.skipped = skipped

    def __str__(self) -> str:
        if self.skipped:
            status = "- SKIP"
        else:
            status = "✓ PASS" if self.passed else "✗ FAIL"
        return f"{status}: {self.name} - {self.message}"


def run_test(name: str, test_func: Callable[[], None]) -> TestResult:
    """Execute a test function and return result."""
    try:
        test_func()
        return TestResult(name, True, "ok")
    except pytest.skip.Exception as e:
        return TestResult(name, True, f"skipped ({e.msg})", skipped=True)
    except AssertionError as e:
        return TestResult(name, False, f"Assertion failed: {e}" if str(e) else "Assertion failed")
    except Exception as e:
        return TestResult(name, False, f"Exception: {type(e).__name__}: {e}")


def collect_tests(module_name: str) -> List[Callable[[], None]]:
    module = importlib.import_module(f"option_engine.tests.cases.{module_name}")
    return [
        func for name, func in inspect.getmembers(module, inspect.isfunction)
        if name.startswith('test_') and func.__module__ == module.__name__
    ]


def run_all_tests(selected: Optional[List[str]] = None) -> bool:
    """Run all validation tests and report results."""

    print("=" * 70)
    print("OPTION ENGINE VALIDATION SUITE")
    print("=" * 70)
    print()

    results = []
    for title, module_name in CASE_MODULES:
        if selected and module_name not in selected:
            continue
        print(f"── {title} " + "─" * max(0, 66 - len(title)))
        for test_func in collect_tests(module_name):
            result = run_test(test_func.__name__, test_func)
            results.append(result)
            print(f"  {result}")
        print()

    # Summary
    passed = sum(1 for r in results if r.passed and not r.skipped)
    skipped = sum(1 for r in results if r.skipped)
    failed = sum(1 for r in results if not r.passed)
    total = len(results)

    print("=" * 70)
    print(f"SUMMARY: {passed}/{total} tests passed, {skipped} skipped")
    print("=" * 70)

    if failed == 0:
        print("\n✓ All validation tests PASSED!")
        return True
    else:
        print(f"\n✗ {failed} test(s) FAILED")
        return False


if __name__ == '__main__':
    success = run_all_tests(sys.argv[1:] or None)
    sys.exit(0 if success else 1)
