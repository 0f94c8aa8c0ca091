"""
benchmarks.py - Timing harness for the quaternion hot paths

Quantifies the two optimizations the algebra exposes to callers:

    1. SLERP            - direct slerp() vs precompute_slerp() + slerp_precomputed()
                          when interpolating many times along one pair
    2. Composition      - value-returning q1 * q2 vs in-place q1 *= q2

Every benchmark returns a DataFrame whose columns are the two variants and
whose rows are timing statistics, plus a 'speedup' row (mean time of the
first variant divided by that of the second).
"""

from __future__ import annotations

import statistics
import time
from typing import Callable, Dict, List, Tuple

import numpy as np
import pandas as pd

from quatcore.interpolation import SlerpPath
from quatcore.quaternion import Quaternion


class Benchmark:
    """Wall-clock timing of the quaternion scenarios below."""

    # ---- Core measurement helpers ----------------------------------------

    @staticmethod
    def time_function(func: Callable, *args, num_runs: int = 100, **kwargs) -> Dict[str, float]:
        """
        Call func(*args, **kwargs) num_runs times under perf_counter.

        The result maps min, max, mean, median, std and total (seconds) plus
        num_runs. A single run reports std 0.
        """
        if num_runs < 1:
            raise ValueError(f"num_runs must be at least 1, got {num_runs}")

        elapsed: List[float] = []
        for _ in range(num_runs):
            start = time.perf_counter()
            func(*args, **kwargs)
            elapsed.append(time.perf_counter() - start)

        return {
            "min": min(elapsed),
            "max": max(elapsed),
            "mean": statistics.mean(elapsed),
            "median": statistics.median(elapsed),
            "std": statistics.stdev(elapsed) if num_runs > 1 else 0.0,
            "total": sum(elapsed),
            "num_runs": num_runs,
        }

    @staticmethod
    def compare(
        func_a: Callable,
        func_b: Callable,
        *args,
        labels: Tuple[str, str] = ("A", "B"),
        num_runs: int = 100,
        **kwargs,
    ) -> pd.DataFrame:
        """
        Time both callables with identical arguments, one column each.

        The speedup row holds mean(a) / mean(b) under *func_a* and 1.0
        under *func_b*.
        """
        first, second = (
            Benchmark.time_function(f, *args, num_runs=num_runs, **kwargs)
            for f in (func_a, func_b)
        )
        table = pd.DataFrame({labels[0]: first, labels[1]: second})
        if second["mean"] > 0:
            table.loc["speedup"] = [first["mean"] / second["mean"], 1.0]
        return table

    # ---- Benchmark scenarios --------------------------------------------

    @staticmethod
    def benchmark_slerp(num_runs: int = 20, samples: int = 200) -> pd.DataFrame:
        """
        Scenario 1 -- interpolate *samples* times along one fixed pair.

        The direct variant recomputes dot, arccos and 1/sin(theta) on every
        call; the precomputed variant pays for them once per pair.
        """
        q1 = Quaternion.from_axis_angle([0.0, 0.0, 1.0], 0.3)
        q2 = Quaternion.from_axis_angle(np.array([1.0, 1.0, 0.0]) / np.sqrt(2.0), 2.1)
        ts = np.linspace(0.0, 1.0, samples)

        def direct() -> None:
            for t in ts:
                Quaternion.slerp(q1, q2, t)

        def precomputed() -> None:
            path = SlerpPath(q1, q2)
            for t in ts:
                path.at(t)

        return Benchmark.compare(direct, precomputed,
                                 labels=("direct_slerp", "precomputed_slerp"),
                                 num_runs=num_runs)

    @staticmethod
    def benchmark_composition(num_runs: int = 20, steps: int = 1000) -> pd.DataFrame:
        """
        Scenario 2 -- accumulate *steps* small rotations.

        Value-returning products allocate a new Quaternion per step; the
        in-place form reuses the receiver's storage.
        """
        step = Quaternion.rotation_y(1e-3)

        def value_returning() -> None:
            q = Quaternion.identity()
            for _ in range(steps):
                q = q * step

        def in_place() -> None:
            q = Quaternion.identity()
            for _ in range(steps):
                q *= step

        return Benchmark.compare(value_returning, in_place,
                                 labels=("value_multiply", "inplace_multiply"),
                                 num_runs=num_runs)

    @staticmethod
    def run_all_benchmarks(num_runs: int = 20) -> pd.DataFrame:
        """Run every scenario and concatenate the results by scenario name."""
        return pd.concat(
            {
                "slerp": Benchmark.benchmark_slerp(num_runs=num_runs),
                "composition": Benchmark.benchmark_composition(num_runs=num_runs),
            },
            axis=0,
        )
