"""Timing harness comparing the C and numpy kernel backends.

Each registered kernel gets synthetic int16 input of a given size (a tone with
a little noise, so the window searches have a real period to find) and is timed
over a number of iterations per backend.  Results come back as a pandas
DataFrame with one row per (kernel, backend, samples) triple.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable

import numpy as np
import pandas as pd

from . import c_kernels

PrepareFn = Callable[[np.random.Generator, int, float], dict[str, Any]]
RunnerFn = Callable[[dict[str, Any], int, int, str], Any]

_TONE_HZ = 441.0


@dataclass(slots=True)
class KernelBenchmarkSpec:
    """Definition for how to benchmark a particular kernel."""

    prepare: PrepareFn
    runner: RunnerFn


@dataclass(slots=True)
class BenchmarkStats:
    """Simple statistics captured for each (kernel, backend, size) triple."""

    mean_seconds: float
    stdev_seconds: float
    min_seconds: float
    max_seconds: float

    @classmethod
    def from_timings(cls, timings: Iterable[float]) -> BenchmarkStats:
        values = np.asarray(list(timings), dtype=np.float64)
        return cls(
            mean_seconds=float(values.mean()),
            stdev_seconds=float(values.std(ddof=0)),
            min_seconds=float(values.min()),
            max_seconds=float(values.max()),
        )

    def as_milliseconds(self) -> dict[str, float]:
        return {
            "mean_ms": self.mean_seconds * 1e3,
            "stdev_ms": self.stdev_seconds * 1e3,
            "min_ms": self.min_seconds * 1e3,
            "max_ms": self.max_seconds * 1e3,
        }


def _tone(rng: np.random.Generator, samples: int, sample_rate: float) -> np.ndarray:
    t = np.arange(samples, dtype=np.float64) / sample_rate
    signal = 12000.0 * np.sin(2.0 * np.pi * _TONE_HZ * t)
    signal += rng.normal(0.0, 300.0, size=samples)
    return np.clip(signal, -32768, 32767).astype(np.int16)


def _pair_prepare(rng: np.random.Generator, samples: int, sample_rate: float) -> dict[str, Any]:
    return {"a": _tone(rng, samples, sample_rate), "b": _tone(rng, samples, sample_rate)}


def _single_prepare(rng: np.random.Generator, samples: int, sample_rate: float) -> dict[str, Any]:
    return {"a": _tone(rng, samples, sample_rate)}


def _similarity_runner(data: dict[str, Any], window_min: int, window_max: int, backend: str) -> float:
    a, b = data["a"], data["b"]
    return c_kernels.calc_similarity(len(a), a, b, backend=backend)


def _autocorrelate_runner(data: dict[str, Any], window_min: int, window_max: int, backend: str):
    seq = data["a"]
    hi = max(1, min(window_max, len(seq) // 2))
    lo = max(1, min(window_min, hi))
    return c_kernels.autocorrelate(lo, hi, len(seq), seq, backend=backend)


def _autosplice_runner(data: dict[str, Any], window_min: int, window_max: int, backend: str):
    a, b = data["a"], data["b"]
    hi = min(window_max, len(a), len(b))
    lo = min(window_min, hi)
    return c_kernels.autosplice(lo, hi, len(a), a, len(b), b, backend=backend)


def _psola_runner(data: dict[str, Any], window_min: int, window_max: int, backend: str) -> np.ndarray:
    a, b = data["a"], data["b"]
    return c_kernels.psola(len(a), len(a), a, len(b), b, backend=backend)


KERNEL_BENCHMARKS: dict[str, KernelBenchmarkSpec] = {
    "similarity": KernelBenchmarkSpec(prepare=_pair_prepare, runner=_similarity_runner),
    "autocorrelate": KernelBenchmarkSpec(prepare=_single_prepare, runner=_autocorrelate_runner),
    "autosplice": KernelBenchmarkSpec(prepare=_pair_prepare, runner=_autosplice_runner),
    "psola": KernelBenchmarkSpec(prepare=_pair_prepare, runner=_psola_runner),
}

RESULT_COLUMNS = ["kernel", "backend", "samples", "mean_ms", "stdev_ms", "min_ms", "max_ms"]


def available_backends() -> list[str]:
    """Concrete backends that can run in this process."""

    return ["c", "python"] if c_kernels.AVAILABLE else ["python"]


def run_kernel_benchmarks(
    sizes: Iterable[int],
    *,
    iterations: int = 5,
    backends: Iterable[str] | None = None,
    kernel_names: Iterable[str] | None = None,
    seed: int = 0,
    sample_rate: float = 44_100.0,
    window_min: int = 16,
    window_max: int = 128,
) -> pd.DataFrame:
    """Execute the benchmark suite and return one row of statistics per run.

    Backends that are not available in this process are skipped rather than
    reported as failures.
    """

    selected = list(kernel_names) if kernel_names is not None else list(KERNEL_BENCHMARKS)
    unknown = sorted(name for name in selected if name not in KERNEL_BENCHMARKS)
    if unknown:
        raise KeyError(f"Unknown kernels requested: {', '.join(unknown)}")

    sizes_list = list(sizes)
    if not sizes_list:
        raise ValueError("at least one buffer size must be provided")
    for size in sizes_list:
        if size <= 0:
            raise ValueError("buffer sizes must be positive integers")
    if iterations <= 0:
        raise ValueError("iterations must be positive")

    runnable = set(available_backends())
    requested = list(backends) if backends is not None else available_backends()
    chosen = [name for name in requested if name in runnable]

    records: list[dict[str, Any]] = []
    for kernel_name in selected:
        spec = KERNEL_BENCHMARKS[kernel_name]
        for backend in chosen:
            for size in sizes_list:
                rng = np.random.default_rng(seed + size)
                data = spec.prepare(rng, size, sample_rate)
                # warm-up call outside the timed region
                spec.runner(data, window_min, window_max, backend)

                times: list[float] = []
                for _ in range(iterations):
                    start = time.perf_counter()
                    spec.runner(data, window_min, window_max, backend)
                    times.append(time.perf_counter() - start)

                stats = BenchmarkStats.from_timings(times)
                records.append(
                    {"kernel": kernel_name, "backend": backend, "samples": size, **stats.as_milliseconds()}
                )

    return pd.DataFrame.from_records(records, columns=RESULT_COLUMNS)


def format_table(results: pd.DataFrame) -> str:
    if results.empty:
        return "No results"
    table = results.pivot_table(
        index=["kernel", "samples"],
        columns="backend",
        values="mean_ms",
        aggfunc="mean",
    )
    table.columns = [f"{name} (ms)" for name in table.columns]
    return table.to_string(float_format=lambda value: f"{value:8.4f}")


__all__ = [
    "BenchmarkStats",
    "KERNEL_BENCHMARKS",
    "KernelBenchmarkSpec",
    "RESULT_COLUMNS",
    "available_backends",
    "format_table",
    "run_kernel_benchmarks",
]
