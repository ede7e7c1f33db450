"""Configuration loading for the wavcorr tools."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping

from .c_kernels import BACKENDS

_PACKAGE_ROOT = Path(__file__).resolve().parent
DEFAULT_CONFIG_PATH = _PACKAGE_ROOT / "configs" / "default.json"

DEFAULT_SAMPLE_RATE = 44100
DEFAULT_BENCHMARK_SIZES = (256, 1024, 4096)


@dataclass(slots=True)
class KernelConfig:
    """Kernel backend selection and call logging."""

    backend: str = "auto"
    log_calls: bool = False


@dataclass(slots=True)
class BenchmarkConfig:
    """Defaults for the ``bench`` command."""

    sizes: List[int] = field(default_factory=lambda: list(DEFAULT_BENCHMARK_SIZES))
    iterations: int = 5
    seed: int = 0
    window_min: int = 16
    window_max: int = 128


@dataclass(slots=True)
class AppConfig:
    sample_rate: int = DEFAULT_SAMPLE_RATE
    kernels: KernelConfig = field(default_factory=KernelConfig)
    benchmark: BenchmarkConfig = field(default_factory=BenchmarkConfig)


def _normalise_kernels(data: Mapping[str, Any]) -> KernelConfig:
    backend = str(data.get("backend", "auto"))
    if backend not in BACKENDS:
        raise ValueError(f"kernels.backend must be one of {', '.join(BACKENDS)}, got {backend!r}")
    return KernelConfig(backend=backend, log_calls=bool(data.get("log_calls", False)))


def _normalise_benchmark(data: Mapping[str, Any]) -> BenchmarkConfig:
    sizes = [int(size) for size in data.get("sizes", DEFAULT_BENCHMARK_SIZES)]
    if not sizes:
        raise ValueError("benchmark.sizes must contain at least one buffer size")
    if any(size <= 0 for size in sizes):
        raise ValueError("benchmark.sizes must be positive integers")
    iterations = int(data.get("iterations", 5))
    if iterations <= 0:
        raise ValueError("benchmark.iterations must be positive")
    window_min = int(data.get("window_min", 16))
    window_max = int(data.get("window_max", 128))
    if window_min < 1 or window_max < window_min:
        raise ValueError("benchmark windows must satisfy 1 <= window_min <= window_max")
    return BenchmarkConfig(
        sizes=sizes,
        iterations=iterations,
        seed=int(data.get("seed", 0)),
        window_min=window_min,
        window_max=window_max,
    )


def load_configuration(path: str | Path) -> AppConfig:
    """Load an :class:`AppConfig` from ``path``."""

    with open(path, "r", encoding="utf8") as fh:
        raw = json.load(fh)
    sample_rate = int(raw.get("sample_rate", DEFAULT_SAMPLE_RATE))
    if sample_rate <= 0:
        raise ValueError("sample_rate must be positive")
    kernels = _normalise_kernels(dict(raw.get("kernels", {}) or {}))
    benchmark = _normalise_benchmark(dict(raw.get("benchmark", {}) or {}))
    return AppConfig(sample_rate=sample_rate, kernels=kernels, benchmark=benchmark)


__all__ = [
    "AppConfig",
    "BenchmarkConfig",
    "DEFAULT_CONFIG_PATH",
    "KernelConfig",
    "load_configuration",
]
