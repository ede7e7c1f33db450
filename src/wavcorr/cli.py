"""Command line entry point for the wavcorr kernels."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from . import c_kernels, native_build
from .config import DEFAULT_CONFIG_PATH, load_configuration
from .diagnostics import enable_kernel_logging

EXIT_INVALID_BENCHMARK = 1
EXIT_BACKEND_UNAVAILABLE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="wavcorr PCM similarity and overlap-add kernels")
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Path to configuration file")
    parser.add_argument(
        "--log-calls",
        action="store_true",
        help="Append every checked kernel call to logs/kernel_calls.log",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("info", help="Report which kernel backends are available")

    bench = sub.add_parser("bench", help="Time the kernels on synthetic PCM data")
    bench.add_argument("--sizes", type=int, nargs="*", help="Buffer sizes (samples) to benchmark")
    bench.add_argument("--iterations", type=int, help="Timed calls per measurement")
    bench.add_argument("--seed", type=int, help="RNG seed for synthetic data")
    bench.add_argument("--kernels", nargs="*", default=None, help="Optional subset of kernel names")
    bench.add_argument(
        "--backend",
        choices=("auto", "c", "python", "all"),
        help="Backend to time; 'all' times every available backend",
    )
    bench.add_argument("--csv", type=Path, help="Optional path to write the raw results as CSV")
    bench.add_argument("--list", action="store_true", help="List available kernel names and exit")
    return parser


def _run_info() -> int:
    config = native_build.get_build_config()
    if c_kernels.AVAILABLE:
        print("C backend: available")
    else:
        reason = (c_kernels.UNAVAILABLE_REASON or "unknown reason").splitlines()[0]
        print(f"C backend: unavailable ({reason})")
    print("Python backend: available")
    print(f"Default backend: {c_kernels.resolve_backend('auto')}")
    print(f"C compiler: {config.c_compiler or 'not found'}")
    print(f"Compile args: {' '.join(config.compile_args) or '(none)'}")
    print(f"Link args: {' '.join(config.link_args) or '(none)'}")
    return 0


def _run_bench(args: argparse.Namespace, app_config) -> int:
    from .benchmarks import KERNEL_BENCHMARKS, format_table, run_kernel_benchmarks

    if args.list:
        for name in sorted(KERNEL_BENCHMARKS):
            print(name)
        return 0

    bench_config = app_config.benchmark
    backend = args.backend or app_config.kernels.backend
    if backend == "all":
        backends = None
    else:
        try:
            backends = [c_kernels.resolve_backend(backend)]
        except RuntimeError as exc:
            print(str(exc))
            return EXIT_BACKEND_UNAVAILABLE

    try:
        results = run_kernel_benchmarks(
            args.sizes or bench_config.sizes,
            iterations=bench_config.iterations if args.iterations is None else args.iterations,
            backends=backends,
            kernel_names=args.kernels,
            seed=bench_config.seed if args.seed is None else args.seed,
            sample_rate=float(app_config.sample_rate),
            window_min=bench_config.window_min,
            window_max=bench_config.window_max,
        )
    except (KeyError, ValueError) as exc:
        message = exc.args[0] if exc.args else str(exc)
        print(f"error: {message}", file=sys.stderr)
        return EXIT_INVALID_BENCHMARK

    print(format_table(results))
    if args.csv is not None:
        results.to_csv(args.csv, index=False)
        print(f"Wrote {len(results)} rows to {args.csv}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    app_config = load_configuration(args.config)
    enable_kernel_logging(args.log_calls or app_config.kernels.log_calls)

    if args.command == "info":
        return _run_info()
    return _run_bench(args, app_config)


__all__ = ["main", "build_parser"]
