#!/usr/bin/env python3
"""
Tile Size Speed-up Sweep.

Runs the benchmark harness for one matrix size n and every tile size s that
evenly divides it, then prints a table of single- versus multi-threaded
timings:

       s   grid   tasks     st (ms)     mt (ms)   speed-up
    ----  -----  ------  ----------  ----------  ---------
       4     32   32768         ...         ...        ...
       8     16    4096         ...         ...        ...

Small tiles mean many tiny tasks (g^3 of them for a g x g grid), so dispatch
overhead dominates; one large tile degenerates to a single worker. The
interesting region is in between.

Usage:
    python 01_speedup_sweep.py [--size N] [--kernel loops|numpy]
                               [--schedule grouped|pipelined] [--repeat R]
                               [--plot FILE]

Requirements:
    pip install matplotlib   (only for --plot)
"""

import argparse
import sys

try:
    import matplotlib.pyplot as plt

    HAS_MATPLOTLIB = True
except ImportError:
    HAS_MATPLOTLIB = False

from mtxmult import HarnessConfig, Kernel, Schedule
from mtxmult.benchmark import BenchmarkResult, run_benchmark


def tile_sizes(n: int) -> list[int]:
    """All s with n % s == 0."""
    return [s for s in range(1, n + 1) if n % s == 0]


def sweep(n: int, config: HarnessConfig, repeat: int, min_tile: int) -> list[BenchmarkResult]:
    """Best-of-`repeat` timings for every dividing tile size >= min_tile."""
    results = []
    for s in tile_sizes(n):
        if s < min_tile:
            continue
        best = None
        for _ in range(repeat):
            result = run_benchmark(n, s, config, echo=lambda _line: None)
            if not result.match:
                raise RuntimeError(f"results differ for n={n}, s={s}")
            if best is None or result.mt_ms < best.mt_ms:
                best = result
        results.append(best)
    return results


def print_table(results: list[BenchmarkResult]) -> None:
    print(f"{'s':>6}  {'grid':>5}  {'tasks':>6}  {'st (ms)':>10}  {'mt (ms)':>10}  {'speed-up':>9}")
    print(f"{'-' * 6}  {'-' * 5}  {'-' * 6}  {'-' * 10}  {'-' * 10}  {'-' * 9}")
    for r in results:
        print(
            f"{r.s:>6}  {r.grid:>5}  {r.tasks:>6}  {r.st_ms:>10.1f}  {r.mt_ms:>10.1f}  "
            f"{r.speedup:>8.2f}x"
        )


def plot(results: list[BenchmarkResult], n: int, output: str) -> None:
    fig, ax = plt.subplots(figsize=(7, 4))
    sizes = [r.s for r in results]
    ax.plot(sizes, [r.speedup for r in results], marker="o")
    ax.axhline(1.0, color="gray", linestyle="--", linewidth=1)
    ax.set_xscale("log", base=2)
    ax.set_xlabel("tile size s")
    ax.set_ylabel("speed-up (st / mt)")
    ax.set_title(f"Tiled multi-threaded speed-up, n={n}")
    fig.tight_layout()
    fig.savefig(output)
    print(f"Saved plot to {output}")


def main():
    parser = argparse.ArgumentParser(
        description="Sweep tile sizes for one matrix size",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--size", type=int, default=128, help="Matrix size n (default: 128)")
    parser.add_argument(
        "--min-tile", type=int, default=4, help="Smallest tile size to try (default: 4)"
    )
    parser.add_argument(
        "--kernel",
        choices=[k.value for k in Kernel],
        default=Kernel.LOOPS.value,
        help="Tile multiply kernel (default: loops)",
    )
    parser.add_argument(
        "--schedule",
        choices=[s.value for s in Schedule],
        default=Schedule.GROUPED.value,
        help="Worker dispatch schedule (default: grouped)",
    )
    parser.add_argument(
        "--repeat", type=int, default=3, help="Runs per tile size, best kept (default: 3)"
    )
    parser.add_argument("--plot", type=str, default=None, metavar="FILE", help="Save a plot")
    args = parser.parse_args()

    if args.plot and not HAS_MATPLOTLIB:
        print("Error: matplotlib is required for --plot.")
        print("Install with: pip install matplotlib")
        sys.exit(1)

    config = HarnessConfig(kernel=Kernel(args.kernel), schedule=Schedule(args.schedule))
    print(f"Sweeping n={args.size} ({args.kernel} kernel, {args.schedule} schedule)\n")
    results = sweep(args.size, config, args.repeat, args.min_tile)
    print_table(results)

    if args.plot:
        plot(results, args.size, args.plot)


if __name__ == "__main__":
    main()
