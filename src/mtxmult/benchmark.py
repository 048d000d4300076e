"""
Wall-clock benchmark of single-threaded versus tiled multi-threaded multiply.

Both phases multiply the same pair of operands; with the default all-ones
fill every result cell equals n, which keeps the workload deterministic and
the timings comparable across runs.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .config import DEFAULT_CONFIG, HarnessConfig
from .matrix import Matrix
from .parallel import TiledMultiplier, validate_parameters

logger = logging.getLogger(__name__)


def time_call(fn: Callable[..., Any], *args, **kwargs) -> tuple[Any, float]:
    """
    Call fn and measure its wall-clock duration.

    Returns:
        (return value, elapsed milliseconds)
    """
    start = time.perf_counter()
    result = fn(*args, **kwargs)
    elapsed_ms = (time.perf_counter() - start) * 1000.0
    return result, elapsed_ms


@dataclass
class BenchmarkResult:
    """Timings and agreement check for one harness run."""

    n: int
    s: int
    st_ms: float
    mt_ms: float
    match: bool
    """True when both phases produced identical matrices."""

    @property
    def grid(self) -> int:
        return self.n // self.s

    @property
    def tasks(self) -> int:
        """Worker tasks spawned by the multi-threaded phase (g^3)."""
        return self.grid**3

    @property
    def speedup(self) -> float:
        """Single-threaded time over multi-threaded time."""
        return self.st_ms / self.mt_ms if self.mt_ms > 0 else float("inf")


def make_operand(n: int, config: HarnessConfig, rng=None) -> Matrix:
    m = Matrix(n)
    m.fill(config.fill, rng)
    return m


def run_benchmark(
    n: int,
    s: int,
    config: HarnessConfig | None = None,
    echo: Callable[[str], None] = print,
) -> BenchmarkResult:
    """
    Time both multiply modes on two n x n operands.

    Args:
        n: Matrix dimension
        s: Tile size for the multi-threaded phase
        config: Harness configuration (fill, kernel, schedule, ...)
        echo: Sink for the progress lines (print by default)

    Returns:
        BenchmarkResult with both timings

    Raises:
        InvalidParametersError: n or s rejected before any operand is built
    """
    config = config if config is not None else DEFAULT_CONFIG
    validate_parameters(n, s, config.min_dim)

    echo(f"Parameters: n={n}; s={s}")

    rng = config.rng()
    mtx_a = make_operand(n, config, rng)
    mtx_b = make_operand(n, config, rng)
    if config.display:
        _display(echo, "Matrix A", mtx_a)
        _display(echo, "Matrix B", mtx_b)

    echo("Single-threaded multiplication...")
    st_result, st_ms = time_call(Matrix.st_multiply, mtx_a, mtx_b, config.kernel)
    echo(f"Done! It took {st_ms:.0f}ms")
    if config.display:
        _display(echo, "Matrix C", st_result)

    echo("Multi-threaded multiplication...")
    multiplier = TiledMultiplier(config)
    mt_result, mt_ms = time_call(multiplier.multiply, mtx_a, mtx_b, s)
    echo(f"Done! It took {mt_ms:.0f}ms")
    if config.display:
        _display(echo, "Matrix C", mt_result)

    result = BenchmarkResult(n=n, s=s, st_ms=st_ms, mt_ms=mt_ms, match=st_result == mt_result)
    logger.info(
        "n=%d s=%d: st=%.3fms mt=%.3fms speedup=%.2fx match=%s",
        n,
        s,
        st_ms,
        mt_ms,
        result.speedup,
        result.match,
    )
    return result


def _display(echo: Callable[[str], None], title: str, matrix: Matrix) -> None:
    echo(title)
    echo(matrix.render())
    echo("")
