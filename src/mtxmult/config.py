"""
Mtxmult Configuration Module

This module defines the configuration dataclass for the matrix multiplication
benchmark harness. All run parameters are specified here and propagate through
the matrix buffer, the tile partitioner and the parallel orchestrator.

Note: The harness compares a single-threaded triple-loop multiply against a
tiled multiply where every partial tile product A[i][k] x B[k][j] runs as an
independent worker task. The schedule and accumulation modes refer to how
those worker tasks are dispatched and how their partial results reach the
shared output tile.
"""

from argparse import Namespace
from dataclasses import dataclass
from enum import Enum

import numpy as np

MAX_INT = 10
"""Exclusive upper bound for randomly filled cells."""

FORMAT_COLS = 4
"""Column width used when rendering a matrix as text."""

MIN_DIM = 4
"""Smallest top-level matrix dimension accepted by the harness."""


class FillPolicy(Enum):
    """Initial contents of a freshly created operand."""

    ZEROS = "zeros"
    ONES = "ones"
    RANDOM = "random"  # uniform in [0, MAX_INT)


class Kernel(Enum):
    """
    Multiply-accumulate kernel used for every tile product.

    - LOOPS: Reference i-j-k triple loop over the flat buffers
    - NUMPY: Single numpy.matmul call (releases the GIL, so threads overlap)

    Both kernels produce identical integer results.
    """

    LOOPS = "loops"
    NUMPY = "numpy"


class Schedule(Enum):
    """
    Dispatch order for the worker tasks of a tiled multiply.

    For C = A x B on a g x g tile grid:
    - GROUPED: One output tile (i, j) at a time; its g tasks run concurrently
      and the next tile is not dispatched until the group's barrier releases
    - PIPELINED: All g^3 tasks are dispatched up front and joined once
    """

    GROUPED = "grouped"
    PIPELINED = "pipelined"


class Accumulation(Enum):
    """
    How partial tile products are folded into the shared output tile.

    - REDUCE: Each worker owns a private partial tile; the orchestrator sums
      the partials in k order after the barrier
    - LOCKED: Each worker adds its private partial into the output tile while
      holding that tile's lock
    """

    REDUCE = "reduce"
    LOCKED = "locked"


@dataclass
class HarnessConfig:
    """
    Configuration for the benchmark harness.

    Example:
        >>> config = HarnessConfig(schedule=Schedule.PIPELINED, max_workers=8)
        >>> config.workers_for(grid=4)  # 8
    """

    # =========================================================================
    # Operands
    # =========================================================================
    fill: FillPolicy = FillPolicy.ONES
    """Contents of both operands (all-ones gives a deterministic workload)."""

    seed: int | None = None
    """Seed for FillPolicy.RANDOM (None draws fresh entropy)."""

    min_dim: int = MIN_DIM
    """Smallest accepted top-level dimension n."""

    # =========================================================================
    # Compute
    # =========================================================================
    kernel: Kernel = Kernel.LOOPS
    """Multiply-accumulate kernel for both single- and multi-threaded runs."""

    schedule: Schedule = Schedule.GROUPED
    """
    Dispatch order of worker tasks.

    GROUPED keeps the one-output-tile-at-a-time barrier and is the default
    so timings stay comparable between runs of the harness.
    """

    accumulation: Accumulation = Accumulation.REDUCE
    """Strategy for folding partial products into the output tile."""

    max_workers: int | None = None
    """Worker pool size (None = tile grid width, one thread per k)."""

    # =========================================================================
    # Output
    # =========================================================================
    display: bool = False
    """Print operands and results after each phase."""

    def workers_for(self, grid: int) -> int:
        """Pool size for a tile grid of the given width."""
        return self.max_workers if self.max_workers is not None else grid

    def rng(self) -> np.random.Generator:
        """Random generator for FillPolicy.RANDOM."""
        return np.random.default_rng(self.seed)

    @classmethod
    def from_namespace(cls, args: Namespace) -> "HarnessConfig":
        """Create from argparse Namespace with defaults for missing attrs."""
        return cls(
            fill=FillPolicy(getattr(args, "fill", FillPolicy.ONES.value)),
            seed=getattr(args, "seed", None),
            kernel=Kernel(getattr(args, "kernel", Kernel.LOOPS.value)),
            schedule=Schedule(getattr(args, "schedule", Schedule.GROUPED.value)),
            accumulation=Accumulation(getattr(args, "accumulation", Accumulation.REDUCE.value)),
            max_workers=getattr(args, "workers", None),
            display=getattr(args, "display", False),
        )

    def __post_init__(self):
        """Validate configuration parameters."""
        assert self.min_dim > 0, "min_dim must be positive"
        assert self.max_workers is None or self.max_workers > 0, "max_workers must be positive"
        assert isinstance(self.kernel, Kernel), "kernel must be a Kernel"
        assert isinstance(self.schedule, Schedule), "schedule must be a Schedule"
        assert isinstance(self.accumulation, Accumulation), "accumulation must be an Accumulation"


# Pre-defined configurations
DEFAULT_CONFIG = HarnessConfig()
"""Default configuration: grouped schedule, reduction, reference kernel."""

PIPELINED_CONFIG = HarnessConfig(schedule=Schedule.PIPELINED)
"""Full-grid parallelism across output tiles."""

FAST_CONFIG = HarnessConfig(
    kernel=Kernel.NUMPY,
    schedule=Schedule.PIPELINED,
)
"""Vectorized tile kernel with full-grid dispatch, for large n."""
