"""
Parallel multiply orchestrator: C = A x B over an s x s tile grid.

Both operands are cut into g x g tiles (g = n / s). Output tile C[i][j] is
the sum over k of A[i][k] x B[k][j]; each of those g partial products is an
independent worker task, and the g tasks of one output tile form a group:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                 ONE GROUP: OUTPUT TILE C[i][j]                       │
    │                                                                      │
    │   DISPATCH        A[i][0] x B[0][j]  ──► partial 0 ─┐                │
    │   (g tasks)       A[i][1] x B[1][j]  ──► partial 1 ─┤                │
    │                   ...                               ├─► BARRIER      │
    │                   A[i][g-1] x B[g-1][j] ► partial g-1┘     │         │
    │                                                            ▼         │
    │   ACCUMULATE      C[i][j] += partial 0 + ... + partial g-1           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Schedules:
    GROUPED:   groups run one after another; the next group is dispatched
               only after the current barrier releases
    PIPELINED: every task of every group is dispatched at once; each output
               tile is written only by its own group, so the groups never
               contend

Accumulation:
    REDUCE:    workers return private partial tiles, summed in k order by
               the orchestrator thread after the barrier
    LOCKED:    workers add their partial into C[i][j] under a per-tile lock

A failing worker aborts the barrier: queued tasks are cancelled and a
WorkerError is raised to the caller. No partial result is returned.
"""

import logging
import threading
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait

from .config import DEFAULT_CONFIG, MIN_DIM, Accumulation, HarnessConfig, Kernel, Schedule
from .errors import InvalidParametersError, InvalidTileSizeError, WorkerError
from .matrix import Matrix
from .tiling import TileGrid, merge, slice_all

logger = logging.getLogger(__name__)

TaskLabel = tuple[int, int, int]
"""(i, j, k): output tile row, output tile column, contraction index."""


def validate_parameters(n: int, s: int, min_dim: int = MIN_DIM) -> None:
    """
    Reject a tiled multiply request before any work starts.

    Raises:
        InvalidParametersError: n < min_dim
        InvalidTileSizeError: s < 1 or s does not evenly divide n
    """
    if n < min_dim:
        raise InvalidParametersError(f"matrix dimension must be >= {min_dim}, got {n}")
    if s < 1:
        raise InvalidTileSizeError(f"tile size must be >= 1, got {s}")
    if n % s != 0:
        raise InvalidTileSizeError(f"tile size {s} does not evenly divide {n}")


def _partial_product(a_tile: Matrix, b_tile: Matrix, kernel: Kernel) -> Matrix:
    """One worker's contribution: A[i][k] x B[k][j] into a private zeroed tile."""
    partial = Matrix(a_tile.n)
    partial.add_multiply(a_tile, b_tile, kernel)
    return partial


class TiledMultiplier:
    """
    Multi-threaded tiled matrix multiply.

    Statistics from the most recent call are kept for inspection:
    tasks_dispatched, groups_completed and last_grid (tile grid width).

    Example:
        >>> a, b = Matrix.ones(8), Matrix.ones(8)
        >>> c = TiledMultiplier().multiply(a, b, s=2)
        >>> c.get(0, 0)
        8
    """

    def __init__(self, config: HarnessConfig | None = None):
        self.config = config if config is not None else DEFAULT_CONFIG
        self.tasks_dispatched = 0
        self.groups_completed = 0
        self.last_grid = 0

    def multiply(self, a: Matrix, b: Matrix, s: int) -> Matrix:
        """
        Compute A x B by tiles of size s.

        Args:
            a: Left operand (n x n)
            b: Right operand (n x n)
            s: Tile size, must evenly divide n

        Returns:
            New n x n result matrix

        Raises:
            InvalidParametersError: Bad n, s or mismatched operands (raised
                before any worker is created)
            WorkerError: A worker task failed
        """
        cfg = self.config
        n = a.n
        if b.n != n:
            raise InvalidParametersError(f"operand dimensions differ: {a.n} and {b.n}")
        validate_parameters(n, s, cfg.min_dim)

        self.tasks_dispatched = 0
        self.groups_completed = 0

        # Slice the operands and an empty result
        tiles_a = slice_all(a, s)
        tiles_b = slice_all(b, s)
        tiles_c = slice_all(Matrix(n), s)
        g = len(tiles_a)
        self.last_grid = g

        locks = None
        if cfg.accumulation is Accumulation.LOCKED:
            locks = [[threading.Lock() for _ in range(g)] for _ in range(g)]

        workers = cfg.workers_for(g)
        logger.debug(
            "tiled multiply n=%d s=%d grid=%d workers=%d (%s, %s, %s)",
            n,
            s,
            g,
            workers,
            cfg.schedule.value,
            cfg.accumulation.value,
            cfg.kernel.value,
        )

        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="mtxmult")
        try:
            if cfg.schedule is Schedule.GROUPED:
                for i in range(g):
                    for j in range(g):
                        group = self._dispatch(executor, tiles_a, tiles_b, tiles_c, locks, i, j)
                        self._barrier(group)
                        self._accumulate(tiles_c[i][j], group)
            else:
                groups = {
                    (i, j): self._dispatch(executor, tiles_a, tiles_b, tiles_c, locks, i, j)
                    for i in range(g)
                    for j in range(g)
                }
                self._barrier({f: label for group in groups.values() for f, label in group.items()})
                for (i, j), group in groups.items():
                    self._accumulate(tiles_c[i][j], group)
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

        logger.info(
            "tiled multiply n=%d s=%d done: %d groups, %d tasks",
            n,
            s,
            self.groups_completed,
            self.tasks_dispatched,
        )
        return merge(tiles_c)

    # =========================================================================
    # Group Phases
    # =========================================================================

    def _dispatch(
        self,
        executor: ThreadPoolExecutor,
        tiles_a: TileGrid,
        tiles_b: TileGrid,
        tiles_c: TileGrid,
        locks: list[list[threading.Lock]] | None,
        i: int,
        j: int,
    ) -> dict[Future, TaskLabel]:
        """Submit the g tasks of output tile (i, j), in k order."""
        lock = locks[i][j] if locks is not None else None
        group = {}
        for k in range(len(tiles_a)):
            future = executor.submit(
                self._run_task, tiles_a[i][k], tiles_b[k][j], tiles_c[i][j], lock
            )
            group[future] = (i, j, k)
        self.tasks_dispatched += len(group)
        logger.debug("dispatched group C[%d][%d]: %d tasks", i, j, len(group))
        return group

    def _run_task(
        self,
        a_tile: Matrix,
        b_tile: Matrix,
        c_tile: Matrix,
        lock: "threading.Lock | None",
    ) -> Matrix | None:
        partial = _partial_product(a_tile, b_tile, self.config.kernel)
        if lock is None:
            return partial
        with lock:
            c_tile.add(partial)
        return None

    @staticmethod
    def _barrier(tasks: dict[Future, TaskLabel]) -> None:
        """
        Block until every task has finished or one has failed.

        On failure the still-queued tasks are cancelled and the first failure
        (in dispatch order) is raised as a WorkerError.
        """
        done, pending = wait(tasks, return_when=FIRST_EXCEPTION)
        for future, (i, j, k) in tasks.items():
            if future not in done:
                continue
            exc = future.exception()
            if exc is not None:
                for p in pending:
                    p.cancel()
                raise WorkerError(f"worker for tile C[{i}][{j}] (k={k}) failed: {exc}") from exc

    def _accumulate(self, c_tile: Matrix, group: dict[Future, TaskLabel]) -> None:
        """Fold a finished group's partials into its output tile."""
        if self.config.accumulation is Accumulation.REDUCE:
            for future in group:
                c_tile.add(future.result())
        self.groups_completed += 1


def mt_multiply(a: Matrix, b: Matrix, s: int, config: HarnessConfig | None = None) -> Matrix:
    """Multi-threaded tiled multiply; see TiledMultiplier.multiply."""
    return TiledMultiplier(config).multiply(a, b, s)
