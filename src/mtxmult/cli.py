"""
Command-line entry point: ``mtxmult n s``.

Usage:
    mtxmult n s [--display] [--fill ones|zeros|random] [--seed SEED]
                [--kernel loops|numpy] [--schedule grouped|pipelined]
                [--accumulation reduce|locked] [--workers N]
                [--verify] [--log-level LEVEL]

    n   size of the matrices (n >= 4)
    s   size of each slice (n % s = 0)
"""

import argparse
import logging
import sys

from .benchmark import run_benchmark
from .config import MIN_DIM, Accumulation, FillPolicy, HarnessConfig, Kernel, Schedule
from .errors import InvalidParametersError, MtxMultError
from .log import LOG_LEVELS, setup_logging
from .parallel import validate_parameters

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mtxmult",
        description="Multithreaded matrix multiplication performance evaluation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Examples:\n  mtxmult 256 64\n  mtxmult 512 128 --kernel numpy --schedule pipelined",
    )
    parser.add_argument("n", type=int, help=f"size of the matrices (n >= {MIN_DIM})")
    parser.add_argument("s", type=int, help="size of each slice (n %% s = 0)")

    group = parser.add_argument_group("Operands")
    group.add_argument(
        "--fill",
        choices=[p.value for p in FillPolicy],
        default=FillPolicy.ONES.value,
        help="Operand contents (default: ones)",
    )
    group.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for --fill random",
    )
    group.add_argument(
        "--display",
        action="store_true",
        help="Print the operands and results",
    )

    group = parser.add_argument_group("Multi-threaded Execution")
    group.add_argument(
        "--kernel",
        choices=[k.value for k in Kernel],
        default=Kernel.LOOPS.value,
        help="Tile multiply kernel (default: loops)",
    )
    group.add_argument(
        "--schedule",
        choices=[s.value for s in Schedule],
        default=Schedule.GROUPED.value,
        help="Run output tiles one group at a time or all at once (default: grouped)",
    )
    group.add_argument(
        "--accumulation",
        choices=[a.value for a in Accumulation],
        default=Accumulation.REDUCE.value,
        help="Fold partial products by reduction or under a tile lock (default: reduce)",
    )
    group.add_argument(
        "--workers",
        type=int,
        default=None,
        metavar="N",
        help="Worker pool size (default: n / s)",
    )

    parser.add_argument(
        "--verify",
        action="store_true",
        help="Check both phases agree and report the speed-up",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        validate_parameters(args.n, args.s)
    except InvalidParametersError as e:
        parser.error(str(e))
    if args.workers is not None and args.workers < 1:
        parser.error("--workers must be >= 1")

    setup_logging(args.log_level)
    config = HarnessConfig.from_namespace(args)

    try:
        result = run_benchmark(args.n, args.s, config)
    except MtxMultError as e:
        logger.error("benchmark failed: %s", e)
        return 1

    if args.verify:
        if not result.match:
            print("Results differ!")
            return 1
        print(f"Results match. Speed-up: {result.speedup:.2f}x ({result.tasks} tasks)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
