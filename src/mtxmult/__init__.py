"""
Mtxmult - single- versus multi-threaded tiled matrix multiplication benchmark.

This package splits an n x n integer matrix multiply into s x s tile products,
runs every partial product as an independent worker task, and times the
result against a single-threaded triple loop.
"""

from .config import (
    DEFAULT_CONFIG,
    FAST_CONFIG,
    PIPELINED_CONFIG,
    Accumulation,
    FillPolicy,
    HarnessConfig,
    Kernel,
    Schedule,
)
from .errors import (
    FormatError,
    InconsistentTileSizeError,
    InvalidParametersError,
    InvalidTileSizeError,
    MtxMultError,
    RangeError,
    WorkerError,
)
from .matrix import Matrix
from .parallel import TiledMultiplier, mt_multiply, validate_parameters
from .tiling import merge, slice_all, slice_tile

__version__ = "0.1.0"
__all__ = [
    # Configuration
    "HarnessConfig",
    "FillPolicy",
    "Kernel",
    "Schedule",
    "Accumulation",
    "DEFAULT_CONFIG",
    "PIPELINED_CONFIG",
    "FAST_CONFIG",
    # Errors
    "MtxMultError",
    "InvalidParametersError",
    "InvalidTileSizeError",
    "FormatError",
    "RangeError",
    "InconsistentTileSizeError",
    "WorkerError",
    # Core
    "Matrix",
    "slice_tile",
    "slice_all",
    "merge",
    "TiledMultiplier",
    "mt_multiply",
    "validate_parameters",
    "__version__",
]
